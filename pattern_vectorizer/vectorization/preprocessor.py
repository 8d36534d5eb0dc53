"""
Raster preprocessing ahead of edge detection.

Grayscale reduction, Gaussian smoothing, contrast stretch and adaptive
binarization. Every function returns a new RGBA buffer of the input's size.
"""

import logging
import math
from typing import Optional

import cv2
import numpy as np

from pattern_vectorizer.shared.config import EdgeDetectionConfig
from pattern_vectorizer.shared.raster import ensure_rgba, from_gray, gray_channel, to_uint8

logger = logging.getLogger(__name__)

LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def to_grayscale(raster: np.ndarray) -> np.ndarray:
    """Luminance ``0.299R + 0.587G + 0.114B`` into R, G and B; alpha kept."""
    rgba = ensure_rgba(raster)
    rgb = rgba[..., :3].astype(np.float64)
    gray = rgb[..., 0] * LUMA_WEIGHTS[0] + rgb[..., 1] * LUMA_WEIGHTS[1] + rgb[..., 2] * LUMA_WEIGHTS[2]
    return from_gray(to_uint8(gray), alpha=rgba[..., 3])


def gaussian_kernel(sigma: float) -> np.ndarray:
    """
    1D Gaussian kernel of radius ``ceil(3 * sigma)``, normalized to sum 1.

    Raises:
        ValueError: If sigma is not positive
    """
    if sigma <= 0:
        raise ValueError(f"sigma must be positive, got {sigma}")

    radius = math.ceil(sigma * 3)
    x = np.arange(-radius, radius + 1, dtype=np.float64)
    kernel = np.exp(-(x * x) / (2 * sigma * sigma))
    return kernel / kernel.sum()


def gaussian_blur(raster: np.ndarray, sigma: float) -> np.ndarray:
    """
    Separable Gaussian blur of the gray channel.

    Pixels closer than the kernel radius to any edge are copied unchanged;
    there is no padding or wraparound.
    """
    rgba = ensure_rgba(raster)
    kernel = gaussian_kernel(sigma)
    half = len(kernel) // 2
    height, width = rgba.shape[:2]

    if height <= 2 * half or width <= 2 * half:
        logger.debug(f"Image {width}x{height} smaller than blur kernel, left untouched")
        return rgba

    gray = gray_channel(rgba)
    blurred = cv2.sepFilter2D(gray, cv2.CV_64F, kernel, kernel)
    # Product kernel weight, normally 1 up to rounding
    blurred /= kernel.sum() ** 2

    values = rgba[..., 0].copy()
    values[half:height - half, half:width - half] = to_uint8(
        blurred[half:height - half, half:width - half]
    )
    return from_gray(values, alpha=rgba[..., 3])


def adjust_contrast(raster: np.ndarray, factor: float) -> np.ndarray:
    """``clamp((value - 128) * factor + 128, 0, 255)`` on the gray channel."""
    rgba = ensure_rgba(raster)
    values = (gray_channel(rgba) - 128.0) * factor + 128.0
    return from_gray(to_uint8(values), alpha=rgba[..., 3])


def local_mean(values: np.ndarray, half_width: int) -> np.ndarray:
    """
    Mean over the square window of half-width ``half_width`` around each pixel.

    Windows are clipped at the raster border and averaged over the pixels
    they actually cover.
    """
    height, width = values.shape
    integral = np.zeros((height + 1, width + 1), dtype=np.float64)
    integral[1:, 1:] = np.cumsum(np.cumsum(values, axis=0), axis=1)

    rows = np.arange(height)
    cols = np.arange(width)
    y0 = np.clip(rows - half_width, 0, height)
    y1 = np.clip(rows + half_width + 1, 0, height)
    x0 = np.clip(cols - half_width, 0, width)
    x1 = np.clip(cols + half_width + 1, 0, width)

    sums = (
        integral[y1][:, x1]
        - integral[y0][:, x1]
        - integral[y1][:, x0]
        + integral[y0][:, x0]
    )
    counts = np.outer(y1 - y0, x1 - x0)
    return sums / counts


def adaptive_threshold(raster: np.ndarray, block_size: int = 15, c: float = 10.0) -> np.ndarray:
    """
    Binarize against the local mean: 255 where ``value > mean - c``, else 0.

    Args:
        raster: Grayscale-as-RGBA input
        block_size: Half-width of the square neighbourhood
        c: Constant subtracted from the local mean
    """
    if block_size < 0:
        raise ValueError(f"block_size must be non-negative, got {block_size}")

    rgba = ensure_rgba(raster)
    gray = gray_channel(rgba)
    threshold = local_mean(gray, block_size) - c
    values = np.where(gray > threshold, 255, 0).astype(np.uint8)
    return from_gray(values, alpha=rgba[..., 3])


def preprocess(raster: np.ndarray, config: Optional[EdgeDetectionConfig] = None) -> np.ndarray:
    """Grayscale, blur, contrast and adaptive threshold, in that order."""
    config = config or EdgeDetectionConfig()

    gray = to_grayscale(raster)
    blurred = gaussian_blur(gray, config.blur_sigma)
    contrasted = adjust_contrast(blurred, config.contrast_factor)
    binary = adaptive_threshold(contrasted, config.block_size, config.c)

    logger.debug(
        f"Preprocessed {raster.shape[1]}x{raster.shape[0]} raster "
        f"(sigma={config.blur_sigma}, contrast={config.contrast_factor}, "
        f"block={config.block_size}, C={config.c})"
    )
    return binary
