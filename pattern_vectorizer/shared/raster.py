"""
Pixel buffer helpers.

A pixel buffer is a ``uint8`` array of shape ``(height, width, 4)``.
Grayscale intermediates keep R == G == B; binary masks hold 0 or 255 in the
colour channels with alpha fixed at 255.
"""

import numpy as np


def ensure_rgba(image: np.ndarray) -> np.ndarray:
    """
    Return a fresh RGBA ``uint8`` copy of an image.

    Accepts grayscale ``(h, w)``, RGB ``(h, w, 3)`` and RGBA ``(h, w, 4)``.
    """
    image = np.asarray(image)
    if image.dtype != np.uint8:
        raise ValueError(f"Expected uint8 pixels, got {image.dtype}")

    if image.ndim == 2:
        rgba = np.empty(image.shape + (4,), dtype=np.uint8)
        rgba[..., :3] = image[..., None]
        rgba[..., 3] = 255
        return rgba

    if image.ndim != 3:
        raise ValueError(f"Unexpected image shape: {image.shape}")

    if image.shape[2] == 4:
        return image.copy()
    if image.shape[2] == 3:
        rgba = np.empty(image.shape[:2] + (4,), dtype=np.uint8)
        rgba[..., :3] = image
        rgba[..., 3] = 255
        return rgba

    raise ValueError(f"Unexpected image shape: {image.shape}")


def gray_channel(raster: np.ndarray) -> np.ndarray:
    """Red channel as float64; for grayscale-as-RGBA it carries the gray value."""
    return raster[..., 0].astype(np.float64)


def from_gray(values: np.ndarray, alpha: np.ndarray | None = None) -> np.ndarray:
    """Build a grayscale-as-RGBA buffer from a 2D ``uint8`` array."""
    rgba = np.empty(values.shape + (4,), dtype=np.uint8)
    rgba[..., 0] = values
    rgba[..., 1] = values
    rgba[..., 2] = values
    rgba[..., 3] = 255 if alpha is None else alpha
    return rgba


def mask_to_raster(mask: np.ndarray) -> np.ndarray:
    """Binary mask buffer: 255 where ``mask`` is true, alpha 255."""
    return from_gray(np.where(mask, 255, 0).astype(np.uint8))


def to_uint8(values: np.ndarray) -> np.ndarray:
    """Round to nearest and clamp into 0..255."""
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def foreground(raster: np.ndarray) -> np.ndarray:
    """Boolean mask of pixels whose first channel is 255."""
    if raster.ndim == 3:
        return raster[..., 0] == 255
    return raster == 255
