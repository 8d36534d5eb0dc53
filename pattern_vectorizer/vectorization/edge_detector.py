"""
Canny-style edge detection.

Sobel gradients, non-maximum suppression along the gradient direction and
two-threshold hysteresis, producing a binary edge raster.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from pattern_vectorizer.shared.config import EdgeDetectionConfig
from pattern_vectorizer.shared.errors import ConfigurationError
from pattern_vectorizer.shared.raster import ensure_rgba, gray_channel, mask_to_raster
from pattern_vectorizer.vectorization.preprocessor import preprocess

logger = logging.getLogger(__name__)

DEFAULT_LOW_THRESHOLD = 50.0
DEFAULT_HIGH_THRESHOLD = 150.0


@dataclass
class GradientField:
    """Sobel magnitude and direction (radians), zero on the 1px border."""

    magnitude: np.ndarray
    direction: np.ndarray

    @property
    def shape(self) -> tuple[int, int]:
        return self.magnitude.shape


def compute_gradients(raster: np.ndarray) -> GradientField:
    """3x3 Sobel gradients of the gray channel."""
    gray = gray_channel(ensure_rgba(raster))
    height, width = gray.shape

    magnitude = np.zeros((height, width), dtype=np.float64)
    direction = np.zeros((height, width), dtype=np.float64)
    if height < 3 or width < 3:
        return GradientField(magnitude, direction)

    gx = cv2.Sobel(gray, cv2.CV_64F, 1, 0, ksize=3)
    gy = cv2.Sobel(gray, cv2.CV_64F, 0, 1, ksize=3)

    inner = (slice(1, height - 1), slice(1, width - 1))
    gx_in = gx[inner]
    gy_in = gy[inner]
    magnitude[inner] = np.sqrt(gx_in * gx_in + gy_in * gy_in)
    direction[inner] = np.arctan2(gy_in, gx_in)
    return GradientField(magnitude, direction)


def non_maximum_suppression(field: GradientField) -> np.ndarray:
    """
    Keep a magnitude only where it is a maximum along the gradient.

    Directions fold into [0, 180) and fall in four 45 degree bins. With y
    pointing down, a 45 degree gradient points south-east, so that bin
    compares against the NW and SE neighbours.

    A pixel must beat its W, NW, N or NE neighbour strictly and match or
    beat the opposite one. Of two equal magnitudes straddling a step only
    the one toward that first neighbour survives, so the ridge stays one pixel wide.
    """
    mag = field.magnitude
    height, width = mag.shape
    suppressed = np.zeros_like(mag)
    if height < 3 or width < 3:
        return suppressed

    angle = np.degrees(field.direction[1:-1, 1:-1])
    angle = np.where(angle < 0, angle + 180.0, angle)

    center = mag[1:-1, 1:-1]
    west, east = mag[1:-1, :-2], mag[1:-1, 2:]
    north, south = mag[:-2, 1:-1], mag[2:, 1:-1]
    north_west, south_east = mag[:-2, :-2], mag[2:, 2:]
    north_east, south_west = mag[:-2, 2:], mag[2:, :-2]

    horizontal = (angle < 22.5) | (angle >= 157.5)
    diagonal_down = (angle >= 22.5) & (angle < 67.5)
    vertical = (angle >= 67.5) & (angle < 112.5)
    diagonal_up = (angle >= 112.5) & (angle < 157.5)

    neighbour1 = np.select(
        [horizontal, diagonal_down, vertical, diagonal_up],
        [west, north_west, north, north_east],
    )
    neighbour2 = np.select(
        [horizontal, diagonal_down, vertical, diagonal_up],
        [east, south_east, south, south_west],
    )

    keep = (center > neighbour1) & (center >= neighbour2)
    suppressed[1:-1, 1:-1] = np.where(keep, center, 0.0)
    return suppressed


def hysteresis_threshold(
    suppressed: np.ndarray,
    low: float = DEFAULT_LOW_THRESHOLD,
    high: float = DEFAULT_HIGH_THRESHOLD,
) -> np.ndarray:
    """
    Two-threshold classification of a suppressed magnitude field.

    A weak pixel (>= low) becomes an edge when one of its 8 neighbours is
    strong (>= high) in the initial classification. Promotion is a single
    step, so the result does not depend on scan order.

    Returns:
        Boolean edge mask
    """
    if low > high:
        raise ConfigurationError(f"low threshold {low} exceeds high threshold {high}")

    strong = suppressed >= high
    weak = (suppressed >= low) & ~strong

    near_strong = cv2.dilate(strong.astype(np.uint8), np.ones((3, 3), np.uint8)) > 0
    promoted = weak & near_strong

    # The border ring never takes part in promotion
    promoted[0, :] = False
    promoted[-1, :] = False
    promoted[:, 0] = False
    promoted[:, -1] = False

    return strong | promoted


def canny(
    raster: np.ndarray,
    low: float = DEFAULT_LOW_THRESHOLD,
    high: float = DEFAULT_HIGH_THRESHOLD,
) -> np.ndarray:
    """
    Edge raster of an already preprocessed image.

    Returns:
        Binary mask buffer (255 edge, 0 background, alpha 255)
    """
    field = compute_gradients(raster)
    suppressed = non_maximum_suppression(field)
    edges = hysteresis_threshold(suppressed, low, high)
    return mask_to_raster(edges)


def detect_edges(raster: np.ndarray, config: Optional[EdgeDetectionConfig] = None) -> np.ndarray:
    """
    Preprocess ``raster`` and run Canny on the result.

    Args:
        raster: RGBA source image
        config: Thresholds and preprocessing parameters

    Returns:
        Binary edge raster of the same size
    """
    config = config or EdgeDetectionConfig()

    binary = preprocess(raster, config)
    edges = canny(binary, config.low_threshold, config.high_threshold)

    edge_count = int(np.count_nonzero(edges[..., 0]))
    logger.info(
        f"Edge detection: {edge_count} edge pixels "
        f"(low={config.low_threshold}, high={config.high_threshold})"
    )
    return edges


class EdgeDetector:
    """Edge detector bound to a configuration."""

    def __init__(self, config: Optional[EdgeDetectionConfig] = None):
        self.config = config or EdgeDetectionConfig()

    def detect(self, raster: np.ndarray) -> np.ndarray:
        return detect_edges(raster, self.config)
