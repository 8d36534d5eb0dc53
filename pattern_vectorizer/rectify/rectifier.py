"""
Perspective rectification of a photographed quadrilateral.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from pattern_vectorizer.rectify.homography import (
    apply_homography,
    as_point_array,
    compute_homography,
)
from pattern_vectorizer.shared.config import RectifierConfig
from pattern_vectorizer.shared.errors import GeometryError
from pattern_vectorizer.shared.models import PointLike
from pattern_vectorizer.shared.raster import ensure_rgba, to_uint8

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_SIZE = (800, 600)


def destination_corners(width: int, height: int) -> np.ndarray:
    """Output rectangle corners: TL, TR, BR, BL."""
    return np.array(
        [[0, 0], [width, 0], [width, height], [0, height]],
        dtype=np.float64,
    )


def bilinear_sample(source: np.ndarray, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """
    Sample every channel of ``source`` at fractional coordinates.

    Coordinates are clamped to the raster first.
    """
    height, width = source.shape[:2]
    xs = np.clip(xs, 0, width - 1)
    ys = np.clip(ys, 0, height - 1)

    x0 = np.floor(xs).astype(np.intp)
    y0 = np.floor(ys).astype(np.intp)
    x1 = np.minimum(x0 + 1, width - 1)
    y1 = np.minimum(y0 + 1, height - 1)
    fx = (xs - x0)[..., None]
    fy = (ys - y0)[..., None]

    def at(yi: np.ndarray, xi: np.ndarray) -> np.ndarray:
        return source[yi, xi].astype(np.float64)

    top = at(y0, x0) * (1 - fx) + at(y0, x1) * fx
    bottom = at(y1, x0) * (1 - fx) + at(y1, x1) * fx
    return top * (1 - fy) + bottom * fy


def rectify(
    source: np.ndarray,
    corners: Sequence[PointLike],
    output_size: tuple[int, int] = DEFAULT_OUTPUT_SIZE,
) -> np.ndarray:
    """
    Warp the quadrilateral ``corners`` of ``source`` onto a full output raster.

    Args:
        source: Source image (RGBA, RGB or grayscale uint8)
        corners: Four points in order top-left, top-right, bottom-right,
            bottom-left
        output_size: (width, height) of the result

    Returns:
        New RGBA raster of shape (height, width, 4)

    Raises:
        GeometryError: On a wrong point count or a degenerate quadrilateral
    """
    if len(corners) != 4:
        raise GeometryError(f"Rectification needs exactly 4 corner points, got {len(corners)}")

    out_width, out_height = output_size
    if out_width <= 0 or out_height <= 0:
        raise ValueError(f"Invalid output size: {output_size}")

    src = ensure_rgba(source)
    matrix = compute_homography(
        as_point_array(corners),
        destination_corners(out_width, out_height),
    )
    inverse = np.linalg.inv(matrix)

    logger.info(
        f"Rectifying {src.shape[1]}x{src.shape[0]} image to {out_width}x{out_height}"
    )

    grid_x, grid_y = np.meshgrid(
        np.arange(out_width, dtype=np.float64),
        np.arange(out_height, dtype=np.float64),
    )
    dst_points = np.column_stack([grid_x.ravel(), grid_y.ravel()])
    src_points = apply_homography(inverse, dst_points)

    xs = src_points[:, 0].reshape(out_height, out_width)
    ys = src_points[:, 1].reshape(out_height, out_width)

    return to_uint8(bilinear_sample(src, xs, ys))


class PerspectiveRectifier:
    """Rectifier bound to a configured output size."""

    def __init__(self, config: Optional[RectifierConfig] = None):
        self.config = config or RectifierConfig()

    def rectify(self, source: np.ndarray, corners: Sequence[PointLike]) -> np.ndarray:
        return rectify(source, corners, self.config.output_size)

    def homography(self, corners: Sequence[PointLike]) -> np.ndarray:
        """Matrix mapping source coordinates into the output raster."""
        return compute_homography(
            as_point_array(corners),
            destination_corners(*self.config.output_size),
        )
