"""
Contour tracing for vectorization.

Follows edge pixels of a binary raster with Moore-neighbourhood tracing and
turns each connected trace into a closed polygon.
"""

import logging
from typing import Optional, Sequence

import cv2
import numpy as np

from pattern_vectorizer.shared.config import TracingConfig
from pattern_vectorizer.shared.models import Point2D, Polygon, signed_area
from pattern_vectorizer.shared.raster import foreground

logger = logging.getLogger(__name__)

# Compass offsets (dx, dy) in clockwise order: NW, N, NE, E, SE, S, SW, W
DIRECTIONS = (
    (-1, -1), (0, -1), (1, -1), (1, 0),
    (1, 1), (0, 1), (-1, 1), (-1, 0),
)

MIN_CONTOUR_POINTS = 20
MAX_CONTOUR_POINTS = 10000


def polygon_area(points: Sequence[Point2D]) -> float:
    """Unsigned shoelace area of an implicitly closed point sequence."""
    return abs(signed_area(points))


def trace_boundary(
    mask: np.ndarray,
    visited: np.ndarray,
    start_x: int,
    start_y: int,
    max_points: int = MAX_CONTOUR_POINTS,
) -> list[tuple[int, int]]:
    """
    Follow the boundary starting at one foreground pixel.

    Each step searches the 8 neighbours clockwise from ``direction + 1``,
    moves to the first foreground pixel found and sets the running
    direction to ``(found + 6) mod 8``. The trace stops on returning to the
    start pixel, on reaching a (pixel, direction) state already seen, on an
    isolated pixel, or at ``max_points``.

    Args:
        mask: Boolean foreground mask
        visited: Boolean array updated in place with traced pixels
        start_x: Start column
        start_y: Start row
        max_points: Hard cap on the trace length

    Returns:
        Traced pixel coordinates in visiting order
    """
    height, width = mask.shape
    contour: list[tuple[int, int]] = []
    seen: set[tuple[int, int, int]] = set()

    x, y = start_x, start_y
    direction = 0

    while True:
        contour.append((x, y))
        visited[y, x] = True
        seen.add((x, y, direction))

        found = -1
        for i in range(1, 9):
            check = (direction + i) % 8
            dx, dy = DIRECTIONS[check]
            nx, ny = x + dx, y + dy
            if 0 <= nx < width and 0 <= ny < height and mask[ny, nx]:
                x, y = nx, ny
                direction = (check + 6) % 8
                found = check
                break

        if found < 0:
            break
        if (x, y) == (start_x, start_y):
            break
        if (x, y, direction) in seen:
            break
        if len(contour) >= max_points:
            logger.debug(f"Trace from ({start_x}, {start_y}) hit the {max_points} point cap")
            break

    return contour


def trace_contours(
    raster: np.ndarray,
    min_points: int = MIN_CONTOUR_POINTS,
    max_points: int = MAX_CONTOUR_POINTS,
) -> list[Polygon]:
    """
    Convert a binary edge raster into closed polygons.

    The raster is scanned row by row, skipping the 1px border, for
    foreground pixels (value 255). Each 8-connected component is traced
    once, from its first scanned pixel, so a ridge thicker than one pixel
    still gives a single outline. Traces shorter than ``min_points`` are
    discarded. Every polygon is wound clockwise on screen (positive signed
    area with y down).

    Args:
        raster: Binary mask buffer or 2D array
        min_points: Minimum trace length kept
        max_points: Hard cap on each trace

    Returns:
        Polygons sorted by descending area; empty if nothing survives
    """
    mask = foreground(raster)
    height, width = mask.shape
    visited = np.zeros_like(mask, dtype=bool)

    polygons: list[Polygon] = []
    discarded = 0

    _, labels = cv2.connectedComponents(mask.astype(np.uint8), connectivity=8)
    traced: set[int] = set()

    inner = np.zeros_like(mask)
    inner[1:height - 1, 1:width - 1] = mask[1:height - 1, 1:width - 1]

    for y, x in np.argwhere(inner):
        label = int(labels[y, x])
        if label in traced:
            continue
        traced.add(label)

        coords = trace_boundary(mask, visited, int(x), int(y), max_points)
        if len(coords) < min_points:
            discarded += 1
            continue

        polygon = Polygon(points=[Point2D(x=float(cx), y=float(cy)) for cx, cy in coords])
        if polygon.signed_area < 0:
            polygon = polygon.reversed()
        polygons.append(polygon)
        logger.debug(f"Contour with {len(coords)} points from ({x}, {y})")

    polygons.sort(key=lambda p: p.area, reverse=True)

    logger.info(f"Traced {len(polygons)} contours ({discarded} short traces discarded)")
    return polygons


class ContourTracer:
    """Traces contours with configured length limits."""

    def __init__(self, config: Optional[TracingConfig] = None):
        self.config = config or TracingConfig()

    def trace(self, raster: np.ndarray) -> list[Polygon]:
        """Trace contours in a binary edge raster."""
        return trace_contours(raster, self.config.min_points, self.config.max_points)
