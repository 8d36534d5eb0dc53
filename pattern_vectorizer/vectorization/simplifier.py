"""
Polygon simplification (Douglas-Peucker) and contour smoothing.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

from pattern_vectorizer.shared.models import Point2D, Polygon

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 3.0


def perpendicular_distance(point: Point2D, line_start: Point2D, line_end: Point2D) -> float:
    """
    Distance from ``point`` to the infinite line through the two endpoints.

    Falls back to point-to-point distance when the endpoints coincide.
    """
    dx = line_end.x - line_start.x
    dy = line_end.y - line_start.y

    if dx == 0 and dy == 0:
        return point.distance_to(line_start)

    numerator = abs(
        dy * point.x - dx * point.y + line_end.x * line_start.y - line_end.y * line_start.x
    )
    return numerator / math.sqrt(dx * dx + dy * dy)


def douglas_peucker(points: Sequence[Point2D], epsilon: float = DEFAULT_EPSILON) -> list[Point2D]:
    """
    Reduce a point sequence while staying within ``epsilon`` of it.

    Spans are processed from an explicit stack instead of recursion, so
    long traces cannot exhaust the interpreter stack. The farthest point
    from a span's chord splits the span when its distance exceeds
    ``epsilon``; otherwise only the span's endpoints survive.

    Args:
        points: Ordered points
        epsilon: Tolerance in pixels

    Returns:
        Kept points in their original order
    """
    if epsilon < 0:
        raise ValueError(f"epsilon must be non-negative, got {epsilon}")

    n = len(points)
    if n <= 2:
        return list(points)

    keep = [False] * n
    keep[0] = keep[n - 1] = True
    stack = [(0, n - 1)]

    while stack:
        first, last = stack.pop()
        max_distance = 0.0
        max_index = first

        for i in range(first + 1, last):
            distance = perpendicular_distance(points[i], points[first], points[last])
            if distance > max_distance:
                max_distance = distance
                max_index = i

        if max_distance > epsilon:
            keep[max_index] = True
            stack.append((max_index, last))
            stack.append((first, max_index))

    return [p for p, kept in zip(points, keep) if kept]


def simplify(polygon: Polygon, epsilon: float = DEFAULT_EPSILON) -> Polygon:
    """Douglas-Peucker simplification of a polygon's point sequence."""
    return Polygon(points=douglas_peucker(polygon.points, epsilon))


def simplify_all(
    polygons: Sequence[Polygon],
    epsilon: float = DEFAULT_EPSILON,
    workers: Optional[int] = None,
) -> list[Polygon]:
    """
    Simplify every polygon, optionally on a thread pool.

    Output order matches input order either way.
    """
    if workers is None or workers <= 1 or len(polygons) < 2:
        return [simplify(p, epsilon) for p in polygons]

    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(lambda p: simplify(p, epsilon), polygons))


def smooth_contour(polygon: Polygon, window_size: int = 5) -> Polygon:
    """
    Moving-average smoothing over a closed contour.

    Each point becomes the mean of the ``window_size`` points centred on
    it, wrapping around the closure. Polygons shorter than the window are
    returned unchanged.
    """
    points = polygon.points
    n = len(points)
    if window_size < 1:
        raise ValueError(f"window_size must be positive, got {window_size}")
    if n < window_size:
        return polygon

    half = window_size // 2
    count = 2 * half + 1
    smoothed = []
    for i in range(n):
        sum_x = sum_y = 0.0
        for j in range(-half, half + 1):
            p = points[(i + j) % n]
            sum_x += p.x
            sum_y += p.y
        smoothed.append(Point2D(x=sum_x / count, y=sum_y / count))

    return Polygon(points=smoothed)
