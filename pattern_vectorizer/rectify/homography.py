"""
Projective homography between two quadrilaterals.
"""

import itertools
from typing import Sequence

import numpy as np

from pattern_vectorizer.shared.errors import GeometryError
from pattern_vectorizer.shared.models import PointLike, to_point

# Relative tolerance for collinearity, scaled by the squared extent of the points
COLLINEAR_TOLERANCE = 1e-9


def as_point_array(points: Sequence[PointLike]) -> np.ndarray:
    """Convert points or (x, y) pairs to a float64 array of shape (N, 2)."""
    if isinstance(points, np.ndarray):
        return points.astype(np.float64).reshape(-1, 2)
    coords = [to_point(p).as_tuple() for p in points]
    return np.array(coords, dtype=np.float64).reshape(-1, 2)


def order_corners(points: Sequence[PointLike]) -> np.ndarray:
    """
    Order four corners as top-left, top-right, bottom-right, bottom-left.

    Uses the coordinate sum (TL smallest, BR largest) and difference
    (TR has the smallest y - x, BL the largest).
    """
    pts = as_point_array(points)
    if len(pts) != 4:
        raise GeometryError(f"Expected 4 corner points, got {len(pts)}")

    ordered = np.zeros((4, 2), dtype=np.float64)
    s = pts.sum(axis=1)
    diff = np.diff(pts, axis=1).ravel()
    ordered[0] = pts[np.argmin(s)]
    ordered[2] = pts[np.argmax(s)]
    ordered[1] = pts[np.argmin(diff)]
    ordered[3] = pts[np.argmax(diff)]

    if len({tuple(p) for p in ordered}) != 4:
        raise GeometryError("Corner points cannot be ordered unambiguously")
    return ordered


def check_quadrilateral(pts: np.ndarray) -> None:
    """Raise GeometryError if any three of the four points are collinear."""
    extent = float(np.ptp(pts, axis=0).max()) if len(pts) else 0.0
    if extent == 0.0:
        raise GeometryError("Quadrilateral has zero extent")

    tolerance = COLLINEAR_TOLERANCE * extent * extent
    for a, b, c in itertools.combinations(range(4), 3):
        ab = pts[b] - pts[a]
        ac = pts[c] - pts[a]
        cross = ab[0] * ac[1] - ab[1] * ac[0]
        if abs(cross) <= tolerance:
            raise GeometryError(
                f"Degenerate quadrilateral: points {a}, {b}, {c} are collinear"
            )


def compute_homography(
    src_points: Sequence[PointLike],
    dst_points: Sequence[PointLike],
) -> np.ndarray:
    """
    Solve the 3x3 homography mapping four source points onto four targets.

    Builds the eight correspondence equations (two per point pair) with
    h33 fixed to 1 and solves the resulting 8x8 system.

    Args:
        src_points: Four source points
        dst_points: Four destination points, same order

    Returns:
        3x3 matrix H with H[2, 2] == 1

    Raises:
        GeometryError: If either quadrilateral is degenerate
    """
    src = as_point_array(src_points)
    dst = as_point_array(dst_points)
    if len(src) != 4 or len(dst) != 4:
        raise GeometryError(
            f"Homography needs exactly 4 point pairs, got {len(src)} and {len(dst)}"
        )
    check_quadrilateral(src)
    check_quadrilateral(dst)

    a = np.zeros((8, 8), dtype=np.float64)
    b = np.zeros(8, dtype=np.float64)
    for i, ((sx, sy), (dx, dy)) in enumerate(zip(src, dst)):
        a[2 * i] = [sx, sy, 1, 0, 0, 0, -dx * sx, -dx * sy]
        a[2 * i + 1] = [0, 0, 0, sx, sy, 1, -dy * sx, -dy * sy]
        b[2 * i] = dx
        b[2 * i + 1] = dy

    try:
        h = np.linalg.solve(a, b)
    except np.linalg.LinAlgError as e:
        raise GeometryError(f"Homography system is singular: {e}") from e

    matrix = np.append(h, 1.0).reshape(3, 3)
    if not np.all(np.isfinite(matrix)) or abs(np.linalg.det(matrix)) < 1e-12:
        raise GeometryError("Homography is not invertible")
    return matrix


def apply_homography(matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    """
    Map (N, 2) points through a homography.

    Raises:
        GeometryError: If a point maps to infinity
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    homogeneous = np.hstack([pts, np.ones((len(pts), 1))]) @ matrix.T
    w = homogeneous[:, 2]
    if np.any(np.abs(w) < 1e-12):
        raise GeometryError("Point maps to infinity under homography")
    return homogeneous[:, :2] / w[:, None]
