"""
Scale calibration from a reference segment of known length.
"""

import logging
from typing import Optional

from pattern_vectorizer.shared.errors import GeometryError
from pattern_vectorizer.shared.models import CalibrationData, Point2D, PointLike, to_point

logger = logging.getLogger(__name__)


def calibration_from(
    point1: PointLike,
    point2: PointLike,
    real_distance_cm: float,
) -> CalibrationData:
    """
    Build validated calibration data.

    Raises:
        GeometryError: If the distance is not positive or the points coincide
    """
    if not real_distance_cm > 0:
        raise GeometryError(f"Real distance must be positive, got {real_distance_cm} cm")

    p1 = to_point(point1)
    p2 = to_point(point2)
    if p1.distance_to(p2) == 0:
        raise GeometryError("Calibration points coincide; pixel distance is zero")

    return CalibrationData(point1=p1, point2=p2, real_distance_cm=real_distance_cm)


def calibrate(point1: PointLike, point2: PointLike, real_distance_cm: float) -> float:
    """
    Pixels per centimetre for a reference segment.

    Args:
        point1: First reference point (pixels)
        point2: Second reference point (pixels)
        real_distance_cm: Known length of the segment

    Returns:
        ``euclidean(point1, point2) / real_distance_cm``
    """
    return calibration_from(point1, point2, real_distance_cm).pixels_per_cm


class ScaleCalibrator:
    """
    Interactive calibration state.

    Points and distance can be set in any order; once all three are present
    ``data`` is rebuilt on every change.
    """

    def __init__(self, real_distance_cm: float = 10.0):
        self._point1: Optional[Point2D] = None
        self._point2: Optional[Point2D] = None
        self._real_distance_cm = real_distance_cm
        self._data: Optional[CalibrationData] = None

    @property
    def data(self) -> Optional[CalibrationData]:
        """Current calibration, or None until both points are set."""
        return self._data

    @property
    def pixels_per_cm(self) -> Optional[float]:
        return self._data.pixels_per_cm if self._data else None

    @property
    def is_complete(self) -> bool:
        return self._data is not None

    def set_point1(self, point: PointLike) -> Optional[CalibrationData]:
        self._point1 = to_point(point)
        return self._recompute()

    def set_point2(self, point: PointLike) -> Optional[CalibrationData]:
        self._point2 = to_point(point)
        return self._recompute()

    def set_real_distance(self, real_distance_cm: float) -> Optional[CalibrationData]:
        if not real_distance_cm > 0:
            raise GeometryError(f"Real distance must be positive, got {real_distance_cm} cm")
        self._real_distance_cm = real_distance_cm
        return self._recompute()

    def add_point(self, point: PointLike) -> Optional[CalibrationData]:
        """Set the next missing point; a third click starts a new segment."""
        if self._point1 is None or self._point2 is not None:
            self._point1 = to_point(point)
            self._point2 = None
            self._data = None
            return None
        return self.set_point2(point)

    def reset(self) -> None:
        self._point1 = None
        self._point2 = None
        self._data = None

    def _recompute(self) -> Optional[CalibrationData]:
        if self._point1 is None or self._point2 is None:
            self._data = None
            return None

        # Clear first so a rejected update never leaves the previous scale behind
        self._data = None
        self._data = calibration_from(self._point1, self._point2, self._real_distance_cm)
        logger.info(
            f"Calibration: {self._data.pixel_distance:.2f} px over "
            f"{self._real_distance_cm} cm = {self._data.pixels_per_cm:.3f} px/cm"
        )
        return self._data
