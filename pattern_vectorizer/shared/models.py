"""
Core data models for the pattern vectorizer.

These models define the geometric values passed between pipeline stages.
All of them are immutable: a stage that needs a different value builds a
new one.
"""

import math
from typing import Iterable, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field


# =============================================================================
# Geometry Models
# =============================================================================

class Point2D(BaseModel):
    """2D point in pixel space."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float

    @classmethod
    def from_tuple(cls, xy: Sequence[float]) -> "Point2D":
        """Create from an (x, y) pair."""
        return cls(x=float(xy[0]), y=float(xy[1]))

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)

    def distance_to(self, other: "Point2D") -> float:
        """Calculate distance to another point."""
        return math.sqrt((self.x - other.x) ** 2 + (self.y - other.y) ** 2)


# Accepted wherever a caller passes a point: a Point2D or an (x, y) pair
PointLike = Union[Point2D, Sequence[float]]


def to_point(point: PointLike) -> Point2D:
    if isinstance(point, Point2D):
        return point
    return Point2D.from_tuple(point)


class Line2D(BaseModel):
    """2D line segment."""

    model_config = ConfigDict(frozen=True)

    start: Point2D
    end: Point2D

    @property
    def length(self) -> float:
        """Length of line segment."""
        return self.start.distance_to(self.end)


class BoundingBox(BaseModel):
    """Axis-aligned bounding box."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(description="X coordinate of top-left corner")
    y: float = Field(description="Y coordinate of top-left corner")
    width: float = Field(description="Width of bounding box")
    height: float = Field(description="Height of bounding box")

    @property
    def x2(self) -> float:
        """Right edge X coordinate."""
        return self.x + self.width

    @property
    def y2(self) -> float:
        """Bottom edge Y coordinate."""
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        """Center point of bounding box."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    def contains(self, x: float, y: float) -> bool:
        """Check if point is inside bounding box."""
        return self.x <= x <= self.x2 and self.y <= y <= self.y2

    @classmethod
    def around(cls, points: Iterable[Point2D]) -> "BoundingBox":
        """Smallest box containing every point."""
        xs: list[float] = []
        ys: list[float] = []
        for p in points:
            xs.append(p.x)
            ys.append(p.y)
        if not xs:
            raise ValueError("Cannot bound an empty point set")
        return cls(
            x=min(xs),
            y=min(ys),
            width=max(xs) - min(xs),
            height=max(ys) - min(ys),
        )


def signed_area(points: Sequence[Point2D]) -> float:
    """
    Shoelace signed area of an implicitly closed point sequence.

    Positive when the sequence runs clockwise on screen (image
    coordinates, y pointing down).
    """
    n = len(points)
    if n < 3:
        return 0.0

    total = 0.0
    for i in range(n):
        j = (i + 1) % n
        total += points[i].x * points[j].y - points[j].x * points[i].y
    return total / 2.0


class Polygon(BaseModel):
    """
    Ordered, implicitly closed point sequence.

    The last point connects back to the first; the closing point is never
    repeated in ``points``.
    """

    model_config = ConfigDict(frozen=True)

    points: list[Point2D] = Field(default_factory=list)

    @classmethod
    def from_tuples(cls, coords: Iterable[Sequence[float]]) -> "Polygon":
        return cls(points=[Point2D.from_tuple(c) for c in coords])

    def __len__(self) -> int:
        return len(self.points)

    @property
    def signed_area(self) -> float:
        return signed_area(self.points)

    @property
    def area(self) -> float:
        """Enclosed area (shoelace formula)."""
        return abs(self.signed_area)

    @property
    def is_clockwise(self) -> bool:
        """True for clockwise winding on screen (y down)."""
        return self.signed_area > 0

    @property
    def bounds(self) -> BoundingBox:
        return BoundingBox.around(self.points)

    def reversed(self) -> "Polygon":
        """Same outline with opposite winding, keeping the start point."""
        if len(self.points) < 2:
            return self
        return Polygon(points=[self.points[0]] + self.points[:0:-1])

    def segments(self) -> list[Line2D]:
        """Consecutive point pairs, closing segment included."""
        n = len(self.points)
        if n < 2:
            return []
        return [
            Line2D(start=self.points[i], end=self.points[(i + 1) % n])
            for i in range(n)
        ]

    def as_tuples(self) -> list[tuple[float, float]]:
        return [p.as_tuple() for p in self.points]


# =============================================================================
# Calibration Models
# =============================================================================

class CalibrationData(BaseModel):
    """
    Reference segment with its known real-world length.

    ``pixels_per_cm`` is derived on every access, so it always reflects the
    current points and distance.
    """

    model_config = ConfigDict(frozen=True)

    point1: Point2D
    point2: Point2D
    real_distance_cm: float = Field(gt=0, description="Known length in cm")

    @property
    def pixel_distance(self) -> float:
        return self.point1.distance_to(self.point2)

    @computed_field  # type: ignore[misc]
    @property
    def pixels_per_cm(self) -> float:
        return self.pixel_distance / self.real_distance_cm

    def cm_to_pixels(self, cm: float) -> float:
        return cm * self.pixels_per_cm

    def pixels_to_cm(self, pixels: float) -> float:
        return pixels / self.pixels_per_cm


def polygon_bounds(polygons: Sequence[Polygon]) -> Optional[BoundingBox]:
    """Bounding box of a polygon set, or None when there are no points."""
    points = [p for polygon in polygons for p in polygon.points]
    if not points:
        return None
    return BoundingBox.around(points)
