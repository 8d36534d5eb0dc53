"""
Page layout shared by the exporters.

Maps pixel-space polygons onto an A4 sheet at 1:1 scale. The mapping is an
explicit value handed to every writer.
"""

import logging
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict

from pattern_vectorizer.shared.config import ExportConfig
from pattern_vectorizer.shared.models import Point2D, Polygon, polygon_bounds

logger = logging.getLogger(__name__)


class PageTransform(BaseModel):
    """
    ``page = (pixel - origin) * scale + offset``, in page pixels.

    Page pixels are ``pixels_per_mm`` per millimetre (96 DPI by default).
    """

    model_config = ConfigDict(frozen=True)

    scale: float = 1.0
    origin_x: float = 0.0
    origin_y: float = 0.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    pixels_per_mm: float = 3.78
    page_width_px: float = 210.0 * 3.78
    page_height_px: float = 297.0 * 3.78
    pattern_width_px: float = 0.0
    pattern_height_px: float = 0.0

    @classmethod
    def identity(cls, config: Optional[ExportConfig] = None) -> "PageTransform":
        """Pixel coordinates used as page coordinates unchanged."""
        config = config or ExportConfig()
        return cls(
            pixels_per_mm=config.pixels_per_mm,
            page_width_px=config.page_width_px,
            page_height_px=config.page_height_px,
        )

    @classmethod
    def fit(
        cls,
        polygons: Sequence[Polygon],
        config: Optional[ExportConfig] = None,
        pixels_per_cm: Optional[float] = None,
    ) -> "PageTransform":
        """
        Scale polygons to real size and centre them below the title band.

        Without a calibration the polygons keep their pixel size.

        Args:
            polygons: Pixel-space outlines
            config: Page geometry
            pixels_per_cm: Calibrated image scale

        Returns:
            Transform placing the polygons' bounding box on the page
        """
        config = config or ExportConfig()
        if pixels_per_cm is not None and pixels_per_cm <= 0:
            raise ValueError(f"pixels_per_cm must be positive, got {pixels_per_cm}")

        bounds = polygon_bounds(polygons)
        if bounds is None:
            return cls.identity(config)

        scale = config.pixels_per_mm * 10 / pixels_per_cm if pixels_per_cm else 1.0
        pattern_width = bounds.width * scale
        pattern_height = bounds.height * scale

        available_width = config.page_width_px - 2 * config.margin_px
        available_height = config.page_height_px - config.title_band_px - config.margin_px
        offset_x = (available_width - pattern_width) / 2 + config.margin_px
        offset_y = (available_height - pattern_height) / 2 + config.title_band_px

        if pattern_width > available_width or pattern_height > available_height:
            logger.warning(
                f"Pattern {pattern_width / config.pixels_per_mm:.0f}x"
                f"{pattern_height / config.pixels_per_mm:.0f} mm does not fit the page"
            )

        return cls(
            scale=scale,
            origin_x=bounds.x,
            origin_y=bounds.y,
            offset_x=offset_x,
            offset_y=offset_y,
            pixels_per_mm=config.pixels_per_mm,
            page_width_px=config.page_width_px,
            page_height_px=config.page_height_px,
            pattern_width_px=pattern_width,
            pattern_height_px=pattern_height,
        )

    @property
    def pattern_width_cm(self) -> float:
        return self.pattern_width_px / self.pixels_per_mm / 10

    @property
    def pattern_height_cm(self) -> float:
        return self.pattern_height_px / self.pixels_per_mm / 10

    def apply(self, point: Point2D) -> Point2D:
        return Point2D(
            x=(point.x - self.origin_x) * self.scale + self.offset_x,
            y=(point.y - self.origin_y) * self.scale + self.offset_y,
        )

    def apply_polygon(self, polygon: Polygon) -> Polygon:
        return Polygon(points=[self.apply(p) for p in polygon.points])

    def to_mm(self, point: Point2D) -> tuple[float, float]:
        """Page position of a pixel-space point, in millimetres."""
        page = self.apply(point)
        return (page.x / self.pixels_per_mm, page.y / self.pixels_per_mm)
