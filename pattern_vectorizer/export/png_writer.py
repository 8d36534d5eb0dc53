"""
Raster preview of the printed sheet.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

import cv2
import numpy as np

from pattern_vectorizer.export.layout import PageTransform
from pattern_vectorizer.shared.config import ExportConfig
from pattern_vectorizer.shared.models import Polygon

logger = logging.getLogger(__name__)

# BGR
GRID_MINOR_COLOR = (235, 231, 229)
GRID_MAJOR_COLOR = (175, 163, 156)
FRAME_COLOR = (81, 65, 55)
TEXT_COLOR = (55, 41, 31)


def hex_to_bgr(color: str) -> tuple[int, int, int]:
    """``#rrggbb`` to an OpenCV BGR tuple."""
    value = color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected #rrggbb color, got {color!r}")
    r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    return (b, g, r)


class PNGWriter:
    """
    Draws the sheet (grid, frame, labels, outlines) onto a white canvas.
    """

    def __init__(
        self,
        config: Optional[ExportConfig] = None,
        line_thickness: int = 2,
        font_scale: float = 0.7,
    ):
        self.config = config or ExportConfig()
        self.line_thickness = line_thickness
        self.font_scale = font_scale

    def render(
        self,
        polygons: Sequence[Polygon],
        transform: Optional[PageTransform] = None,
        customer_name: str = "",
        issued: Optional[date] = None,
    ) -> np.ndarray:
        """
        Render the sheet as a BGR image.

        Args:
            polygons: Pixel-space outlines
            transform: Pixel to page mapping (identity when omitted)
            customer_name: Printed under the title
            issued: Date printed in the footer (today when omitted)

        Returns:
            ``(H, W, 3)`` uint8 canvas at page resolution
        """
        config = self.config
        transform = transform or PageTransform.identity(config)
        issued = issued or date.today()

        width = int(round(transform.page_width_px))
        height = int(round(transform.page_height_px))
        canvas = np.full((height, width, 3), 255, dtype=np.uint8)

        self._draw_grid(canvas, config.grid_minor_mm * transform.pixels_per_mm, GRID_MINOR_COLOR)
        self._draw_grid(canvas, config.grid_major_mm * transform.pixels_per_mm, GRID_MAJOR_COLOR)
        cv2.rectangle(canvas, (0, 0), (width - 1, height - 1), FRAME_COLOR, 2)

        self._put_centered(canvas, config.title, 40, self.font_scale * 1.2, 2)
        self._put_centered(canvas, f"{config.customer_label}: {customer_name}", 70, self.font_scale, 1)
        cv2.putText(
            canvas,
            f"{config.date_label}: {issued.strftime('%d/%m/%Y')}",
            (20, height - 40),
            cv2.FONT_HERSHEY_SIMPLEX,
            self.font_scale * 0.8,
            TEXT_COLOR,
            1,
            cv2.LINE_AA,
        )
        self._put_right_aligned(canvas, config.footer_note, height - 40, self.font_scale * 0.8, 1)

        stroke = hex_to_bgr(config.stroke_color)
        for polygon in polygons:
            if len(polygon) < 2:
                continue
            page = transform.apply_polygon(polygon)
            pts = np.array([[int(round(p.x)), int(round(p.y))] for p in page.points], dtype=np.int32)
            cv2.polylines(canvas, [pts], True, stroke, self.line_thickness, cv2.LINE_AA)

        return canvas

    def write(
        self,
        polygons: Sequence[Polygon],
        transform: Optional[PageTransform] = None,
        customer_name: str = "",
    ) -> bytes:
        """Render and encode as PNG bytes."""
        canvas = self.render(polygons, transform, customer_name)
        ok, encoded = cv2.imencode(".png", canvas)
        if not ok:
            raise RuntimeError("PNG encoding failed")
        logger.info(f"PNG export: {canvas.shape[1]}x{canvas.shape[0]}")
        return encoded.tobytes()

    def save(
        self,
        polygons: Sequence[Polygon],
        output_path: str | Path,
        transform: Optional[PageTransform] = None,
        customer_name: str = "",
    ) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(self.write(polygons, transform, customer_name))
        return output_path

    @staticmethod
    def _draw_grid(canvas: np.ndarray, step: float, color: tuple[int, int, int]) -> None:
        height, width = canvas.shape[:2]
        for x in np.arange(0, width, step):
            cv2.line(canvas, (int(x), 0), (int(x), height - 1), color, 1)
        for y in np.arange(0, height, step):
            cv2.line(canvas, (0, int(y)), (width - 1, int(y)), color, 1)

    def _put_centered(self, canvas: np.ndarray, text: str, baseline_y: int, scale: float, thickness: int) -> None:
        (text_width, _), _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, scale, thickness)
        x = max(0, (canvas.shape[1] - text_width) // 2)
        cv2.putText(
            canvas, text, (x, baseline_y), cv2.FONT_HERSHEY_SIMPLEX, scale, TEXT_COLOR, thickness, cv2.LINE_AA
        )

    def _put_right_aligned(self, canvas: np.ndarray, text: str, baseline_y: int, scale: float, thickness: int) -> None:
        if not text:
            return
        (text_width, _), _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, scale, thickness)
        x = max(0, canvas.shape[1] - 20 - text_width)
        cv2.putText(
            canvas, text, (x, baseline_y), cv2.FONT_HERSHEY_SIMPLEX, scale, TEXT_COLOR, thickness, cv2.LINE_AA
        )
