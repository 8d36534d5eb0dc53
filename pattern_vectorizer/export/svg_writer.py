"""
SVG export of traced outlines on an A4 sheet.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

import svg

from pattern_vectorizer.export.layout import PageTransform
from pattern_vectorizer.shared.config import ExportConfig
from pattern_vectorizer.shared.models import Polygon

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

GRID_MINOR_COLOR = "#e5e7eb"
GRID_MAJOR_COLOR = "#9ca3af"
FRAME_COLOR = "#374151"
TEXT_COLOR = "#1f2937"


def _grid_lines(width: float, height: float, step: float, color: str, stroke_width: float) -> list[svg.Element]:
    lines: list[svg.Element] = []
    x = 0.0
    while x <= width:
        lines.append(svg.Line(x1=round(x, 3), y1=0, x2=round(x, 3), y2=round(height, 3),
                              stroke=color, stroke_width=stroke_width))
        x += step
    y = 0.0
    while y <= height:
        lines.append(svg.Line(x1=0, y1=round(y, 3), x2=round(width, 3), y2=round(y, 3),
                              stroke=color, stroke_width=stroke_width))
        y += step
    return lines


def polygon_path(polygon: Polygon, transform: PageTransform, color: str) -> Optional[svg.Path]:
    """Closed ``M ... L ... Z`` path for one polygon, or None below two points."""
    if len(polygon) < 2:
        return None

    page = transform.apply_polygon(polygon).points
    commands: list[svg.PathData] = [svg.M(round(page[0].x, 3), round(page[0].y, 3))]
    commands.extend(svg.L(round(p.x, 3), round(p.y, 3)) for p in page[1:])
    commands.append(svg.Z())

    return svg.Path(
        d=commands,
        fill="none",
        stroke=color,
        stroke_width=2,
        stroke_linecap="round",
        stroke_linejoin="round",
    )


class SVGWriter:
    """Writes outlines as one closed path per polygon."""

    def __init__(self, config: Optional[ExportConfig] = None):
        self.config = config or ExportConfig()

    def render(
        self,
        polygons: Sequence[Polygon],
        transform: Optional[PageTransform] = None,
        customer_name: str = "",
        issued: Optional[date] = None,
    ) -> str:
        """
        Build the SVG document.

        Args:
            polygons: Pixel-space outlines
            transform: Pixel to page mapping (identity when omitted)
            customer_name: Printed under the title
            issued: Date printed in the footer (today when omitted)

        Returns:
            SVG document text
        """
        config = self.config
        transform = transform or PageTransform.identity(config)
        issued = issued or date.today()

        width = transform.page_width_px
        height = transform.page_height_px
        mm = transform.pixels_per_mm

        elements: list[svg.Element] = []
        elements.extend(_grid_lines(width, height, config.grid_minor_mm * mm, GRID_MINOR_COLOR, 0.5))
        elements.extend(_grid_lines(width, height, config.grid_major_mm * mm, GRID_MAJOR_COLOR, 1))
        elements.append(svg.Rect(x=0, y=0, width=round(width, 3), height=round(height, 3),
                                 fill="none", stroke=FRAME_COLOR, stroke_width=2))

        elements.append(svg.Text(
            x=round(width / 2, 3), y=40, text=config.title,
            text_anchor="middle", font_family="sans-serif", font_size=24,
            font_weight="bold", fill=TEXT_COLOR,
        ))
        elements.append(svg.Text(
            x=round(width / 2, 3), y=70, text=f"{config.customer_label}: {customer_name}",
            text_anchor="middle", font_family="sans-serif", font_size=18, fill=TEXT_COLOR,
        ))

        drawn = 0
        for polygon in polygons:
            path = polygon_path(polygon, transform, config.stroke_color)
            if path is not None:
                elements.append(path)
                drawn += 1

        elements.append(svg.Text(
            x=20, y=round(height - 40, 3),
            text=f"{config.date_label}: {issued.strftime('%d/%m/%Y')}",
            font_family="sans-serif", font_size=14, fill=TEXT_COLOR,
        ))
        elements.append(svg.Text(
            x=round(width - 20, 3), y=round(height - 40, 3), text=config.footer_note,
            text_anchor="end", font_family="sans-serif", font_size=14, fill=TEXT_COLOR,
        ))

        document = svg.SVG(
            width=svg.Length(config.page_width_mm, "mm"),
            height=svg.Length(config.page_height_mm, "mm"),
            viewBox=svg.ViewBoxSpec(0, 0, round(width, 3), round(height, 3)),
            elements=elements,
        )

        logger.info(f"SVG export: {drawn} paths")
        return XML_DECLARATION + document.as_str()

    def write(
        self,
        polygons: Sequence[Polygon],
        output_path: str | Path,
        transform: Optional[PageTransform] = None,
        customer_name: str = "",
    ) -> Path:
        """Render and save to ``output_path``."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.render(polygons, transform, customer_name), encoding="utf-8")
        return output_path
