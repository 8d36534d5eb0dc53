"""
DXF file writer using ezdxf.
"""

import io
import logging
from pathlib import Path
from typing import Any, Optional, Sequence

import ezdxf
from ezdxf import units

from pattern_vectorizer.export.layout import PageTransform
from pattern_vectorizer.shared.config import ExportConfig
from pattern_vectorizer.shared.models import Polygon

logger = logging.getLogger(__name__)

# AutoCAD color index for red
LAYER_COLOR = 1


class DXFWriter:
    """
    Writes traced outlines as LINE entities in millimetres.

    Every polygon becomes one LINE per edge, closing edge included. DXF is
    y-up, so page coordinates are flipped unless ``flip_y`` is False.
    """

    def __init__(self, config: Optional[ExportConfig] = None, flip_y: bool = True):
        self.config = config or ExportConfig()
        self.flip_y = flip_y

    def write(
        self,
        polygons: Sequence[Polygon],
        transform: Optional[PageTransform] = None,
        title: Optional[str] = None,
    ) -> bytes:
        """
        Write polygons to DXF format.

        Args:
            polygons: Pixel-space outlines
            transform: Pixel to page mapping (identity when omitted)
            title: Stored as the drawing's project name

        Returns:
            DXF file as bytes
        """
        doc = self.build(polygons, transform, title)

        stream = io.StringIO()
        doc.write(stream)
        stream.seek(0)

        return stream.read().encode("utf-8")

    def save(
        self,
        polygons: Sequence[Polygon],
        output_path: str | Path,
        transform: Optional[PageTransform] = None,
        title: Optional[str] = None,
    ) -> Path:
        """Write polygons to ``output_path``."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(self.write(polygons, transform, title))
        return output_path

    def build(
        self,
        polygons: Sequence[Polygon],
        transform: Optional[PageTransform] = None,
        title: Optional[str] = None,
    ) -> Any:
        """Create the ezdxf document without serializing it."""
        transform = transform or PageTransform.identity(self.config)

        doc = ezdxf.new(self.config.dxf_version)
        doc.units = units.MM
        doc.header["$INSUNITS"] = units.MM
        doc.header["$PROJECTNAME"] = (title or self.config.title)[:255]

        layer = self.config.dxf_layer
        if layer not in doc.layers:
            doc.layers.add(layer, color=LAYER_COLOR)

        msp = doc.modelspace()
        line_count = 0
        for polygon in polygons:
            line_count += self._write_polygon(msp, polygon, transform, layer)

        logger.info(f"DXF export: {len(polygons)} polygons, {line_count} lines on layer {layer}")
        return doc

    def _write_polygon(self, msp: Any, polygon: Polygon, transform: PageTransform, layer: str) -> int:
        if len(polygon) < 2:
            return 0

        page_height_mm = transform.page_height_px / transform.pixels_per_mm
        count = 0
        for segment in polygon.segments():
            start = self._to_dxf(transform, segment.start, page_height_mm)
            end = self._to_dxf(transform, segment.end, page_height_mm)
            msp.add_line(start, end, dxfattribs={"layer": layer})
            count += 1
        return count

    def _to_dxf(self, transform: PageTransform, point, page_height_mm: float) -> tuple[float, float]:
        x_mm, y_mm = transform.to_mm(point)
        if self.flip_y:
            y_mm = page_height_mm - y_mm
        return (x_mm, y_mm)
