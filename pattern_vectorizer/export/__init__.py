"""
Export module.

Lays traced outlines out on an A4 sheet and writes SVG, DXF and PNG files.
"""

from pattern_vectorizer.export.dxf_writer import DXFWriter
from pattern_vectorizer.export.layout import PageTransform
from pattern_vectorizer.export.png_writer import PNGWriter
from pattern_vectorizer.export.svg_writer import SVGWriter

__all__ = ["DXFWriter", "PNGWriter", "PageTransform", "SVGWriter"]
