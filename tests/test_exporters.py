"""Tests for page layout and the SVG, DXF and PNG writers."""

import xml.etree.ElementTree as ET
from datetime import date
from pathlib import Path

import cv2
import ezdxf
import numpy as np
import pytest
from ezdxf import units

from pattern_vectorizer.export import DXFWriter, PNGWriter, PageTransform, SVGWriter
from pattern_vectorizer.export.png_writer import hex_to_bgr
from pattern_vectorizer.shared.config import ExportConfig
from pattern_vectorizer.shared.models import Point2D, Polygon

SVG_NS = "{http://www.w3.org/2000/svg}"


@pytest.fixture
def polygons():
    return [
        Polygon.from_tuples([(0, 0), (100, 0), (100, 50), (0, 50)]),
        Polygon.from_tuples([(20, 10), (40, 10), (30, 30)]),
    ]


def test_fit_scales_to_real_size(polygons):
    """Test that a calibrated pattern is laid out at 1:1."""
    transform = PageTransform.fit(polygons, ExportConfig(), pixels_per_cm=10.0)

    assert transform.pattern_width_cm == pytest.approx(10.0)
    assert transform.pattern_height_cm == pytest.approx(5.0)
    # Centred horizontally between the side margins
    left = transform.apply(Point2D(x=0, y=0)).x
    right = transform.apply(Point2D(x=100, y=0)).x
    assert left + right == pytest.approx(transform.page_width_px)


def test_fit_without_calibration_keeps_pixels(polygons):
    transform = PageTransform.fit(polygons)

    assert transform.scale == 1.0
    assert transform.pattern_width_px == pytest.approx(100.0)


def test_fit_empty_is_identity():
    transform = PageTransform.fit([])

    assert transform.apply(Point2D(x=3, y=4)) == Point2D(x=3, y=4)


def test_fit_rejects_bad_scale(polygons):
    with pytest.raises(ValueError):
        PageTransform.fit(polygons, pixels_per_cm=0)


def test_svg_one_closed_path_per_polygon(polygons):
    """Test SVG structure: A4 size and one closed path per polygon."""
    text = SVGWriter().render(polygons, customer_name="Ana", issued=date(2024, 3, 5))

    assert text.startswith("<?xml")
    root = ET.fromstring(text.encode("utf-8"))
    assert root.get("width").startswith("210") and root.get("width").endswith("mm")
    assert root.get("height").startswith("297") and root.get("height").endswith("mm")

    paths = root.findall(f"{SVG_NS}path")
    assert len(paths) == 2
    for path in paths:
        d = path.get("d").strip()
        assert d.startswith("M")
        assert d.endswith("Z")
        assert path.get("stroke") == "#dc2626"
        assert path.get("fill") == "none"

    texts = [t.text for t in root.findall(f"{SVG_NS}text")]
    assert "MOLDE VETORIZADO - ESCALA 1:1" in texts
    assert "Cliente: Ana" in texts
    assert "Data: 05/03/2024" in texts


def test_svg_footer_note_right_aligned(polygons):
    """Test the footer note in the bottom-right corner of the sheet."""
    text = SVGWriter(ExportConfig(footer_note="Escala 1:1")).render(polygons)
    root = ET.fromstring(text.encode("utf-8"))

    footer = [t for t in root.findall(f"{SVG_NS}text") if t.text == "Escala 1:1"]
    assert len(footer) == 1
    assert footer[0].get("text-anchor") == "end"
    assert float(footer[0].get("x")) == pytest.approx(210 * 3.78 - 20, abs=0.01)

    default = SVGWriter().render(polygons)
    assert "Processado com IA - Escala 1:1" in default


def test_svg_write(tmp_path: Path, polygons):
    output = SVGWriter().write(polygons, tmp_path / "out" / "molde.svg")

    assert output.exists()
    assert "<path" in output.read_text(encoding="utf-8")


def test_dxf_lines_in_millimetres(tmp_path: Path, polygons):
    """Test that every edge becomes a LINE on the pattern layer."""
    transform = PageTransform.identity()
    output = DXFWriter(flip_y=False).save(polygons, tmp_path / "molde.dxf", transform)

    doc = ezdxf.readfile(str(output))
    lines = doc.modelspace().query("LINE")

    assert len(lines) == 4 + 3
    assert all(line.dxf.layer == "MOLDE" for line in lines)
    assert doc.units == units.MM

    ends = {(round(line.dxf.end.x, 6), round(line.dxf.end.y, 6)) for line in lines}
    assert (round(100 / 3.78, 6), 0.0) in ends


def test_dxf_flips_y():
    """Test that page rows become DXF y-up coordinates."""
    polygon = Polygon.from_tuples([(0, 0), (37.8, 0), (37.8, 37.8)])
    transform = PageTransform.identity()
    doc = DXFWriter().build([polygon], transform)

    starts = [line.dxf.start for line in doc.modelspace().query("LINE")]
    assert starts[0].y == pytest.approx(297.0)
    assert starts[2].y == pytest.approx(287.0)


def test_dxf_bytes(polygons):
    data = DXFWriter().write(polygons)

    assert b"SECTION" in data
    assert b"MOLDE" in data


def test_png_page_size(polygons):
    """Test that the PNG preview decodes at A4 page resolution."""
    data = PNGWriter().write(polygons, PageTransform.fit(polygons, pixels_per_cm=10.0))

    assert data.startswith(b"\x89PNG")
    image = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    assert image.shape == (1123, 794, 3)


def test_png_draws_outline(polygons):
    """Test that outline pixels carry the stroke color."""
    transform = PageTransform.fit(polygons, pixels_per_cm=10.0)
    canvas = PNGWriter().render(polygons, transform)

    corner = transform.apply(Point2D(x=50, y=0))
    b, g, r = canvas[int(round(corner.y)), int(round(corner.x))]
    assert r > 150 and g < 120 and b < 120


def test_png_footer_note(polygons):
    """Test that the footer note is drawn in the bottom-right corner."""
    transform = PageTransform.fit(polygons, pixels_per_cm=10.0)
    canvas = PNGWriter().render(polygons, transform)
    height, width = canvas.shape[:2]

    corner = canvas[height - 60:height - 35, width // 2:width - 20]
    assert (corner.max(axis=2) < 100).any()

    blank = PNGWriter(ExportConfig(footer_note="")).render(polygons, transform)
    corner = blank[height - 60:height - 35, width // 2:width - 20]
    assert not (corner.max(axis=2) < 100).any()


def test_hex_to_bgr():
    assert hex_to_bgr("#dc2626") == (38, 38, 220)
    with pytest.raises(ValueError):
        hex_to_bgr("red")
