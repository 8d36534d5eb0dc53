"""Tests for contour tracing."""

import numpy as np
import pytest

from pattern_vectorizer.shared.config import TracingConfig
from pattern_vectorizer.shared.raster import from_gray
from pattern_vectorizer.vectorization.contour_tracer import (
    ContourTracer,
    trace_boundary,
    trace_contours,
)
from pattern_vectorizer.vectorization.edge_detector import canny


def test_square_outline_single_polygon(square_outline):
    """Test that a one-pixel square outline becomes one closed polygon."""
    polygons = trace_contours(square_outline)

    assert len(polygons) == 1
    polygon = polygons[0]
    assert len(polygon) == 36
    assert polygon.area == pytest.approx(81.0, abs=1.0)
    assert polygon.points[0].as_tuple() == (10.0, 10.0)


def test_polygons_are_clockwise(square_outline):
    """Test that traced polygons have positive signed area."""
    polygons = trace_contours(square_outline)

    assert all(p.signed_area > 0 for p in polygons)


def test_polygons_sorted_by_area(two_outlines):
    """Test descending area order."""
    polygons = trace_contours(two_outlines)

    assert len(polygons) == 2
    assert polygons[0].area == pytest.approx(81.0)
    assert polygons[1].area == pytest.approx(25.0)


def test_empty_raster():
    """Test that an all-zero raster has no contours."""
    assert trace_contours(from_gray(np.zeros((20, 20), dtype=np.uint8))) == []


def test_short_traces_discarded():
    """Test the minimum trace length."""
    values = np.zeros((12, 12), dtype=np.uint8)
    values[4:7, 4:7] = 255
    values[5, 5] = 0
    raster = from_gray(values)

    assert trace_contours(raster) == []
    assert len(trace_contours(raster, min_points=3)) == 1


def test_border_pixels_not_used_as_start():
    """Test that foreground touching only the border starts no trace."""
    values = np.zeros((30, 30), dtype=np.uint8)
    values[0, :] = 255

    assert trace_contours(from_gray(values), min_points=1) == []


def test_isolated_pixel_stops():
    """Test that a pixel without neighbours yields a one-point trace."""
    mask = np.zeros((5, 5), dtype=bool)
    mask[2, 2] = True
    visited = np.zeros_like(mask)

    assert trace_boundary(mask, visited, 2, 2) == [(2, 2)]
    assert visited[2, 2]


def test_trace_respects_point_cap(square_outline):
    """Test that the trace stops at the configured cap."""
    mask = square_outline[..., 0] == 255
    visited = np.zeros_like(mask)

    coords = trace_boundary(mask, visited, 10, 10, max_points=5)

    assert len(coords) == 5


def test_tracer_uses_config(square_outline):
    """Test that ContourTracer applies its configured minimum."""
    tracer = ContourTracer(TracingConfig(min_points=40))

    assert tracer.trace(square_outline) == []


def test_thick_outline_single_polygon():
    """Test that a two-pixel-wide outline is traced once, along its outside."""
    values = np.zeros((30, 30), dtype=np.uint8)
    values[5:17, 5:17] = 255
    values[7:15, 7:15] = 0

    polygons = trace_contours(from_gray(values))

    assert len(polygons) == 1
    assert len(polygons[0]) == 44
    assert polygons[0].area == pytest.approx(121.0)


def test_canny_filled_square_single_polygon(filled_square):
    """Test that the edges of a filled square trace to one outline of its size."""
    polygons = trace_contours(canny(filled_square))

    assert len(polygons) == 1
    assert polygons[0].area == pytest.approx(400.0, abs=80.0)
