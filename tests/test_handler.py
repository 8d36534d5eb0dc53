"""Tests for the vectorization pipeline handler."""

import pytest

from pattern_vectorizer.shared.cancellation import CancellationToken
from pattern_vectorizer.shared.config import Settings
from pattern_vectorizer.shared.errors import EmptyResultError, PipelineCancelledError
from pattern_vectorizer.shared.models import CalibrationData, Point2D
from pattern_vectorizer.vectorization import VectorizationHandler


def test_vectorize_pattern_photo(settings, pattern_photo):
    """Test the full pipeline on an already rectified synthetic photo."""
    handler = VectorizationHandler(settings)

    result = handler.vectorize(pattern_photo)

    assert result.width == 200
    assert result.height == 150
    assert result.edge_mask.shape == (150, 200, 4)
    assert result.polygons

    areas = [p.area for p in result.polygons]
    assert areas == sorted(areas, reverse=True)
    assert result.largest.area > 1000
    # Outer edge of the dark rectangle and inner edge of its thresholded band
    assert len(result.polygons) <= 2
    assert all(len(p) >= settings.simplifier.min_points for p in result.polygons)
    assert set(result.stage_seconds) == {
        "rectification", "edge_detection", "tracing", "simplification",
    }


def test_vectorize_single_piece(settings, piece_photo):
    """Test that one dark piece gives exactly one outline of its size."""
    result = VectorizationHandler(settings).vectorize(piece_photo)

    assert len(result.polygons) == 1
    assert result.largest.area == pytest.approx(60 * 24, abs=200)


def test_vectorize_with_corners(settings, pattern_photo):
    """Test that corners rectify to the configured output size first."""
    handler = VectorizationHandler(settings)
    calibration = CalibrationData(
        point1=Point2D(x=0, y=0), point2=Point2D(x=100, y=0), real_distance_cm=10,
    )

    result = handler.vectorize(
        pattern_photo,
        corners=[(0, 0), (200, 0), (200, 150), (0, 150)],
        calibration=calibration,
    )

    assert (result.width, result.height) == (800, 600)
    assert result.calibration is calibration
    assert result.polygons


def test_blank_photo_reports_empty_result(settings, blank_photo):
    """Test that no synthetic outline is invented for an empty image."""
    handler = VectorizationHandler(settings)

    with pytest.raises(EmptyResultError) as exc_info:
        handler.vectorize(blank_photo)

    assert exc_info.value.stage == "tracing"


def test_everything_collapsed_reports_empty_result(pattern_photo):
    """Test the post-simplification filter."""
    settings = Settings(simplifier={"epsilon": 10000, "min_points": 3})
    handler = VectorizationHandler(settings)

    with pytest.raises(EmptyResultError) as exc_info:
        handler.vectorize(pattern_photo)

    assert exc_info.value.stage == "simplification"


def test_cancellation_before_first_stage(settings, pattern_photo):
    """Test that a cancelled token stops the pipeline."""
    token = CancellationToken()
    token.cancel()

    with pytest.raises(PipelineCancelledError) as exc_info:
        VectorizationHandler(settings).vectorize(pattern_photo, cancel=token)

    assert exc_info.value.stage == "rectification"


def test_smoothing_enabled(pattern_photo):
    """Test that the optional smoothing step still yields outlines."""
    settings = Settings(simplifier={"smoothing_window": 5})

    result = VectorizationHandler(settings).vectorize(pattern_photo)

    assert result.polygons
