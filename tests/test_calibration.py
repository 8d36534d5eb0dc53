"""Tests for scale calibration."""

import pytest

from pattern_vectorizer.calibration import ScaleCalibrator, calibrate, calibration_from
from pattern_vectorizer.shared.errors import GeometryError
from pattern_vectorizer.shared.models import Point2D


def test_calibrate_horizontal_segment():
    """Test 100 px over 10 cm."""
    assert calibrate((0, 0), (100, 0), 10) == 10.0


def test_calibrate_accepts_points():
    """Test that Point2D and tuples are interchangeable."""
    assert calibrate(Point2D(x=0, y=0), (30, 40), 5) == pytest.approx(10.0)


@pytest.mark.parametrize("distance", [0, -2.5])
def test_calibrate_rejects_non_positive_distance(distance):
    """Test that the real distance must be positive."""
    with pytest.raises(GeometryError):
        calibrate((0, 0), (100, 0), distance)


def test_calibrate_rejects_coincident_points():
    """Test that a zero-length reference segment is rejected."""
    with pytest.raises(GeometryError):
        calibrate((12, 7), (12, 7), 10)


def test_calibration_from_keeps_points():
    data = calibration_from((1, 2), (4, 6), 0.5)

    assert data.point1 == Point2D(x=1, y=2)
    assert data.pixels_per_cm == pytest.approx(10.0)


def test_calibrator_recomputes_on_change():
    """Test that every change refreshes the scale."""
    calibrator = ScaleCalibrator(real_distance_cm=10)
    assert calibrator.set_point1((0, 0)) is None
    assert not calibrator.is_complete

    calibrator.set_point2((100, 0))
    assert calibrator.pixels_per_cm == pytest.approx(10.0)

    calibrator.set_real_distance(5)
    assert calibrator.pixels_per_cm == pytest.approx(20.0)

    calibrator.set_point2((200, 0))
    assert calibrator.pixels_per_cm == pytest.approx(40.0)


def test_calibrator_rejected_update_clears_scale():
    """Test that a failed recompute does not leave a stale value."""
    calibrator = ScaleCalibrator()
    calibrator.set_point1((0, 0))
    calibrator.set_point2((50, 0))
    assert calibrator.is_complete

    with pytest.raises(GeometryError):
        calibrator.set_point2((0, 0))

    assert calibrator.data is None


def test_calibrator_clicks():
    """Test click-driven point entry; a third click starts over."""
    calibrator = ScaleCalibrator(real_distance_cm=10)

    assert calibrator.add_point((0, 0)) is None
    data = calibrator.add_point((0, 80))
    assert data is not None
    assert data.pixels_per_cm == pytest.approx(8.0)

    assert calibrator.add_point((5, 5)) is None
    assert not calibrator.is_complete


def test_calibrator_reset():
    calibrator = ScaleCalibrator()
    calibrator.set_point1((0, 0))
    calibrator.set_point2((10, 0))

    calibrator.reset()

    assert calibrator.data is None
    assert calibrator.pixels_per_cm is None


def test_calibrator_rejects_bad_distance():
    with pytest.raises(GeometryError):
        ScaleCalibrator().set_real_distance(0)
