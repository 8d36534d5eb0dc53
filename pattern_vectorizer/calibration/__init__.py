"""
Scale calibration module.
"""

from pattern_vectorizer.calibration.calibrator import (
    ScaleCalibrator,
    calibrate,
    calibration_from,
)

__all__ = ["ScaleCalibrator", "calibrate", "calibration_from"]
