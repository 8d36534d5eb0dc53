"""
Shared utilities and models for the pattern vectorizer.
"""

from pattern_vectorizer.shared.config import Settings, get_settings, reload_settings
from pattern_vectorizer.shared.errors import (
    ConfigurationError,
    EmptyResultError,
    GeometryError,
    ImageLoadError,
    PatternVectorizerError,
    PipelineCancelledError,
)
from pattern_vectorizer.shared.models import (
    BoundingBox,
    CalibrationData,
    Line2D,
    Point2D,
    Polygon,
)

__all__ = [
    "Settings",
    "get_settings",
    "reload_settings",
    "ConfigurationError",
    "EmptyResultError",
    "GeometryError",
    "ImageLoadError",
    "PatternVectorizerError",
    "PipelineCancelledError",
    "BoundingBox",
    "CalibrationData",
    "Line2D",
    "Point2D",
    "Polygon",
]
