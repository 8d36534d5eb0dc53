"""
Exception hierarchy for the pattern vectorizer.

Every failure the pipeline reports to a caller derives from
PatternVectorizerError so that front ends can catch one type.
"""

from typing import Optional


class PatternVectorizerError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(PatternVectorizerError):
    """Invalid configuration value."""


class GeometryError(PatternVectorizerError):
    """Degenerate or insufficient points for rectification or calibration."""


class EmptyResultError(PatternVectorizerError):
    """No contour survived filtering."""

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage


class ImageLoadError(PatternVectorizerError):
    """The input image could not be decoded."""


class PipelineCancelledError(PatternVectorizerError):
    """Cancellation was requested between two pipeline stages."""

    def __init__(self, stage: str):
        super().__init__(f"Pipeline cancelled before stage '{stage}'")
        self.stage = stage
