"""
Main handler for the vectorization pipeline.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from pattern_vectorizer.rectify.rectifier import PerspectiveRectifier
from pattern_vectorizer.shared.cancellation import CancellationToken
from pattern_vectorizer.shared.config import Settings, get_settings
from pattern_vectorizer.shared.errors import EmptyResultError
from pattern_vectorizer.shared.models import CalibrationData, PointLike, Polygon
from pattern_vectorizer.shared.raster import ensure_rgba
from pattern_vectorizer.vectorization.contour_tracer import ContourTracer
from pattern_vectorizer.vectorization.edge_detector import EdgeDetector
from pattern_vectorizer.vectorization.simplifier import simplify_all, smooth_contour

logger = logging.getLogger(__name__)


@dataclass
class VectorizationResult:
    """Output of one pipeline run."""

    polygons: list[Polygon]
    edge_mask: np.ndarray
    rectified: np.ndarray
    calibration: Optional[CalibrationData] = None
    stage_seconds: dict[str, float] = field(default_factory=dict)

    @property
    def width(self) -> int:
        return int(self.rectified.shape[1])

    @property
    def height(self) -> int:
        return int(self.rectified.shape[0])

    @property
    def largest(self) -> Polygon:
        return self.polygons[0]


class VectorizationHandler:
    """
    Main vectorization handler.

    Runs the stages left to right:
    - Perspective rectification
    - Preprocessing and edge detection
    - Contour tracing
    - Optional smoothing and Douglas-Peucker simplification
    """

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize vectorization handler."""
        self.settings = settings or get_settings()

        self.rectifier = PerspectiveRectifier(self.settings.rectifier)
        self.edge_detector = EdgeDetector(self.settings.edges)
        self.contour_tracer = ContourTracer(self.settings.tracing)

    def vectorize(
        self,
        image: np.ndarray,
        corners: Optional[Sequence[PointLike]] = None,
        calibration: Optional[CalibrationData] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> VectorizationResult:
        """
        Vectorize an image into simplified outline polygons.

        Args:
            image: Decoded source image
            corners: Four pattern corners (TL, TR, BR, BL); None when the
                image is already rectified
            calibration: Scale reference carried through to the result
            cancel: Token checked before each stage

        Returns:
            Polygons sorted by descending area, plus intermediate rasters

        Raises:
            GeometryError: If the corners are unusable
            EmptyResultError: If no contour survives filtering
            PipelineCancelledError: If cancellation was requested
        """
        cancel = cancel or CancellationToken()
        timings: dict[str, float] = {}
        simplifier_config = self.settings.simplifier

        logger.info(f"Vectorizing image with shape {image.shape}")

        cancel.raise_if_cancelled("rectification")
        started = time.perf_counter()
        if corners is not None:
            rectified = self.rectifier.rectify(image, corners)
        else:
            rectified = ensure_rgba(image)
        timings["rectification"] = time.perf_counter() - started

        cancel.raise_if_cancelled("edge_detection")
        started = time.perf_counter()
        edges = self.edge_detector.detect(rectified)
        timings["edge_detection"] = time.perf_counter() - started

        cancel.raise_if_cancelled("tracing")
        started = time.perf_counter()
        contours = self.contour_tracer.trace(edges)
        timings["tracing"] = time.perf_counter() - started

        if not contours:
            raise EmptyResultError(
                "No contours found; try lower edge thresholds", stage="tracing"
            )

        cancel.raise_if_cancelled("simplification")
        started = time.perf_counter()
        if simplifier_config.smoothing_window > 0:
            contours = [smooth_contour(c, simplifier_config.smoothing_window) for c in contours]

        simplified = simplify_all(
            contours,
            simplifier_config.epsilon,
            workers=simplifier_config.workers,
        )
        polygons = [p for p in simplified if len(p) >= simplifier_config.min_points]
        timings["simplification"] = time.perf_counter() - started

        if not polygons:
            raise EmptyResultError(
                f"All {len(simplified)} contours collapsed below "
                f"{simplifier_config.min_points} points; try a smaller tolerance",
                stage="simplification",
            )

        logger.info(
            f"Vectorization: {len(contours)} contours traced, {len(polygons)} kept "
            f"after simplification (epsilon={simplifier_config.epsilon})"
        )

        return VectorizationResult(
            polygons=polygons,
            edge_mask=edges,
            rectified=rectified,
            calibration=calibration,
            stage_seconds=timings,
        )
