"""
Vectorization module.

Converts raster images to outline polygons.
"""

from pattern_vectorizer.vectorization.contour_tracer import ContourTracer, trace_contours
from pattern_vectorizer.vectorization.edge_detector import EdgeDetector, canny, detect_edges
from pattern_vectorizer.vectorization.handler import VectorizationHandler, VectorizationResult
from pattern_vectorizer.vectorization.preprocessor import preprocess
from pattern_vectorizer.vectorization.simplifier import simplify, simplify_all

__all__ = [
    "ContourTracer",
    "EdgeDetector",
    "VectorizationHandler",
    "VectorizationResult",
    "canny",
    "detect_edges",
    "preprocess",
    "simplify",
    "simplify_all",
    "trace_contours",
]
