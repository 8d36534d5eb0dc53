"""
Perspective rectification module.

Maps four picked corners of a photographed rectangle onto an
axis-aligned output raster.
"""

from pattern_vectorizer.rectify.homography import (
    apply_homography,
    compute_homography,
    order_corners,
)
from pattern_vectorizer.rectify.rectifier import PerspectiveRectifier, rectify

__all__ = [
    "PerspectiveRectifier",
    "apply_homography",
    "compute_homography",
    "order_corners",
    "rectify",
]
