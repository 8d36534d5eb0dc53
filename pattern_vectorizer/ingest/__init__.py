"""
Ingest module.

Decodes uploaded photographs into RGBA pixel buffers.
"""

from pattern_vectorizer.ingest.image_loader import load_image, load_image_bytes

__all__ = ["load_image", "load_image_bytes"]
