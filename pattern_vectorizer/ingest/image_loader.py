"""
Image decoding for the pipeline.
"""

import io
import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from pattern_vectorizer.shared.errors import ImageLoadError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".webp"}


def _to_rgba_array(image: Image.Image) -> np.ndarray:
    # Phone photos carry their rotation in EXIF
    image = ImageOps.exif_transpose(image)
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return np.array(image, dtype=np.uint8)


def load_image(source: Union[str, Path]) -> np.ndarray:
    """
    Load an image file as an RGBA ``uint8`` array.

    Raises:
        ImageLoadError: If the file is missing, unsupported or corrupt
    """
    path = Path(source)
    if not path.exists():
        raise ImageLoadError(f"Image not found: {path}")
    if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise ImageLoadError(f"Unsupported image type: {path.suffix}")

    try:
        with Image.open(path) as image:
            pixels = _to_rgba_array(image)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageLoadError(f"Failed to load image {path}: {e}") from e

    logger.info(f"Loaded {path.name}: {pixels.shape[1]}x{pixels.shape[0]}")
    return pixels


def load_image_bytes(data: bytes) -> np.ndarray:
    """
    Decode in-memory image bytes as an RGBA ``uint8`` array.

    Raises:
        ImageLoadError: If the bytes are not a decodable image
    """
    if not data:
        raise ImageLoadError("Empty image data")

    try:
        with Image.open(io.BytesIO(data)) as image:
            return _to_rgba_array(image)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageLoadError(f"Failed to decode image bytes: {e}") from e
