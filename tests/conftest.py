"""Shared fixtures: small synthetic rasters."""

import numpy as np
import pytest

from pattern_vectorizer.shared.config import Settings, get_settings
from pattern_vectorizer.shared.raster import from_gray


def outline_square(canvas: np.ndarray, left: int, top: int, side: int) -> None:
    """Draw a one-pixel-wide square outline with value 255."""
    right = left + side - 1
    bottom = top + side - 1
    canvas[top, left:right + 1] = 255
    canvas[bottom, left:right + 1] = 255
    canvas[top:bottom + 1, left] = 255
    canvas[top:bottom + 1, right] = 255


@pytest.fixture
def square_outline():
    """40x40 mask with a single 10x10 outline at (10, 10)."""
    values = np.zeros((40, 40), dtype=np.uint8)
    outline_square(values, 10, 10, 10)
    return from_gray(values)


@pytest.fixture
def two_outlines():
    """40x40 mask with a 10x10 outline and a separate 6x6 outline."""
    values = np.zeros((40, 40), dtype=np.uint8)
    outline_square(values, 10, 10, 10)
    outline_square(values, 25, 25, 6)
    return from_gray(values)


@pytest.fixture
def filled_square():
    """40x40 black raster with a white square covering [10, 29]."""
    values = np.zeros((40, 40), dtype=np.uint8)
    values[10:30, 10:30] = 255
    return from_gray(values)


@pytest.fixture
def blank_photo():
    """Plain white RGBA image."""
    return np.full((100, 120, 4), 255, dtype=np.uint8)


@pytest.fixture
def pattern_photo():
    """White RGB sheet with a dark 100x70 rectangle standing in for a pattern piece."""
    image = np.full((150, 200, 3), 255, dtype=np.uint8)
    image[40:110, 50:150] = 0
    return image


@pytest.fixture
def piece_photo():
    """White RGB sheet with a dark 60x24 strip, thin enough to stay dark after thresholding."""
    image = np.full((150, 200, 3), 255, dtype=np.uint8)
    image[40:64, 70:130] = 0
    return image


@pytest.fixture
def settings():
    """Default settings, independent of any config file."""
    return Settings()


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Keep cached settings from leaking between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
