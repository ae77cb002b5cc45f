import numpy as np
import pytest

from models.image import Image


@pytest.fixture
def gradient_image() -> Image:
    """16x256 horizontal ramp: every intensity 0..255 appears in every row."""
    row = np.arange(256, dtype=np.uint8)
    return Image(np.tile(row, (16, 1)))


@pytest.fixture
def bimodal_image() -> Image:
    """Left half at 10, right half at 240."""
    pixels = np.full((20, 40), 10, dtype=np.uint8)
    pixels[:, 20:] = 240
    return Image(pixels)


@pytest.fixture
def uniform_image() -> Image:
    return Image(np.full((12, 9), 77, dtype=np.uint8))


@pytest.fixture
def random_image() -> Image:
    rng = np.random.default_rng(42)
    return Image(rng.integers(0, 256, size=(31, 47), dtype=np.uint8))
