"""Shared fixtures for the PixelPalette tests."""

import os

# Must be set before any Qt application object is created
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import numpy as np
import pytest

from models import ImageBuffer


def make_buffer(pixels, width, height):
    """Build an ImageBuffer from a list of RGB or RGBA tuples."""
    data = []
    for pixel in pixels:
        if len(pixel) == 3:
            pixel = (*pixel, 255)
        data.extend(pixel)
    return ImageBuffer(width, height, np.array(data, dtype=np.uint8))


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def random_buffer(rng):
    """A 37x23 image with random RGBA values (odd sizes exercise edge blocks)."""
    width, height = 37, 23
    data = rng.integers(0, 256, size=width * height * 4, dtype=np.uint8)
    return ImageBuffer(width, height, data)


class ScriptedRng:
    """Stand-in for numpy's Generator that returns preset sample indices.

    Draws are taken from ``indices`` in order and wrap around, so centroid
    seeding in a test is fully predictable.
    """

    def __init__(self, indices):
        self.indices = list(indices)
        self.calls = 0

    def _next(self, high):
        value = self.indices[self.calls % len(self.indices)] % high
        self.calls += 1
        return value

    def integers(self, low, high=None, size=None):
        if high is None:
            low, high = 0, low
        if size is None:
            return self._next(high)
        return np.array([self._next(high) for _ in range(size)], dtype=np.int64)
