"""Tests for the block-center pixelation filter."""

import numpy as np
import pytest

from image_processing import pixelate
from image_processing.pixelation import block_centers
from image_processing.utils import clamp_block_size
from models import ImageBuffer


@pytest.mark.parametrize(
    "requested, expected", [(0, 1), (0.4, 1), (1, 1), (2.9, 2), (8, 8), (-5, 1)]
)
def test_clamp_block_size(requested, expected):
    assert clamp_block_size(requested) == expected


def test_block_centers_clamped_to_edge():
    # Blocks of 4 over 10 pixels: starts 0, 4, 8; centers 2, 6, min(10, 9)
    assert list(block_centers(10, 4)) == [2, 2, 2, 2, 6, 6, 6, 6, 9, 9]


def test_whole_image_single_block():
    buffer = ImageBuffer(4, 4, np.arange(64, dtype=np.uint8))
    center = tuple(buffer.rgba()[2, 2])

    pixelate(buffer, 4)

    assert all(tuple(px) == center for px in buffer.data.reshape(-1, 4))


def test_full_blocks_take_center_pixel(random_buffer):
    original = random_buffer.copy()
    size = 5

    pixelate(random_buffer, size)

    rgba = random_buffer.rgba()
    src = original.rgba()
    for by in range(0, random_buffer.height - size + 1, size):
        for bx in range(0, random_buffer.width - size + 1, size):
            expected = src[by + size // 2, bx + size // 2]
            block = rgba[by:by + size, bx:bx + size]
            assert (block == expected).all()


def test_edge_blocks_clipped(random_buffer):
    original = random_buffer.copy()

    pixelate(random_buffer, 10)

    # 37x23 image: the last block column starts at x=30, center x=35;
    # the last block row starts at y=20, center clamps to y=22
    expected = original.rgba()[22, 35]
    assert (random_buffer.rgba()[20:23, 30:37] == expected).all()


def test_alpha_is_copied_with_color():
    buffer = ImageBuffer(2, 1, [1, 2, 3, 4, 5, 6, 7, 8])
    pixelate(buffer, 2)
    # Center of the 2x2 block at (0, 0) is (1, 1), clamped to (1, 0)
    assert list(buffer.data) == [5, 6, 7, 8, 5, 6, 7, 8]


def test_block_size_one_is_identity(random_buffer):
    before = random_buffer.to_bytes()
    pixelate(random_buffer, 1)
    assert random_buffer.to_bytes() == before


def test_fractional_block_size_is_floored(random_buffer):
    expected = random_buffer.copy()
    pixelate(expected, 3)

    pixelate(random_buffer, 3.7)

    assert random_buffer == expected


def test_empty_image():
    buffer = ImageBuffer(0, 0)
    pixelate(buffer, 4)
    assert buffer.pixel_count == 0
