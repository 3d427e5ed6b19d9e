"""Block pixelation filter.

AIDEV-NOTE: Each size x size block takes the color of its center pixel
rather than the block average, so the representative lookup is O(1) per
block. Blocks on the right/bottom edges are clipped to the image.
"""

import numpy as np

from models import ImageBuffer

from .utils import clamp_block_size


def block_centers(length: int, size: int) -> np.ndarray:
    """Center coordinate of the block containing each position along an axis.

    AIDEV-NOTE: Center is block start + size // 2, clamped to the last pixel
    so a clipped edge block still samples a pixel inside the image.
    """
    positions = np.arange(length)
    starts = positions - positions % size
    return np.minimum(starts + size // 2, length - 1)


def pixelate(buffer: ImageBuffer, block_size) -> None:
    """Flatten each block of the image to its center pixel, in place.

    Args:
        buffer: Image to modify
        block_size: Block edge in pixels, floored and raised to at least 1
    """
    size = clamp_block_size(block_size)
    if size == 1 or buffer.pixel_count == 0:
        return

    rgba = buffer.rgba()
    cy = block_centers(buffer.height, size)
    cx = block_centers(buffer.width, size)

    # Fancy indexing copies, so every block reads its unmodified center
    rgba[...] = rgba[cy[:, None], cx[None, :]]
