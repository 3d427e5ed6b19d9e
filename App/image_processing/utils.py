"""Utility functions shared by the quantization and pixelation filters.

AIDEV-NOTE: This module contains parameter clamping, pixel sampling and the
nearest-color search used throughout the processing pipeline.
"""

import math

import numpy as np

from models import MAX_PALETTE_SIZE, MAX_SAMPLES, ImageBuffer


def clamp_palette_size(palette_size) -> int:
    """Clamp a requested palette size to [1, MAX_PALETTE_SIZE]."""
    return max(1, min(int(palette_size), MAX_PALETTE_SIZE))


def clamp_block_size(block_size) -> int:
    """Floor a requested block size, never going below 1."""
    return max(1, math.floor(block_size))


def sample_stride(total_pixels: int, max_samples: int = MAX_SAMPLES) -> int:
    """Stride that draws at most ~max_samples pixels from a linear walk."""
    return max(1, total_pixels // max_samples)


def sample_pixels(buffer: ImageBuffer, max_samples: int = MAX_SAMPLES) -> np.ndarray:
    """Strided RGB subsample of the buffer, starting at pixel 0.

    Returns:
        (n, 3) int64 array of RGB samples (alpha ignored)
    """
    total = buffer.pixel_count
    rgb = buffer.data.reshape(-1, 4)[:, :3]
    step = sample_stride(total, max_samples)
    return rgb[0:total:step].astype(np.int64)


def nearest_color_indices(pixels: np.ndarray, colors: np.ndarray) -> np.ndarray:
    """Index of the nearest color for every pixel.

    Args:
        pixels: (n, 3) RGB values
        colors: (k, 3) RGB candidates, k >= 1

    Returns:
        (n,) int64 array of indices into ``colors``

    AIDEV-NOTE: Squared Euclidean distance, no sqrt. Candidates are scanned
    in order and only a strictly smaller distance replaces the best, so ties
    go to the lowest index. Distances peak at 3 * 255**2, so int32 holds them.
    """
    pixels = pixels.astype(np.int32, copy=False)
    colors = np.asarray(colors, dtype=np.int32)

    best_idx = np.zeros(len(pixels), dtype=np.int64)
    best_dist = np.full(len(pixels), np.iinfo(np.int32).max, dtype=np.int32)

    for idx, color in enumerate(colors):
        diff = pixels - color
        dist = np.einsum("ij,ij->i", diff, diff)
        closer = dist < best_dist
        best_dist[closer] = dist[closer]
        best_idx[closer] = idx

    return best_idx


def round_half_up(sums: np.ndarray, counts: np.ndarray) -> np.ndarray:
    """Integer mean rounded to nearest, halves rounding up.

    Args:
        sums: (k, 3) non-negative channel sums
        counts: (k,) positive sample counts
    """
    counts = counts.reshape(-1, 1)
    return (2 * sums + counts) // (2 * counts)
