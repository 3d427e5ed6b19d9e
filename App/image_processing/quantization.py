"""Color quantization for reducing image color palettes.

AIDEV-NOTE: This module builds a palette with k-means over a strided pixel
sample, then remaps every pixel to its nearest palette color. The clustering
is intentionally bounded: fixed sample cap, fixed iteration count, no
convergence exit, so a render never takes longer than its budget.
"""

from typing import Optional

import numpy as np

from models import DEFAULT_KMEANS_ITERS, ImageBuffer

from .utils import (
    clamp_palette_size,
    nearest_color_indices,
    round_half_up,
    sample_pixels,
)

APPLY_CHUNK_PIXELS = 1 << 18  # pixels remapped per pass in apply_palette


def build_palette(
    buffer: ImageBuffer,
    palette_size: int,
    max_iters: int = DEFAULT_KMEANS_ITERS,
    rng: Optional[np.random.Generator] = None,
) -> "list[tuple[int, int, int]]":
    """Derive a reduced color palette with k-means clustering.

    Args:
        buffer: Source image (not modified)
        palette_size: Target number of colors, clamped to [1, 256]
        max_iters: Number of assignment/update rounds to run
        rng: Random source for centroid seeding, fresh entropy if None

    Returns:
        List of RGB tuples, one per centroid. An empty image yields
        a single black entry.

    AIDEV-NOTE: Centroids are seeded from random samples (repeats allowed)
    and kept as rounded integers. A centroid that loses all its samples is
    re-seeded from a new random sample instead of staying put.
    """
    samples = sample_pixels(buffer)
    if len(samples) == 0:
        return [(0, 0, 0)]

    rng = rng if rng is not None else np.random.default_rng()
    k = clamp_palette_size(palette_size)

    centers = samples[rng.integers(0, len(samples), size=k)].copy()

    for _ in range(max_iters):
        # Assignment step
        assignments = nearest_color_indices(samples, centers)

        # Update step
        counts = np.bincount(assignments, minlength=k)
        sums = np.zeros((k, 3), dtype=np.int64)
        np.add.at(sums, assignments, samples)

        assigned = counts > 0
        centers[assigned] = round_half_up(sums[assigned], counts[assigned])

        for c in np.flatnonzero(~assigned):
            centers[c] = samples[rng.integers(0, len(samples))]

    return [tuple(int(v) for v in center) for center in centers]


def apply_palette(
    buffer: ImageBuffer, palette: "list[tuple[int, int, int]]"
) -> None:
    """Replace every pixel's RGB with its nearest palette color, in place.

    Alpha is left untouched.
    """
    if buffer.pixel_count == 0:
        return

    pixels = buffer.data.reshape(-1, 4)
    colors = np.asarray(palette, dtype=np.int32).reshape(-1, 3)
    rgb_values = colors.astype(np.uint8)

    # Bounded temporaries on large images
    for start in range(0, len(pixels), APPLY_CHUNK_PIXELS):
        chunk = pixels[start:start + APPLY_CHUNK_PIXELS]
        indices = nearest_color_indices(chunk[:, :3], colors)
        chunk[:, :3] = rgb_values[indices]


def quantize_colors(
    buffer: ImageBuffer,
    palette_size: int,
    max_iters: int = DEFAULT_KMEANS_ITERS,
    rng: Optional[np.random.Generator] = None,
) -> "list[tuple[int, int, int]]":
    """Build a palette from ``buffer`` and apply it in place.

    Returns:
        The palette that was applied
    """
    palette = build_palette(buffer, palette_size, max_iters, rng)
    apply_palette(buffer, palette)
    return palette
