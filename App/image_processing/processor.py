"""Main image processor orchestrating the effect pipeline.

AIDEV-NOTE: This module copies the source buffer, then runs quantization and
pixelation on the copy. Order is fixed: quantize first, pixelate second, so
pixelation blocks always carry palette colors.
"""

import time
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image

from models import (
    DEFAULT_KMEANS_ITERS,
    EffectSettings,
    ImageBuffer,
    RenderRequest,
    RenderResponse,
)

from .pixelation import pixelate as pixelate_image
from .quantization import quantize_colors


def run_pipeline(
    source: ImageBuffer,
    pixelate: bool,
    block_size,
    quantize: bool,
    palette_size: int,
    max_kmeans_iters: int = DEFAULT_KMEANS_ITERS,
    rng: Optional[np.random.Generator] = None,
) -> "tuple[ImageBuffer, list[tuple[int, int, int]]]":
    """Apply the enabled effects to a copy of ``source``.

    Returns:
        Tuple of (transformed copy, palette applied or [] if not quantized)
    """
    result = source.copy()
    palette: "list[tuple[int, int, int]]" = []

    if quantize:
        palette = quantize_colors(result, palette_size, max_kmeans_iters, rng)
    if pixelate:
        pixelate_image(result, block_size)

    return result, palette


def process_image(
    source: ImageBuffer,
    pixelate: bool,
    block_size,
    quantize: bool,
    palette_size: int,
    max_kmeans_iters: int = DEFAULT_KMEANS_ITERS,
    rng: Optional[np.random.Generator] = None,
) -> ImageBuffer:
    """Apply the enabled effects to a copy of ``source``.

    The source buffer is never modified. With both effects disabled the
    result is an unmodified copy.
    """
    result, _ = run_pipeline(
        source, pixelate, block_size, quantize, palette_size, max_kmeans_iters, rng
    )
    return result


class ImageProcessor:
    """Runs the effect pipeline for render requests."""

    def __init__(
        self,
        settings: EffectSettings | None = None,
        verbose: bool = False,
    ):
        self.settings = settings or EffectSettings()
        self.verbose = verbose

    def load_image(self, file_path: str | Path) -> ImageBuffer:
        """Load an image file into an RGBA buffer.

        Args:
            file_path: Path to image file (PNG, JPG, etc.)

        Returns:
            ImageBuffer holding the decoded pixels

        Raises:
            ValueError: If file cannot be loaded or is invalid
        """
        try:
            with Image.open(file_path) as image:
                # AIDEV-NOTE: Always convert to RGBA for consistent processing
                buffer = ImageBuffer.from_image(image)
        except Exception as e:
            raise ValueError(f"Failed to load image: {e}") from e

        print(f"Loaded image with size: {buffer.width}x{buffer.height} pixels.")
        return buffer

    def process(
        self,
        buffer: ImageBuffer,
        settings: EffectSettings | None = None,
    ) -> RenderResponse:
        """Run the pipeline on ``buffer`` with the given (or default) settings."""
        settings = settings or self.settings
        request = RenderRequest.from_settings(0, buffer, settings)
        return self.handle_request(request)

    def handle_request(self, request: RenderRequest) -> RenderResponse:
        """Execute one render request synchronously.

        Returns:
            RenderResponse owning the transformed buffer and the palette used
        """
        start = time.perf_counter()
        rng = np.random.default_rng(request.seed)

        result, palette = run_pipeline(
            request.buffer,
            request.do_pixelate,
            request.block_size,
            request.do_quantize,
            request.palette_size,
            request.max_kmeans_iters,
            rng,
        )

        elapsed = time.perf_counter() - start
        if self.verbose:
            print(
                f"Render #{request.sequence}: {result.width}x{result.height}, "
                f"{len(palette)} colors, {elapsed * 1000:.1f} ms"
            )

        return RenderResponse(
            sequence=request.sequence,
            buffer=result,
            palette=palette,
            elapsed=elapsed,
        )
