"""Data models and constants for the PixelPalette renderer."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image

# AIDEV-NOTE: Core limits - the pipeline clamps to these, the UI ranges are narrower
MAX_PALETTE_SIZE = 256
MAX_SAMPLES = 5000  # upper bound on k-means samples per palette build
DEFAULT_KMEANS_ITERS = 8
CHANNELS = 4  # R, G, B, A

# UI slider ranges (inclusive)
PALETTE_SIZE_RANGE = (2, 64)
BLOCK_SIZE_RANGE = (2, 64)

# Configuration file path
CONFIG_FILE = Path.home() / ".pixelpalette_config.json"


class InvalidBufferError(ValueError):
    """Pixel data does not match the declared image dimensions."""


class ImageBuffer:
    """RGBA pixel payload, four 8-bit channels per pixel.

    AIDEV-NOTE: ``data`` is a flat uint8 array of length width*height*4.
    Filters mutate it in place, so the pipeline always works on ``copy()``.
    """

    def __init__(self, width: int, height: int, data=None):
        if width < 0 or height < 0:
            raise InvalidBufferError(
                f"Image dimensions must be non-negative, got {width}x{height}"
            )

        expected = width * height * CHANNELS
        if data is None:
            data = np.zeros(expected, dtype=np.uint8)
        else:
            data = np.asarray(data, dtype=np.uint8).reshape(-1)

        if data.size != expected:
            raise InvalidBufferError(
                f"Expected {expected} bytes for {width}x{height} RGBA image, "
                f"got {data.size}"
            )

        self.width = width
        self.height = height
        self.data = data

    @classmethod
    def from_bytes(cls, width: int, height: int, pixel_data: bytes) -> ImageBuffer:
        """Build a buffer that owns a private copy of ``pixel_data``."""
        return cls(width, height, np.frombuffer(pixel_data, dtype=np.uint8).copy())

    @classmethod
    def from_image(cls, image: Image.Image) -> ImageBuffer:
        """Build a buffer from a PIL image (converted to RGBA)."""
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        width, height = image.size
        return cls(width, height, np.array(image, dtype=np.uint8))

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def rgba(self) -> np.ndarray:
        """View of the pixels as a (height, width, 4) array (no copy)."""
        return self.data.reshape(self.height, self.width, CHANNELS)

    def copy(self) -> ImageBuffer:
        return ImageBuffer(self.width, self.height, self.data.copy())

    def to_bytes(self) -> bytes:
        return self.data.tobytes()

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.rgba())

    def __eq__(self, other):
        if not isinstance(other, ImageBuffer):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and np.array_equal(self.data, other.data)
        )

    def __repr__(self):
        return f"ImageBuffer({self.width}x{self.height})"


@dataclass
class EffectSettings:
    """User-facing effect parameters."""

    # Color quantization
    do_quantize: bool = True
    palette_size: int = 8  # Number of palette colors (2-64 in the UI)

    # Pixelation
    do_pixelate: bool = True
    block_size: int = 8  # Block edge in pixels (2-64 in the UI)

    # K-means
    max_kmeans_iters: int = DEFAULT_KMEANS_ITERS
    seed: Optional[int] = None  # None = fresh entropy per render


@dataclass
class RenderRequest:
    """One unit of work sent to the render worker.

    AIDEV-NOTE: The buffer belongs to the request once sent; the caller
    must hand over a copy, never its live source image.
    """

    sequence: int
    buffer: ImageBuffer
    do_pixelate: bool = False
    block_size: int = 1
    do_quantize: bool = False
    palette_size: int = 1
    max_kmeans_iters: int = DEFAULT_KMEANS_ITERS
    seed: Optional[int] = None

    @classmethod
    def from_settings(
        cls, sequence: int, buffer: ImageBuffer, settings: EffectSettings
    ) -> RenderRequest:
        return cls(
            sequence=sequence,
            buffer=buffer,
            do_pixelate=settings.do_pixelate,
            block_size=settings.block_size,
            do_quantize=settings.do_quantize,
            palette_size=settings.palette_size,
            max_kmeans_iters=settings.max_kmeans_iters,
            seed=settings.seed,
        )

    @classmethod
    def from_bytes(
        cls,
        sequence: int,
        width: int,
        height: int,
        pixel_data: bytes,
        do_pixelate: bool,
        block_size: int,
        do_quantize: bool,
        palette_size: int,
    ) -> RenderRequest:
        """Build a request from the raw transport shape."""
        return cls(
            sequence=sequence,
            buffer=ImageBuffer.from_bytes(width, height, pixel_data),
            do_pixelate=do_pixelate,
            block_size=block_size,
            do_quantize=do_quantize,
            palette_size=palette_size,
        )

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height


@dataclass
class RenderResponse:
    """Result of one render, delivered back to the caller."""

    sequence: int
    buffer: ImageBuffer

    # Palette used for quantization (empty when quantization was off)
    palette: "list[tuple[int, int, int]]" = field(default_factory=list)

    # Statistics
    elapsed: float = 0.0  # seconds spent in the pipeline

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height

    def to_bytes(self) -> bytes:
        return self.buffer.to_bytes()
