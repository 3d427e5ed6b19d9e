"""Image processing pipeline for palette quantization and pixelation.

AIDEV-NOTE: This package handles the pixel-level transformation of an RGBA
buffer. Organized into modular components:
- processor: process_image pipeline and the ImageProcessor request runner
- quantization: k-means palette construction and nearest-color remapping
- pixelation: block-center pixelation filter
- utils: clamping, sampling and nearest-color helpers
"""

from .pixelation import pixelate
from .processor import ImageProcessor, process_image, run_pipeline
from .quantization import apply_palette, build_palette, quantize_colors

__all__ = [
    "ImageProcessor",
    "apply_palette",
    "build_palette",
    "pixelate",
    "process_image",
    "quantize_colors",
    "run_pipeline",
]
