"""UI components for the PixelPalette preview.

This package contains the main window and the effect controls panel.
"""

from ui.effects_panel import EffectsPanel
from ui.main_window import PixelPaletteWindow

__all__ = [
    "PixelPaletteWindow",
    "EffectsPanel",
]
