"""Centralized styling constants for the PixelPalette UI."""


class ThemeColors:
    """Application theme colors."""

    BACKGROUND_PANEL = "#2a2a2a"
    BORDER_DEFAULT = "gray"


class Sizes:
    """Standard widget sizes and constraints."""

    # Image preview
    PREVIEW_MIN_SIZE = (320, 240)

    # Palette swatches
    SWATCH_SIZE = 18
    SWATCHES_PER_ROW = 16

    LABEL_MIN_WIDTH = 40

    # Delay before a settings change triggers a render
    DEBOUNCE_MS = 150


SIZES = Sizes


def panel_stylesheet() -> str:
    """Generate standard panel stylesheet with border and background.

    Returns:
        CSS stylesheet string for panel styling
    """
    return (
        f"border: 1px solid {ThemeColors.BORDER_DEFAULT}; "
        f"background-color: {ThemeColors.BACKGROUND_PANEL};"
    )


def swatch_stylesheet(color: "tuple[int, int, int]") -> str:
    """Stylesheet for a single palette swatch."""
    r, g, b = color
    return (
        f"background-color: rgb({r}, {g}, {b}); "
        f"border: 1px solid {ThemeColors.BORDER_DEFAULT};"
    )
