"""PixelPalette - Main entry point."""

import sys

from PyQt6.QtWidgets import QApplication

from ui.main_window import PixelPaletteWindow


def main():
    """Launch the PixelPalette preview application."""
    app = QApplication(sys.argv)

    app.setApplicationDisplayName("PixelPalette")
    app.setApplicationName("PixelPalette")

    window = PixelPaletteWindow()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
