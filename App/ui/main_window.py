"""Main application window for the PixelPalette preview."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QImage, QPixmap
from PyQt6.QtWidgets import (
    QDockWidget,
    QFileDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
)

from config_manager import ConfigManager
from image_processing import ImageProcessor
from models import EffectSettings, ImageBuffer, RenderResponse
from render_worker import RenderController
from ui.effects_panel import EffectsPanel
from ui.styles import SIZES, panel_stylesheet


def buffer_to_qimage(buffer: ImageBuffer) -> QImage:
    """Wrap an RGBA buffer in a QImage that owns its own pixel copy."""
    image = QImage(
        buffer.to_bytes(),
        buffer.width,
        buffer.height,
        buffer.width * 4,
        QImage.Format.Format_RGBA8888,
    )
    # AIDEV-NOTE: QImage does not keep the bytes object alive; detach now
    return image.copy()


class PixelPaletteWindow(QMainWindow):
    """Main window: image preview in the center, effect controls docked."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        super().__init__()
        self.setWindowTitle("PixelPalette v0.1.0")
        self.setMinimumSize(900, 600)

        # Application state
        self.config_manager = config_manager or ConfigManager()
        self.settings: EffectSettings = self.config_manager.load()
        self.processor = ImageProcessor(self.settings)
        self.controller = RenderController(self.settings, parent=self)
        self.current_image_path: Optional[str] = None
        self.last_response: Optional[RenderResponse] = None

        self._setup_ui()
        self._connect_signals()
        self.controller.start()

    def _setup_ui(self):
        """Initialize the user interface."""
        self._create_menu_bar()

        # Central preview
        self.preview_label = QLabel("Open an image to start")
        self.preview_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.preview_label.setMinimumSize(*SIZES.PREVIEW_MIN_SIZE)
        self.preview_label.setStyleSheet(panel_stylesheet())
        self.setCentralWidget(self.preview_label)

        # Effect controls
        self.effects_panel = EffectsPanel(self.settings)
        dock = QDockWidget("Effects", self)
        dock.setWidget(self.effects_panel)
        dock.setFeatures(QDockWidget.DockWidgetFeature.DockWidgetMovable)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, dock)

        self.statusBar().showMessage("Ready")

    def _create_menu_bar(self):
        """Create the File menu."""
        menubar = self.menuBar()
        if menubar is None:
            return

        file_menu = menubar.addMenu("&File")

        open_action = QAction("&Open Image...", self)
        open_action.setShortcut("Ctrl+O")
        open_action.triggered.connect(self._on_open_clicked)
        file_menu.addAction(open_action)

        self.save_action = QAction("&Save Result...", self)
        self.save_action.setShortcut("Ctrl+S")
        self.save_action.setEnabled(False)
        self.save_action.triggered.connect(self._on_save_clicked)
        file_menu.addAction(self.save_action)

    def _connect_signals(self):
        self.effects_panel.settings_changed.connect(self._on_settings_changed)
        self.controller.render_ready.connect(self._on_render_ready)
        self.controller.render_failed.connect(self._on_render_failed)
        self.controller.busy_changed.connect(self._on_busy_changed)

    # === Event Handlers ===

    def _on_open_clicked(self):
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            "Select Image",
            "",
            "Images (*.png *.jpg *.jpeg *.bmp *.gif *.tiff);;All Files (*)",
        )
        if file_path:
            self.load_image(file_path)

    def _on_save_clicked(self):
        if self.last_response is None:
            return
        file_path, _ = QFileDialog.getSaveFileName(
            self, "Save Result", "", "PNG Image (*.png)"
        )
        if not file_path:
            return
        try:
            self.last_response.buffer.to_image().save(file_path)
            self.statusBar().showMessage(f"Saved {Path(file_path).name}")
        except Exception as e:
            QMessageBox.warning(self, "Save Failed", str(e))

    def _on_settings_changed(self, settings: EffectSettings):
        self.settings = settings
        self.controller.update_settings(settings)

    def _on_render_ready(self, response: RenderResponse):
        self.last_response = response
        self.save_action.setEnabled(True)

        pixmap = QPixmap.fromImage(buffer_to_qimage(response.buffer))
        self.preview_label.setPixmap(
            pixmap.scaled(
                self.preview_label.size(),
                Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.FastTransformation,
            )
        )
        self.effects_panel.show_palette(response.palette)
        self.statusBar().showMessage(
            f"Rendered {response.width}x{response.height} "
            f"in {response.elapsed * 1000:.0f} ms"
        )

    def _on_render_failed(self, message: str):
        self.statusBar().showMessage(f"Error: {message}")

    def _on_busy_changed(self, busy: bool):
        if busy:
            self.statusBar().showMessage("Rendering...")

    # === Public Methods ===

    def load_image(self, file_path: str):
        """Load an image file and render it with the current settings."""
        try:
            buffer = self.processor.load_image(file_path)
        except ValueError as e:
            self.statusBar().showMessage(f"Error: {e}")
            return

        self.current_image_path = file_path
        self.setWindowTitle(f"PixelPalette - {Path(file_path).name}")
        self.controller.set_source(buffer)

    def closeEvent(self, event):
        """Persist settings and stop the render worker."""
        self.controller.stop()

        success, error = self.config_manager.save(self.settings)
        if not success:
            print(f"Warning: Could not save config file: {error}")

        super().closeEvent(event)
