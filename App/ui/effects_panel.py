"""Effect controls panel for palette quantization and pixelation."""

from __future__ import annotations

from dataclasses import replace

from PyQt6.QtCore import QTimer, pyqtSignal
from PyQt6.QtWidgets import (
    QCheckBox,
    QGridLayout,
    QGroupBox,
    QLabel,
    QVBoxLayout,
    QWidget,
)

from models import BLOCK_SIZE_RANGE, PALETTE_SIZE_RANGE, EffectSettings
from ui.styles import SIZES, swatch_stylesheet
from ui.widgets import WidgetFactory


class EffectsPanel(QGroupBox):
    """Panel with the quantize/pixelate toggles and their sliders.

    AIDEV-NOTE: Control changes restart a single-shot timer; only when it
    fires is ``settings_changed`` emitted, so dragging a slider produces one
    render request instead of one per step.
    """

    settings_changed = pyqtSignal(object)  # EffectSettings

    def __init__(
        self,
        settings: EffectSettings | None = None,
        parent: QWidget | None = None,
    ):
        super().__init__("Effects", parent)
        self.settings = settings or EffectSettings()

        self.debounce_timer = QTimer(self)
        self.debounce_timer.setSingleShot(True)
        self.debounce_timer.setInterval(SIZES.DEBOUNCE_MS)

        self._setup_ui()
        self._connect_signals()

    def _setup_ui(self):
        """Initialize the UI components."""
        layout = QVBoxLayout()

        # --- Color Quantization ---
        self.quantize_check = QCheckBox("Reduce palette (k-means)")
        self.quantize_check.setChecked(self.settings.do_quantize)
        layout.addWidget(self.quantize_check)

        self.palette_slider, self.palette_label = (
            WidgetFactory.create_slider_with_label(
                *PALETTE_SIZE_RANGE,
                self.settings.palette_size,
                label_width=SIZES.LABEL_MIN_WIDTH,
                tick_interval=8,
                tooltip="Number of colors in the palette",
            )
        )
        layout.addLayout(
            WidgetFactory.create_labeled_row(
                "Colors:", self.palette_slider, self.palette_label
            )
        )

        # --- Pixelation ---
        self.pixelate_check = QCheckBox("Pixelate")
        self.pixelate_check.setChecked(self.settings.do_pixelate)
        layout.addWidget(self.pixelate_check)

        self.block_slider, self.block_label = WidgetFactory.create_slider_with_label(
            *BLOCK_SIZE_RANGE,
            self.settings.block_size,
            label_width=SIZES.LABEL_MIN_WIDTH,
            label_format="{} px",
            tick_interval=8,
            tooltip="Edge length of each pixel block",
        )
        layout.addLayout(
            WidgetFactory.create_labeled_row(
                "Block size:", self.block_slider, self.block_label
            )
        )

        # --- Palette swatches ---
        layout.addWidget(QLabel("Palette:"))
        self.swatch_grid = QGridLayout()
        self.swatch_grid.setSpacing(2)
        layout.addLayout(self.swatch_grid)

        layout.addStretch()
        self.setLayout(layout)
        self._update_enabled_state()

    def _connect_signals(self):
        """Connect internal signals to handlers."""
        self.quantize_check.toggled.connect(self._on_control_changed)
        self.pixelate_check.toggled.connect(self._on_control_changed)
        self.palette_slider.valueChanged.connect(self._on_control_changed)
        self.block_slider.valueChanged.connect(self._on_control_changed)
        self.debounce_timer.timeout.connect(self._emit_settings)

    # === Event Handlers ===

    def _on_control_changed(self, *_):
        """Copy control values into settings and restart the debounce timer."""
        self.settings = replace(
            self.settings,
            do_quantize=self.quantize_check.isChecked(),
            palette_size=self.palette_slider.value(),
            do_pixelate=self.pixelate_check.isChecked(),
            block_size=self.block_slider.value(),
        )
        self._update_enabled_state()
        self.debounce_timer.start()

    def _emit_settings(self):
        self.settings_changed.emit(self.settings)

    def _update_enabled_state(self):
        self.palette_slider.setEnabled(self.quantize_check.isChecked())
        self.block_slider.setEnabled(self.pixelate_check.isChecked())

    # === Public Methods ===

    def show_palette(self, palette: "list[tuple[int, int, int]]"):
        """Replace the swatch grid with the given palette colors."""
        while self.swatch_grid.count():
            item = self.swatch_grid.takeAt(0)
            if item is not None and item.widget() is not None:
                item.widget().deleteLater()

        for i, color in enumerate(palette):
            swatch = QLabel()
            swatch.setFixedSize(SIZES.SWATCH_SIZE, SIZES.SWATCH_SIZE)
            swatch.setStyleSheet(swatch_stylesheet(color))
            swatch.setToolTip("#{:02x}{:02x}{:02x}".format(*color))
            row, col = divmod(i, SIZES.SWATCHES_PER_ROW)
            self.swatch_grid.addWidget(swatch, row, col)
