"""Widget factory for creating common UI patterns with reduced boilerplate.

This module provides factory functions to eliminate repetitive widget creation
code in the effect controls.
"""

from typing import Optional, Tuple

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QSlider, QWidget


class WidgetFactory:
    """Factory class for creating commonly used widget patterns."""

    @staticmethod
    def create_slider_with_label(
        range_min: int,
        range_max: int,
        value: int,
        label_width: int = 40,
        label_format: str = "{}",
        tick_interval: Optional[int] = None,
        orientation: Qt.Orientation = Qt.Orientation.Horizontal,
        tooltip: str = "",
    ) -> Tuple[QSlider, QLabel]:
        """Create a slider with an auto-updating value label.

        The label automatically updates when the slider value changes.

        Args:
            range_min: Minimum slider value
            range_max: Maximum slider value
            value: Initial value (clamped into range by Qt)
            label_width: Minimum width for label
            label_format: Format string for label (use {} for value placeholder)
            tick_interval: Tick mark interval (None = no ticks)
            orientation: Slider orientation
            tooltip: Tooltip text

        Returns:
            Tuple of (slider, label)
        """
        slider = QSlider(orientation)
        slider.setRange(range_min, range_max)
        slider.setValue(value)
        if tooltip:
            slider.setToolTip(tooltip)

        if tick_interval:
            slider.setTickPosition(QSlider.TickPosition.TicksBelow)
            slider.setTickInterval(tick_interval)

        label = QLabel(label_format.format(slider.value()))
        label.setMinimumWidth(label_width)

        # Auto-connect slider to label
        slider.valueChanged.connect(lambda v: label.setText(label_format.format(v)))

        return slider, label

    @staticmethod
    def create_labeled_row(
        label_text: str,
        *widgets: QWidget,
    ) -> QHBoxLayout:
        """Create a horizontal layout with a label followed by widgets."""
        layout = QHBoxLayout()
        layout.addWidget(QLabel(label_text))
        for widget in widgets:
            layout.addWidget(widget)
        return layout
