"""Configuration persistence manager for the PixelPalette application.

This module handles loading and saving of effect settings to/from JSON files.
"""

import json
from dataclasses import asdict, fields
from pathlib import Path
from typing import Optional, Tuple

from models import CONFIG_FILE, EffectSettings


class ConfigManager:
    """Handles loading and saving of effect settings."""

    def __init__(self, config_path: Path = CONFIG_FILE):
        """Initialize config manager.

        Args:
            config_path: Path to configuration file (defaults to ~/.pixelpalette_config.json)
        """
        self.config_path = config_path

    def load(self) -> EffectSettings:
        """Load settings from file, returning defaults if not found.

        Returns:
            EffectSettings with loaded or default values
        """
        settings = EffectSettings()

        try:
            if self.config_path.exists():
                with open(self.config_path, "r") as f:
                    data = json.load(f)
                # Update settings with loaded values (fallback to defaults)
                for item in fields(settings):
                    setattr(
                        settings,
                        item.name,
                        data.get(item.name, getattr(settings, item.name)),
                    )
                print(f"✓ Loaded configuration from {self.config_path}")
        except Exception as e:
            print(f"Warning: Could not load config file: {e}")

        return settings

    def save(self, settings: EffectSettings) -> Tuple[bool, Optional[str]]:
        """Save settings to file.

        Args:
            settings: EffectSettings to save

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        try:
            with open(self.config_path, "w") as f:
                json.dump(asdict(settings), f, indent=2)
            return True, None
        except Exception as e:
            return False, str(e)
