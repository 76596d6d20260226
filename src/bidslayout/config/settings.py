"""
Settings and configuration.

Settings are stored as JSON in a platform-specific location:

- Windows: %APPDATA%/LocalLow/bidslayout/settings.json
- macOS: ~/Library/Application Support/bidslayout/settings.json
- Linux: ~/.config/bidslayout/settings.json

Settings are loaded on first access and saved when updated.

Example:
    from bidslayout.config.settings import get_settings, get_settings_manager

    settings = get_settings()
    print(settings.tolerant)

    # Update settings (auto-saves)
    manager = get_settings_manager()
    manager.update(tolerant=True)
"""

import json
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from ..infrastructure.paths import get_persistent_data_directory


@dataclass
class AppSettings:
    """Settings for loading datasets and logging."""

    # Logging settings
    log_level: int = logging.INFO
    log_to_file: bool = True
    log_file_path: Optional[Path] = None  # None = log.txt in the data directory

    # Loading settings
    tolerant: bool = False  # True = description problems are warnings, not errors


class SettingsManager:
    """
    Manages loading and saving settings.
    """

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize the settings manager.

        Args:
            config_file: Path to configuration file. If None, uses default location.
        """
        if config_file is None:
            config_file = get_persistent_data_directory() / "settings.json"

        self.config_file = config_file
        self._settings = AppSettings()
        self._logger = logging.getLogger(__name__)

    def load(self) -> AppSettings:
        """
        Load settings from configuration file.

        Unknown keys are ignored; an unreadable file leaves the defaults.

        Returns:
            The loaded settings object.
        """
        if not self.config_file.exists():
            self._logger.info(f"Settings file not found at {self.config_file}, using defaults")
            return self._settings

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            self._logger.error(f"Failed to load settings file: {e}. Using defaults.")
            return self._settings

        if not isinstance(data, dict):
            self._logger.error(f"Settings file is not a JSON object: {self.config_file}. Using defaults.")
            return self._settings

        if data.get('log_file_path'):
            data['log_file_path'] = Path(data['log_file_path'])

        for key, value in data.items():
            if hasattr(self._settings, key):
                setattr(self._settings, key, value)

        self._logger.info(f"Settings loaded from {self.config_file}")
        return self._settings

    def save(self, settings: Optional[AppSettings] = None) -> None:
        """
        Save settings to configuration file.

        Args:
            settings: Settings object to save. If None, saves current settings.
        """
        if settings is not None:
            self._settings = settings

        data = asdict(self._settings)
        if data.get('log_file_path'):
            data['log_file_path'] = str(Path(data['log_file_path'])).replace('\\', '/')

        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)

            # Atomic write: write to temp file, then rename
            temp_file = self.config_file.with_suffix('.tmp')
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_file.replace(self.config_file)

            self._logger.info(f"Settings saved to {self.config_file}")
        except OSError as e:
            self._logger.error(f"Failed to save settings: {e}")

    def get(self) -> AppSettings:
        """Get the current settings."""
        return self._settings

    def update(self, **kwargs) -> None:
        """
        Update specific settings and auto-save.

        Args:
            **kwargs: Setting names and values to update.
        """
        for key, value in kwargs.items():
            if hasattr(self._settings, key):
                setattr(self._settings, key, value)
            else:
                self._logger.warning(f"Ignoring unknown setting: {key}")

        self.save()

    def reset_to_defaults(self) -> None:
        """Reset all settings to their default values and save."""
        self._settings = AppSettings()
        self.save()


# Global settings instance
_settings_manager: Optional[SettingsManager] = None


def get_settings_manager() -> SettingsManager:
    """
    Get the global settings manager instance.

    Returns:
        The global SettingsManager.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
        _settings_manager.load()
    return _settings_manager


def get_settings() -> AppSettings:
    """
    Get the current settings.

    Returns:
        The current AppSettings object.
    """
    return get_settings_manager().get()
