"""
Configuration management for anyvault.

This module handles loading and accessing configuration values from config.yaml.
It provides a centralized way to manage export settings and makes it easy to
change property policy without changing code.
"""

import yaml
import sys
from pathlib import Path
from typing import Any, Dict, List
import logging


class ConfigManager:
    """
    Manages configuration loading and access for anyvault.
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                raise ValueError(f"Configuration root must be a mapping: {self.config_path}")
            self._config = loaded

            logging.info(f"Configuration loaded from {self.config_path}")

        except (OSError, ValueError, yaml.YAMLError) as e:
            logging.warning(f"Failed to load configuration: {e}")
            # Fall back to default configuration
            self._config = self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return {
            "paths": {
                "notes_dir": "notes",
                "bases_dir": "bases",
                "log_file": ""
            },
            "export": {
                "include_object_id": True,
                "include_dynamic_properties": False,
                "include_archived_properties": False,
                "exclude_empty_properties": False,
                "exclude_properties": [],
                "force_include_properties": [],
                "link_as_note_properties": [],
                "picture_to_cover": True,
                "enable_bases_kanban": True,
                "pretty_property_icon": False
            },
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "export.picture_to_cover")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("paths.bases_dir")  # Returns "bases"
            config.get("export.link_as_note_properties")  # Returns []
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def get_list(self, key_path: str) -> List[str]:
        """
        Get a list of strings, accepting either a YAML list or a comma-separated string.
        """
        value = self.get(key_path, [])
        if isinstance(value, str):
            value = value.split(',')
        if not isinstance(value, list):
            return []
        return [str(item).strip() for item in value if str(item).strip()]

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def notes_directory(self) -> str:
        """Get the vault directory for documents."""
        return self.get("paths.notes_dir", "notes")

    @property
    def bases_directory(self) -> str:
        """Get the vault directory for query files."""
        return self.get("paths.bases_dir", "bases")

    @property
    def log_filename(self) -> str:
        """Get log file name; empty disables file logging."""
        return self.get("paths.log_file", "")

    @property
    def picture_to_cover(self) -> bool:
        return bool(self.get("export.picture_to_cover", True))

    @property
    def enable_bases_kanban(self) -> bool:
        return bool(self.get("export.enable_bases_kanban", True))


def setup_logging(manager: "ConfigManager") -> None:
    """Configure logging from the `logging` and `paths` sections."""
    level = getattr(logging, str(manager.get("logging.level", "INFO")).upper(), logging.INFO)
    format_str = manager.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if manager.log_filename:
        handlers.append(logging.FileHandler(manager.log_filename))

    logging.basicConfig(level=level, format=format_str, handlers=handlers)


# Global configuration instance
config = ConfigManager()


def get_config() -> ConfigManager:
    """
    Get the global configuration instance.

    Returns:
        The global ConfigManager instance
    """
    return config
