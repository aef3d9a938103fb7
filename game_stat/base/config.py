"""
Configuration management for game_stat.

This module provides a StatConfig class for loading, managing, and accessing
configuration data from JSON files.
"""

import copy
import os
from typing import Any, Dict, List, Optional, Tuple

from game_stat.utils.json_utils import load_json, save_json
from game_stat.utils.logging_config import get_logger

logger = get_logger(__name__)


class StatConfig:
    """
    Configuration manager.

    Each domain is one JSON file in the configuration directory. Values are
    read and written with dot notation (e.g., config.get("stats.capacity")).
    """

    # Default configuration directory, relative to the current working directory
    _CONFIG_DIR = "config"

    # Mapping of domain to file name within the configuration directory
    _DEFAULT_CONFIG_FILES = {
        "stats": "stat_config.json",
        "system": "system_config.json",
    }

    _DEFAULT_CONFIGS = {
        "stats": {
            "default_base_value": 0.0,
            "capacity": None,  # None means the modifier store grows as needed
            "shared": False,
            "base_values": {},
        },
        "system": {
            "log_level": "INFO",
            "log_to_file": False,
            "log_dir": "logs",  # Relative to the current working directory
        },
    }

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize the configuration.

        Args:
            config_dir: Directory holding the JSON files. Relative paths are
                resolved against the current working directory.
        """
        self._config_dir_abs = os.path.abspath(config_dir or self._CONFIG_DIR)
        self._config_data: Dict[str, Dict[str, Any]] = {}

        os.makedirs(self._config_dir_abs, exist_ok=True)
        self._load_all_configs()

    @property
    def config_dir(self) -> str:
        return self._config_dir_abs

    def _load_all_configs(self) -> None:
        """Load all configuration files."""
        for domain, filename in self._DEFAULT_CONFIG_FILES.items():
            self._load_config(domain, filename)

    def _load_config(self, domain: str, filename: str) -> None:
        """
        Load a configuration file for the specified domain.

        Missing keys are filled in from the defaults; a missing file is
        created with the defaults.
        """
        file_path = os.path.join(self._config_dir_abs, filename)
        defaults = copy.deepcopy(self._DEFAULT_CONFIGS[domain])

        if not os.path.exists(file_path):
            logger.warning(f"Config file for '{domain}' not found. Creating default: {file_path}")
            self._config_data[domain] = defaults
            try:
                save_json(defaults, file_path)
            except OSError as e:
                logger.error(f"Error creating default configuration for {domain} at {file_path}: {e}")
            return

        try:
            loaded_data = load_json(file_path)
        except (OSError, ValueError) as e:
            logger.error(f"Error loading configuration for domain '{domain}' from {file_path}: {e}")
            self._config_data[domain] = defaults
            return

        if not isinstance(loaded_data, dict):
            logger.warning(f"Configuration for domain '{domain}' is not a JSON object. Using defaults.")
            self._config_data[domain] = defaults
            return

        defaults.update(loaded_data)
        self._config_data[domain] = defaults
        logger.info(f"Loaded configuration for domain '{domain}' from {file_path}")

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: The path to the value (e.g., "stats.base_values.armor").
            default: Returned if the key is not found.
        """
        parts = key_path.split(".")
        domain = parts[0]

        if domain not in self._config_data:
            return default

        current: Any = self._config_data[domain]
        for part in parts[1:]:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def set(self, key_path: str, value: Any) -> bool:
        """
        Set a configuration value using dot notation and save the domain file.

        Returns:
            True if the value was set and saved successfully, False otherwise.
        """
        parts = key_path.split(".")
        domain = parts[0]

        if domain not in self._DEFAULT_CONFIG_FILES or len(parts) < 2:
            logger.error(f"Cannot set configuration '{key_path}': unknown domain '{domain}'")
            return False

        current = self._config_data.setdefault(domain, {})
        for part in parts[1:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = value
        logger.info(f"Set configuration '{key_path}' to: {value}")

        file_path = os.path.join(self._config_dir_abs, self._DEFAULT_CONFIG_FILES[domain])
        try:
            save_json(self._config_data[domain], file_path)
        except OSError as e:
            logger.error(f"Error saving configuration for domain '{domain}' to {file_path}: {e}")
            return False
        return True

    def get_all(self, domain: Optional[str] = None) -> Dict[str, Any]:
        """Get a copy of one domain, or of every domain when ``domain`` is None."""
        if domain is None:
            return copy.deepcopy(self._config_data)
        if domain not in self._config_data:
            logger.warning(f"Domain '{domain}' not found in configuration")
            return {}
        return copy.deepcopy(self._config_data[domain])

    def reload(self, domain: Optional[str] = None) -> bool:
        """
        Reload configuration from files.

        Returns:
            True if the configuration was reloaded, False for an unknown domain.
        """
        if domain is None:
            self._load_all_configs()
            logger.info("Reloaded all configurations.")
            return True

        if domain not in self._DEFAULT_CONFIG_FILES:
            logger.warning(f"Cannot reload unknown domain '{domain}'.")
            return False

        self._load_config(domain, self._DEFAULT_CONFIG_FILES[domain])
        logger.info(f"Reloaded configuration for domain '{domain}'.")
        return True

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Validate the stats configuration.

        Returns:
            A tuple of (is_valid, error_messages).
        """
        errors = []

        capacity = self.get("stats.capacity")
        if capacity is not None and (isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 0):
            errors.append(f"stats.capacity must be null or a non-negative integer, got {capacity!r}")

        if not isinstance(self.get("stats.shared"), bool):
            errors.append("stats.shared must be true or false")

        default_base = self.get("stats.default_base_value")
        if isinstance(default_base, bool) or not isinstance(default_base, (int, float)):
            errors.append("stats.default_base_value must be a number")

        base_values = self.get("stats.base_values")
        if not isinstance(base_values, dict):
            errors.append("stats.base_values must be an object")
        else:
            for name, value in base_values.items():
                if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
                    errors.append(f"stats.base_values.{name} must be a number or null")

        is_valid = not errors
        if is_valid:
            logger.info("Configuration validation passed.")
        else:
            logger.warning(f"Configuration validation failed: {errors}")

        return is_valid, errors


# Process-wide configuration
_config_instance: Optional[StatConfig] = None


def get_config() -> StatConfig:
    """Get the process-wide configuration instance."""
    global _config_instance
    if _config_instance is None:
        _config_instance = StatConfig()
    return _config_instance
