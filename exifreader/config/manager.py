"""Configuration manager for exifreader."""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from exifreader.config.defaults import DEFAULT_CONFIG

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration errors."""
    pass


class ConfigManager:
    """Manages configuration loading and access.

    This class handles loading configuration from YAML files, merging it
    over the built-in defaults, and providing access to configuration values
    with dot notation.

    Attributes:
        config: Dictionary containing all configuration values
        config_path: Path to the loaded configuration file

    Examples:
        >>> config = ConfigManager.load("config.yaml")
        >>> print(config.get("reader.output_property"))
        'exif'
        >>> print(config.get("http.timeout"))
        30
    """

    def __init__(self, config: Dict[str, Any], config_path: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config: Configuration dictionary
            config_path: Path to the configuration file (optional)
        """
        self.config = config
        self.config_path = config_path

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        create_if_missing: bool = False
    ) -> "ConfigManager":
        """Load configuration from file, falling back to defaults.

        This method attempts to load configuration from the specified path,
        or searches for config.yaml in standard locations. If no config file
        is found, the defaults are used; with create_if_missing=True they are
        also written out so the user has a file to edit.

        Args:
            config_path: Path to configuration file (optional)
            create_if_missing: Whether to create config file if not found

        Returns:
            ConfigManager instance with loaded configuration

        Raises:
            ConfigError: If an explicit path does not exist, or the file
                cannot be loaded or parsed
        """
        if config_path:
            path = Path(config_path).expanduser()
            if not path.exists() and not create_if_missing:
                raise ConfigError(f"Configuration file not found: {path}")
        else:
            path = cls._find_config_file()

        if path and path.exists():
            logger.info(f"Loading configuration from: {path}")
            config = cls._load_yaml(path)

            # Merge with defaults (in case new fields were added)
            config = cls._merge_with_defaults(config)
            return cls(config, path)

        config = copy.deepcopy(DEFAULT_CONFIG)

        if not create_if_missing:
            logger.debug("No configuration file found, using defaults")
            return cls(config, None)

        if path is None:
            path = Path.home() / ".exifreader" / "config.yaml"

        cls._save_yaml(config, path)
        logger.info(f"Default configuration saved to: {path}")
        return cls(config, path)

    @staticmethod
    def _find_config_file() -> Optional[Path]:
        """Search for config.yaml in standard locations.

        Search order:
        1. ~/.exifreader/config.yaml (user home directory)
        2. ./config.yaml (current directory)

        Returns:
            Path to config file if found, None otherwise
        """
        search_paths = [
            Path.home() / ".exifreader" / "config.yaml",
            Path.cwd() / "config.yaml",
        ]

        for path in search_paths:
            if path.exists():
                logger.debug(f"Found config file: {path}")
                return path

        logger.debug("No config file found in standard locations")
        return None

    @staticmethod
    def _load_yaml(path: Path) -> Dict[str, Any]:
        """Load configuration from YAML file.

        Args:
            path: Path to YAML file

        Returns:
            Configuration dictionary

        Raises:
            ConfigError: If file cannot be loaded or parsed
        """
        try:
            with open(path, 'r') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Failed to parse YAML configuration: {path}\n"
                f"Error: {e}"
            ) from e
        except OSError as e:
            raise ConfigError(
                f"Failed to load configuration file: {path}\n"
                f"Error: {e}"
            ) from e

        # An empty file is a valid "use the defaults" config
        if config is None:
            return {}

        if not isinstance(config, dict):
            raise ConfigError(
                f"Invalid configuration file: {path}\n"
                "Configuration must be a YAML dictionary."
            )

        return config

    @staticmethod
    def _save_yaml(config: Dict[str, Any], path: Path) -> None:
        """Save configuration to YAML file.

        Args:
            config: Configuration dictionary
            path: Path to save YAML file

        Raises:
            ConfigError: If file cannot be saved
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)

            with open(path, 'w') as f:
                yaml.dump(
                    config,
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                    allow_unicode=True
                )
        except OSError as e:
            raise ConfigError(
                f"Failed to save configuration to: {path}\n"
                f"Error: {e}"
            ) from e

    @staticmethod
    def _merge_with_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
        """Merge loaded config with defaults to add any new fields.

        User config values take precedence over defaults. This only adds
        missing keys from defaults, never overwrites user values.

        Args:
            config: Loaded configuration dictionary

        Returns:
            Merged configuration with defaults
        """
        def deep_merge(base: dict, updates: dict) -> dict:
            """Recursively merge two dictionaries, with updates taking precedence."""
            result = copy.deepcopy(base)
            for key, value in updates.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = deep_merge(result[key], value)
                else:
                    result[key] = value
            return result

        return deep_merge(DEFAULT_CONFIG, config)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "reader.include_gps")
            default: Default value to return if key not found

        Returns:
            Configuration value or default

        Examples:
            >>> config.get("reader.binary_property")
            'data'
            >>> config.get("nonexistent.key", "default_value")
            'default_value'
        """
        value = self._get_nested_value(self.config, key)
        return value if value is not None else default

    def set(self, key: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "reader.include_gps")
            value: Value to set
        """
        self._set_nested_value(self.config, key, value)

    @staticmethod
    def _get_nested_value(config: Dict[str, Any], key: str) -> Any:
        """Get value from nested dictionary using dot notation.

        Args:
            config: Configuration dictionary
            key: Dot-separated key path

        Returns:
            Value at key path, or None if not found
        """
        value = config

        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return None

        return value

    @staticmethod
    def _set_nested_value(config: Dict[str, Any], key: str, value: Any) -> None:
        """Set value in nested dictionary using dot notation.

        Args:
            config: Configuration dictionary
            key: Dot-separated key path
            value: Value to set
        """
        keys = key.split(".")
        current = config

        for k in keys[:-1]:
            if k not in current or not isinstance(current[k], dict):
                current[k] = {}
            current = current[k]

        current[keys[-1]] = value

    def save(self, path: Optional[str] = None) -> None:
        """Save current configuration to file.

        Args:
            path: Path to save configuration (uses loaded path if not specified)

        Raises:
            ConfigError: If path is not specified and no config was loaded
        """
        save_path = Path(path) if path else self.config_path

        if not save_path:
            raise ConfigError(
                "No configuration path specified. "
                "Provide a path or load config from a file first."
            )

        self._save_yaml(self.config, save_path)
        logger.info(f"Configuration saved to: {save_path}")

    def to_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary.

        Returns:
            Configuration dictionary
        """
        return copy.deepcopy(self.config)

    def __repr__(self) -> str:
        """Return string representation of configuration."""
        path_str = f" from {self.config_path}" if self.config_path else ""
        return f"<ConfigManager{path_str}>"
