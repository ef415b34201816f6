"""Configuration management for exifreader."""

from exifreader.config.manager import ConfigManager, ConfigError
from exifreader.config.defaults import DEFAULT_CONFIG

__all__ = ["ConfigManager", "ConfigError", "DEFAULT_CONFIG"]
