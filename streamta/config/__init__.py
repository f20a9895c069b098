"""Configuration loading."""

from .config_manager import ConfigManager
from .models import AppConfig, LoggingConfig

__all__ = ["ConfigManager", "AppConfig", "LoggingConfig"]
