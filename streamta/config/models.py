"""Configuration data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from ..domain.signals.models import ConfluenceSettings, IndicatorConfig, ProviderSettings


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    json: bool = True
    directory: str = "./logs"
    console: bool = False


@dataclass
class AppConfig:
    """Complete application configuration."""
    indicators: IndicatorConfig
    confluence: ConfluenceSettings
    providers: ProviderSettings
    logging: LoggingConfig
    raw: Dict[str, Any] = field(default_factory=dict)  # Merged YAML as loaded
