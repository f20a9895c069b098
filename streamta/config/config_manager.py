"""
Configuration manager with environment-based loading.

Supports:
- Base configuration (base.yaml)
- Environment-specific overrides (dev.yaml, prod.yaml)
"""

from __future__ import annotations

from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Type, TypeVar, Union

import yaml

from ..domain.exceptions import ConfigurationError, InvalidParamsError
from ..domain.signals.models import ConfluenceSettings, IndicatorConfig, ProviderSettings
from ..utils.logging_setup import get_logger
from .models import AppConfig, LoggingConfig

logger = get_logger(__name__)

T = TypeVar("T")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigManager:
    """
    Configuration manager with environment support.

    Loads configuration in this order:
    1. base.yaml (default config)
    2. {env}.yaml (environment-specific, e.g., dev.yaml)

    Later configs override earlier ones.
    """

    def __init__(self, config_dir: Union[str, Path] = "config", env: str = "dev"):
        """
        Initialize config manager.

        Args:
            config_dir: Directory containing config files.
            env: Environment name (dev, prod, etc).
        """
        self.config_dir = Path(config_dir)
        self.env = env
        self.config: Dict[str, Any] = {}

    def load(self) -> AppConfig:
        """
        Load configuration from YAML files.

        Returns:
            AppConfig object.

        Raises:
            FileNotFoundError: If base config not found.
            ConfigurationError: If config is invalid.
        """
        base_path = self.config_dir / "base.yaml"
        if not base_path.exists():
            raise FileNotFoundError(f"Base config not found: {base_path}")

        self.config = self._load_yaml(base_path)
        logger.info("Loaded base config", extra={"path": str(base_path)})

        env_path = self.config_dir / f"{self.env}.yaml"
        if env_path.exists():
            self.config = self._merge_dicts(self.config, self._load_yaml(env_path))
            logger.info("Loaded environment config", extra={"env": self.env, "path": str(env_path)})

        return self._parse_config()

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        """Load YAML file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Malformed YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Top level of {path} must be a mapping")
        return data

    def _merge_dicts(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts (override wins)."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_dicts(result[key], value)
            else:
                result[key] = value
        return result

    def _parse_config(self) -> AppConfig:
        """Parse raw dict into AppConfig."""
        try:
            indicators = _build(IndicatorConfig, self._section("indicators"))
            confluence = _build(ConfluenceSettings, self._section("confluence"))

            providers_raw = dict(self._section("providers"))
            weights = providers_raw.pop("weights", None) or {}
            if not isinstance(weights, dict):
                raise InvalidParamsError("providers.weights must be a mapping")
            providers = _build(ProviderSettings, providers_raw, weights=dict(weights))

            logging_raw = self._section("logging")
            level = str(logging_raw.get("level", "INFO")).upper()
            if level not in _LOG_LEVELS:
                raise InvalidParamsError(f"unknown log level {level!r}")
            logging_config = LoggingConfig(
                level=level,
                json=bool(logging_raw.get("json", True)),
                directory=str(logging_raw.get("directory", "./logs")),
                console=bool(logging_raw.get("console", False)),
            )
        except (InvalidParamsError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        return AppConfig(
            indicators=indicators,
            confluence=confluence,
            providers=providers,
            logging=logging_config,
            raw=self.config,
        )

    def _section(self, name: str) -> Dict[str, Any]:
        section = self.config.get(name) or {}
        if not isinstance(section, dict):
            raise InvalidParamsError(f"section {name!r} must be a mapping")
        return section


def _build(cls: Type[T], values: Dict[str, Any], **overrides: Any) -> T:
    """Instantiate a settings dataclass, rejecting keys it does not declare."""
    known = {f.name for f in fields(cls)}
    unknown = set(values) - known
    if unknown:
        raise InvalidParamsError(f"unknown {cls.__name__} keys: {sorted(unknown)}")
    return cls(**{**values, **overrides})
