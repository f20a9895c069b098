"""
Logging setup with categories, bar-id correlation and queued file output.

Provides:
- 3 log categories: system, signals, engine
- Automatic module -> category routing
- Bar id correlation in all logs
- File logging through a QueueHandler/QueueListener pair (non-blocking writes)
- Console output for interactive runs
- JSON or plain text formatting

Categories:
- system: Startup, shutdown, config, CLI
- signals: Indicator kernels and signal providers
- engine: Confluence scoring, regime detection, rollbacks
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from queue import Queue
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .trace_context import get_bar_id

if TYPE_CHECKING:
    from streamta.config.models import LoggingConfig

# =============================================================================
# GLOBAL STATE
# =============================================================================

LOGGER_ROOT = "streamta"

# Global verbose flag (set via --verbose CLI flag)
_verbose_mode: bool = False

# Global log level override (set via --log-level CLI flag)
_log_level_override: Optional[str] = None

# Configured category loggers
_category_loggers: Dict[str, logging.Logger] = {}

# Queue listeners for async file logging (one per category)
_queue_listeners: List[logging.handlers.QueueListener] = []

# =============================================================================
# LOG CATEGORIES AND ROUTING
# =============================================================================

CATEGORIES = ["system", "signals", "engine"]

CATEGORY_SUFFIXES = {
    "system": "sys",
    "signals": "sig",
    "engine": "eng",
}

# Module path -> category routing
# More specific paths should come first
MODULE_ROUTING: List[tuple[str, str]] = [
    ("streamta.domain.signals.confluence_engine", "engine"),
    ("streamta.domain.signals.engine_factory", "engine"),
    ("streamta.domain.signals.indicators.registry", "engine"),
    ("streamta.domain.signals.reporting", "system"),
    ("streamta.domain.signals", "signals"),
    ("streamta.config", "system"),
    ("streamta", "system"),
    ("__main__", "system"),
]

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName", "bar_id"}


def get_category_for_module(module_name: str) -> str:
    """
    Determine the log category for a given module name.

    Args:
        module_name: Full module path (e.g., "streamta.domain.signals.core.bounded_series").

    Returns:
        Category name (system, signals or engine).
    """
    for prefix, category in MODULE_ROUTING:
        if module_name.startswith(prefix):
            return category
    return "system"


# =============================================================================
# GLOBAL CONFIGURATION
# =============================================================================

def set_verbose_mode(enabled: bool) -> None:
    """Enable or disable verbose mode (DEBUG level logging)."""
    global _verbose_mode
    _verbose_mode = enabled


def is_verbose_mode() -> bool:
    """Check if verbose mode is enabled."""
    return _verbose_mode


def set_log_level_override(level: Optional[str]) -> None:
    """Set a global log level override."""
    global _log_level_override
    _log_level_override = level.upper() if level else None


def get_effective_log_level() -> str:
    """Get the effective log level (considering verbose mode and overrides)."""
    if _verbose_mode:
        return "DEBUG"
    if _log_level_override:
        return _log_level_override
    return "INFO"


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Collect the fields passed through ``extra={...}``."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


# =============================================================================
# FORMATTERS
# =============================================================================

class BarIdFilter(logging.Filter):
    """Stamp the current bar id on the record in the emitting thread."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "bar_id"):
            record.bar_id = get_bar_id()
        return True


def _record_bar_id(record: logging.LogRecord) -> str:
    return getattr(record, "bar_id", None) or get_bar_id()


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging with bar id support.

    Formats log records as single-line JSON with:
    - Timestamp
    - Level
    - Category (derived from logger name)
    - Bar id (for correlation)
    - Message
    - Extra data
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string."""
        log_entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "cat": self._get_category(record.name),
            "bar": _record_bar_id(record),
            "msg": record.getMessage(),
        }

        extra = _extra_fields(record)
        if extra:
            log_entry["data"] = extra

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)

    def _get_category(self, logger_name: str) -> str:
        """Extract category from logger name."""
        parts = logger_name.split(".")
        if len(parts) >= 2 and parts[0] == LOGGER_ROOT and parts[1] in CATEGORIES:
            return parts[1]
        return "system"


class ConsoleFormatter(logging.Formatter):
    """
    Console formatter with bar id and color support.

    Format: [LEVEL] [bar] message key=value ...
    """

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for console output."""
        level = record.levelname
        message = record.getMessage()
        extra = _extra_fields(record)
        if extra:
            message += " " + " ".join(f"{k}={v}" for k, v in extra.items())

        if self.use_colors:
            color = self.COLORS.get(level, "")
            return f"{color}[{level:7}]{self.RESET} [{_record_bar_id(record)}] {message}"
        return f"[{level:7}] [{_record_bar_id(record)}] {message}"


# =============================================================================
# LOGGER FACTORY
# =============================================================================

def get_logger(module_name: str) -> logging.Logger:
    """
    Get a logger for the given module, automatically routed to the correct category.

    Args:
        module_name: Module name (typically __name__).

    Returns:
        Logger instance that routes to the appropriate category.

    Example:
        from streamta.utils.logging_setup import get_logger
        logger = get_logger(__name__)
        logger.info("Processing...")
    """
    category = get_category_for_module(module_name)
    return logging.getLogger(f"{LOGGER_ROOT}.{category}")


# =============================================================================
# CATEGORY LOGGING SETUP
# =============================================================================

def setup_category_logging(
    log_dir: Optional[str] = "./logs",
    level: str = "INFO",
    console: bool = False,
    verbose: bool = False,
    json_format: bool = True,
    run_name: str = "replay",
) -> Dict[str, logging.Logger]:
    """
    Set up one log file per category.

    Creates log files in a date-specific subdirectory:
    - logs/{date}/streamta_{run}_sys_{date}.log - System events
    - logs/{date}/streamta_{run}_sig_{date}.log - Indicator events
    - logs/{date}/streamta_{run}_eng_{date}.log - Engine events

    Args:
        log_dir: Base directory for log files. None disables file output.
        level: Default logging level.
        console: Enable console output on stderr.
        verbose: Enable verbose (DEBUG) mode.
        json_format: Use JSONFormatter for files (plain text otherwise).
        run_name: Name embedded in the log file names.

    Returns:
        Dict mapping category name to logger.
    """
    shutdown_logging()

    for category in CATEGORIES:
        logger = logging.getLogger(f"{LOGGER_ROOT}.{category}")
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    set_verbose_mode(verbose)
    if not verbose:
        set_log_level_override(level)
    effective_level = getattr(logging, get_effective_log_level(), logging.INFO)

    date_str = datetime.now().strftime("%Y-%m-%d")
    log_path: Optional[Path] = None
    if log_dir is not None:
        log_path = Path(log_dir) / date_str
        log_path.mkdir(parents=True, exist_ok=True)

    for category in CATEGORIES:
        logger = logging.getLogger(f"{LOGGER_ROOT}.{category}")
        logger.setLevel(effective_level)
        logger.propagate = False
        if not any(isinstance(f, BarIdFilter) for f in logger.filters):
            logger.addFilter(BarIdFilter())

        if log_path is not None:
            suffix = CATEGORY_SUFFIXES[category]
            file_handler = logging.FileHandler(
                filename=str(log_path / f"streamta_{run_name}_{suffix}_{date_str}.log"),
                mode="a",
                encoding="utf-8",
            )
            if json_format:
                file_handler.setFormatter(JSONFormatter())
            else:
                file_handler.setFormatter(logging.Formatter(
                    "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                ))
            file_handler.setLevel(effective_level)

            log_queue: Queue = Queue(-1)
            logger.addHandler(logging.handlers.QueueHandler(log_queue))

            listener = logging.handlers.QueueListener(
                log_queue, file_handler, respect_handler_level=True
            )
            listener.start()
            _queue_listeners.append(listener)

        if console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(ConsoleFormatter(use_colors=sys.stderr.isatty()))
            console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
            logger.addHandler(console_handler)

        _category_loggers[category] = logger

    return _category_loggers


def setup_from_config(
    config: "LoggingConfig",
    verbose: bool = False,
    run_name: str = "replay",
) -> Dict[str, logging.Logger]:
    """Set up category logging from a parsed LoggingConfig."""
    return setup_category_logging(
        log_dir=config.directory,
        level=config.level,
        console=config.console,
        verbose=verbose,
        json_format=config.json,
        run_name=run_name,
    )


def get_category_loggers() -> Dict[str, logging.Logger]:
    """Get all configured category loggers."""
    return _category_loggers


def shutdown_logging() -> None:
    """Stop all queue listeners, flushing pending records to disk."""
    for listener in _queue_listeners:
        listener.stop()
    _queue_listeners.clear()
