"""Utility modules."""

from .logging_setup import (
    get_logger,
    is_verbose_mode,
    set_verbose_mode,
    setup_category_logging,
    setup_from_config,
    shutdown_logging,
)
from .rwlock import ReadWriteLock
from .trace_context import generate_bar_id, get_bar_id, new_bar

__all__ = [
    "get_logger",
    "is_verbose_mode",
    "set_verbose_mode",
    "setup_category_logging",
    "setup_from_config",
    "shutdown_logging",
    "ReadWriteLock",
    "generate_bar_id",
    "get_bar_id",
    "new_bar",
]
