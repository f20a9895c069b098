"""
Trace context for correlating logs across the processing of a single bar.

Provides:
- Unique bar ids (6-char hex) for each ingested bar
- Context propagation via contextvars (thread and async safe)
- Easy access to the current bar id from any module

Usage:
    # In the engine (start of a bar)
    with new_bar() as bar_id:
        for provider in providers:
            provider.add(...)

    # In any module
    from streamta.utils.trace_context import get_bar_id
    logger.debug("updating", extra={"bar": get_bar_id()})
"""

from __future__ import annotations

import secrets
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Generator, Optional

# Context variable for the current bar id
_bar_id: ContextVar[Optional[str]] = ContextVar("bar_id", default=None)

# Number of bars opened in this session; engines on other threads share it
_bar_counter: int = 0
_counter_lock = threading.Lock()


def generate_bar_id() -> str:
    """
    Generate a new unique bar id.

    Returns:
        6-character hex string (e.g., "a7f3b2").
    """
    return secrets.token_hex(3)


def get_bar_id() -> str:
    """
    Get the current bar id.

    Returns:
        Current bar id, or "------" if no bar is being processed.
    """
    bar_id = _bar_id.get()
    return bar_id if bar_id else "------"


@contextmanager
def new_bar() -> Generator[str, None, None]:
    """
    Open a bar context with a fresh id and restore the previous one on exit.

    Yields:
        The new bar id.
    """
    global _bar_counter
    with _counter_lock:
        _bar_counter += 1

    bar_id = generate_bar_id()
    token = _bar_id.set(bar_id)
    try:
        yield bar_id
    finally:
        _bar_id.reset(token)


def get_bar_counter() -> int:
    """Total number of bar contexts opened in this session."""
    return _bar_counter


def reset_bar_counter() -> None:
    """Reset the bar counter (for testing)."""
    global _bar_counter
    with _counter_lock:
        _bar_counter = 0
