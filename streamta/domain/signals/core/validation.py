"""Argument validators shared by constructors and setters."""

from __future__ import annotations

import math

from ...exceptions import InvalidParamsError


def require_period(name: str, value: int, minimum: int = 1) -> int:
    """Return ``value`` if it is an integer >= ``minimum``, else raise InvalidParamsError."""
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise InvalidParamsError(f"{name} must be an integer >= {minimum}, got {value!r}")
    return value


def require_positive(name: str, value: float) -> float:
    """Return ``value`` as float if it is finite and > 0, else raise InvalidParamsError."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidParamsError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise InvalidParamsError(f"{name} must be positive and finite, got {value}")
    return float(value)


def require_finite(name: str, value: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidParamsError(f"{name} must be a finite number, got {value!r}")
    return float(value)
