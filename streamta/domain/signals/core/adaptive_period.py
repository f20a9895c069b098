"""
AdaptivePeriodSelector - maps realised volatility to a lookback period.

    period = min + floor((max - min) * min(volatility * sensitivity, 1))

clamped to ``[min, max]``. Zero volatility selects ``min`` (fast,
noise-following); raising the sensitivity saturates to ``max`` at lower
volatility.
"""

from __future__ import annotations

import math

from ...exceptions import InvalidInputError, InvalidParamsError
from .validation import require_period, require_positive


class AdaptivePeriodSelector:
    """Volatility to period mapping with a positive, settable sensitivity."""

    __slots__ = ("_min_period", "_max_period", "_sensitivity")

    def __init__(self, min_period: int, max_period: int, sensitivity: float = 2.0) -> None:
        require_period("min_period", min_period)
        require_period("max_period", max_period)
        if max_period < min_period:
            raise InvalidParamsError(
                f"max_period ({max_period}) must be >= min_period ({min_period})"
            )
        self._min_period = min_period
        self._max_period = max_period
        self._sensitivity = require_positive("sensitivity", sensitivity)

    @property
    def min_period(self) -> int:
        return self._min_period

    @property
    def max_period(self) -> int:
        return self._max_period

    @property
    def sensitivity(self) -> float:
        return self._sensitivity

    def set_sensitivity(self, sensitivity: float) -> None:
        self._sensitivity = require_positive("sensitivity", sensitivity)

    def select(self, volatility: float) -> int:
        """
        Pick the period for ``volatility``.

        Raises:
            InvalidInputError: If volatility is negative, NaN or infinite.
        """
        if not math.isfinite(volatility) or volatility < 0:
            raise InvalidInputError(f"volatility must be finite and >= 0, got {volatility}")
        span = self._max_period - self._min_period
        fraction = min(volatility * self._sensitivity, 1.0)
        period = self._min_period + int(math.floor(span * fraction))
        return max(self._min_period, min(self._max_period, period))
