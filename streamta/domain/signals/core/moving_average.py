"""
Streaming moving-average kernels.

- MovingAverage: SMA / EMA / WMA over a bounded window, selected by MAType
- RunningEma: first-sample seeded EMA used in DEMA cascades

The EMA in MovingAverage emits nothing until ``period`` samples arrived; its
first value is the exact simple average of those samples and every later
value recurses from that seed.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional

import numpy as np

from ...exceptions import InvalidInputError, InvalidParamsError, NotReadyError
from ....utils.rwlock import ReadWriteLock
from .bounded_series import BoundedSeries
from .statistics import mean
from .validation import require_period


class MAType(Enum):
    """Moving-average variant."""

    SMA = "sma"
    EMA = "ema"
    WMA = "wma"


def ema_smoothing_factor(period: int) -> float:
    """Return the EMA smoothing constant 2 / (period + 1)."""
    require_period("period", period)
    return 2.0 / (period + 1)


class MovingAverage:
    """
    Incremental SMA, EMA or WMA.

    Safe for one writer (``add``, ``reset``, ``set_period``) and many
    concurrent readers (``calculate``, ``is_ready``).

    Example:
        >>> ma = MovingAverage(MAType.SMA, 3)
        >>> for v in (1, 2, 3, 4, 5):
        ...     ma.add(v)
        >>> ma.calculate()
        4.0
    """

    def __init__(self, ma_type: MAType, period: int) -> None:
        if not isinstance(ma_type, MAType):
            raise InvalidParamsError(f"unknown moving-average type {ma_type!r}")
        self._alpha = ema_smoothing_factor(period)
        self._ma_type = ma_type
        self._period = period
        self._lock = ReadWriteLock()
        self._window: BoundedSeries[float] = BoundedSeries(period)
        self._ema: Optional[float] = None

    @property
    def ma_type(self) -> MAType:
        return self._ma_type

    @property
    def period(self) -> int:
        return self._period

    def add(self, value: float) -> None:
        """
        Feed one sample.

        Raises:
            InvalidInputError: If ``value`` is NaN or infinite.
        """
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvalidInputError(f"moving average input must be finite, got {value!r}")
        with self._lock.write_locked():
            if self._ma_type is MAType.EMA and self._ema is not None:
                self._ema += self._alpha * (value - self._ema)
                return
            self._window.push(float(value))
            if self._ma_type is MAType.EMA and self._window.is_full():
                self._ema = mean(self._window)

    def calculate(self) -> float:
        """
        Current average.

        Raises:
            NotReadyError: Until ``period`` samples have been added.
        """
        with self._lock.read_locked():
            if self._ma_type is MAType.EMA:
                if self._ema is None:
                    raise NotReadyError(
                        f"EMA({self._period}) needs {self._period} samples, has {len(self._window)}"
                    )
                return self._ema
            if not self._window.is_full():
                raise NotReadyError(
                    f"{self._ma_type.name}({self._period}) needs {self._period} samples, "
                    f"has {len(self._window)}"
                )
            if self._ma_type is MAType.SMA:
                return mean(self._window)
            return _weighted_average(self._window.to_array())

    def is_ready(self) -> bool:
        with self._lock.read_locked():
            if self._ma_type is MAType.EMA:
                return self._ema is not None
            return self._window.is_full()

    def reset(self) -> None:
        with self._lock.write_locked():
            self._window.reset()
            self._ema = None

    def set_period(self, period: int) -> None:
        """Change the period; all history is discarded and seeding restarts."""
        alpha = ema_smoothing_factor(period)
        with self._lock.write_locked():
            self._alpha = alpha
            self._period = period
            self._window.resize(period)
            self._ema = None

    def __repr__(self) -> str:
        return f"MovingAverage({self._ma_type.name}, period={self._period})"


def _weighted_average(window: np.ndarray) -> float:
    """Linear weights 1 (oldest) .. n (newest)."""
    n = len(window)
    weights = np.arange(1, n + 1, dtype=float)
    return float(np.dot(weights, window) / (n * (n + 1) / 2.0))


def weighted_average(values) -> float:
    """WMA of a full window given oldest first."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        raise NotReadyError("weighted average of an empty window")
    return _weighted_average(arr)


class RunningEma:
    """
    EMA seeded with its first input instead of an SMA warm-up.

    Used for the DEMA cascade of the momentum oscillator, where a value is
    needed from the very first bar. Updates as ``value += alpha * (x - value)``
    so a constant input stays exactly constant.
    """

    __slots__ = ("alpha", "value")

    def __init__(self, period: int) -> None:
        self.alpha = ema_smoothing_factor(period)
        self.value: Optional[float] = None

    def update(self, sample: float) -> float:
        if self.value is None:
            self.value = sample
        else:
            self.value += self.alpha * (sample - self.value)
        return self.value

    def reset(self) -> None:
        self.value = None
