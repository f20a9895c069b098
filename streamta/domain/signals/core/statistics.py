"""
Numerically stable window statistics.

Mean and variance are computed two-pass over an exactly rounded sum
(math.fsum) so long-running feeds at large price levels do not suffer the
catastrophic cancellation of a naive sum-of-squares. Running sums use
Kahan-Babuska compensation.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from ...exceptions import NotReadyError
from .bounded_series import BoundedSeries
from .validation import require_period


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp ``value`` into ``[lower, upper]``."""
    return max(lower, min(upper, value))


def _shifted_mean(values: Sequence[float]) -> float:
    # Offsetting by the first sample keeps a constant window exactly constant.
    first = values[0]
    return first + math.fsum(v - first for v in values) / len(values)


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean. Raises NotReadyError on an empty window."""
    if len(values) == 0:
        raise NotReadyError("mean of an empty window")
    return _shifted_mean(values)


def variance(values: Sequence[float], ddof: int = 1) -> float:
    """
    Two-pass variance of ``values``.

    Args:
        values: Window samples.
        ddof: Delta degrees of freedom; 1 for the sample variance (n-1),
            0 for the population variance.

    Returns:
        The variance, or 0.0 when fewer than ``ddof + 1`` samples exist.
    """
    n = len(values)
    if n <= ddof or n == 0:
        return 0.0
    m = _shifted_mean(values)
    return math.fsum((v - m) * (v - m) for v in values) / (n - ddof)


def stdev(values: Sequence[float], ddof: int = 1) -> float:
    return math.sqrt(variance(values, ddof))


class KahanSum:
    """Compensated running sum (Neumaier variant)."""

    __slots__ = ("_sum", "_compensation")

    def __init__(self, values: Iterable[float] = ()) -> None:
        self._sum = 0.0
        self._compensation = 0.0
        for v in values:
            self.add(v)

    def add(self, value: float) -> None:
        total = self._sum + value
        if abs(self._sum) >= abs(value):
            self._compensation += (self._sum - total) + value
        else:
            self._compensation += (value - total) + self._sum
        self._sum = total

    def reset(self) -> None:
        self._sum = 0.0
        self._compensation = 0.0

    @property
    def value(self) -> float:
        return self._sum + self._compensation


class RollingMoments:
    """
    Windowed mean and variance over the newest ``window`` samples.

    The mean comes from a compensated running sum updated in O(1); the
    variance is recomputed two-pass over the window, which stays exact
    enough on long feeds where an incremental sum of squares would drift.
    """

    __slots__ = ("_window", "_sum")

    def __init__(self, window: int) -> None:
        require_period("window", window)
        self._window: BoundedSeries[float] = BoundedSeries(window)
        self._sum = KahanSum()

    @property
    def window(self) -> int:
        return self._window.capacity

    def push(self, value: float) -> None:
        if self._window.is_full():
            self._sum.add(-self._window[0])
        self._window.push(value)
        self._sum.add(value)

    def reset(self) -> None:
        self._window.reset()
        self._sum.reset()

    def is_ready(self) -> bool:
        return self._window.is_full()

    def __len__(self) -> int:
        return len(self._window)

    def mean(self) -> float:
        if not self._window:
            raise NotReadyError("no samples in rolling window")
        return self._sum.value / len(self._window)

    def variance(self, ddof: int = 1) -> float:
        return variance(self._window.to_list(), ddof)

    def stdev(self, ddof: int = 1) -> float:
        return math.sqrt(self.variance(ddof))
