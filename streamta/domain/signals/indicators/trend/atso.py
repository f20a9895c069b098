"""
ATSO (Adaptive Trend Strength Oscillator).

Directional-movement strength over a lookback chosen from realised
volatility, expressed relative to its own recent history:

1. volatility = sample stdev of the last ``volatility_period`` closes
2. period     = AdaptivePeriodSelector(min, max, sensitivity).select(volatility)
3. raw        = sum of directional deltas over the last ``period`` bars / period
4. avg        = mean raw strength of every earlier window of that period
5. value      = clamp((raw / avg - 1) * 100, -100, 100), sign-flipped when avg < 0
6. smoothed by an SMA-seeded EMA and clamped again

A directional delta takes the larger of the high advance and the low decline
when that side is positive; ties contribute nothing. With no earlier window
to compare against, the clamped raw strength is emitted. A zero historical
average raises DivisionByZeroError for that bar.

Signals:
- Zero-line crossover of the smoothed value
"""

from __future__ import annotations

import math
from typing import List, Optional

from ....exceptions import DivisionByZeroError, InvalidParamsError
from ...core.adaptive_period import AdaptivePeriodSelector
from ...core.bounded_series import BoundedSeries
from ...core.moving_average import MAType, MovingAverage
from ...core.statistics import clamp, stdev
from ...core.validation import require_period
from ...models import IndicatorConfig, PriceBar, SignalCategory
from ..base import DEFAULT_HISTORY, StreamingIndicator

ATSO_BOUND = 100.0


def directional_delta(prev_high: float, prev_low: float, high: float, low: float) -> float:
    """
    Signed contribution of one bar-to-bar move.

    Returns the high advance when it beats the low decline and is positive,
    minus the low decline in the mirror case, and 0 otherwise.
    """
    up = high - prev_high
    down = prev_low - low
    if up > down and up > 0:
        return up
    if down > up and down > 0:
        return -down
    return 0.0


class AdaptiveTrendStrengthOscillator(StreamingIndicator):
    """
    Adaptive Trend Strength Oscillator, bounded to [-100, 100].

    Default Parameters:
        min_period: 2
        max_period: 14
        volatility_period: 14
        sensitivity: 2.0
        smoothing: config.atso_ema_period (5)
    """

    name = "atso"
    display_name = "ATSO"
    category = SignalCategory.TREND

    def __init__(
        self,
        min_period: int = 2,
        max_period: int = 14,
        volatility_period: int = 14,
        sensitivity: float = 2.0,
        config: Optional[IndicatorConfig] = None,
        history: int = DEFAULT_HISTORY,
    ) -> None:
        super().__init__(config, history)
        self._configure(min_period, max_period, volatility_period, sensitivity)
        self._ema = MovingAverage(MAType.EMA, int(self.config.atso_ema_period))
        self._current_period: Optional[int] = None
        self._raw: Optional[float] = None

    def _configure(self, min_period: int, max_period: int, volatility_period: int,
                   sensitivity: float) -> None:
        require_period("min_period", min_period, minimum=2)
        require_period("volatility_period", volatility_period, minimum=2)
        if max_period < min_period:
            raise InvalidParamsError(
                f"max_period ({max_period}) must be >= min_period ({min_period})"
            )
        self._selector = AdaptivePeriodSelector(min_period, max_period, sensitivity)
        self._volatility_period = volatility_period
        capacity = max_period + volatility_period + 1
        self._highs: BoundedSeries[float] = BoundedSeries(capacity)
        self._lows: BoundedSeries[float] = BoundedSeries(capacity)
        self._bar_closes: BoundedSeries[float] = BoundedSeries(capacity)

    # ------------------------------------------------------------------
    # Parameters and accessors
    # ------------------------------------------------------------------

    @property
    def min_period(self) -> int:
        return self._selector.min_period

    @property
    def max_period(self) -> int:
        return self._selector.max_period

    @property
    def volatility_period(self) -> int:
        return self._volatility_period

    @property
    def sensitivity(self) -> float:
        return self._selector.sensitivity

    def set_periods(self, min_period: int, max_period: int, volatility_period: int) -> None:
        """Replace the period bounds; all buffered bars and outputs are discarded."""
        with self._lock.write_locked():
            self._configure(min_period, max_period, volatility_period, self._selector.sensitivity)
            self._clear_outputs()

    def set_volatility_sensitivity(self, sensitivity: float) -> None:
        """Replace the volatility sensitivity; all state is discarded."""
        with self._lock.write_locked():
            self._selector.set_sensitivity(sensitivity)
            self._reset_state()
            self._clear_outputs()

    def _clear_outputs(self) -> None:
        self._values.reset()
        self._pending_error = None
        self._ema.reset()
        self._current_period = None
        self._raw = None

    def current_period(self) -> Optional[int]:
        """Adaptive period used for the latest bar, or None while warming up."""
        with self._lock.read_locked():
            return self._current_period

    def raw_value(self) -> Optional[float]:
        """Un-normalised raw strength of the latest bar."""
        with self._lock.read_locked():
            return self._raw

    # ------------------------------------------------------------------
    # Computation
    # ------------------------------------------------------------------

    def _is_warm(self) -> bool:
        return len(self._bar_closes) >= max(self.max_period, self._volatility_period)

    def _window_strength(self, deltas: List[float], end: int, period: int) -> float:
        # deltas[i] is the move from bar i to bar i+1
        return math.fsum(deltas[end - period + 1:end]) / period

    def _update(self, bar: PriceBar) -> Optional[float]:
        self._highs.push(bar.high)
        self._lows.push(bar.low)
        self._bar_closes.push(bar.close)
        if not self._is_warm():
            return None

        volatility = stdev(self._bar_closes.last(self._volatility_period), ddof=1)
        period = self._selector.select(volatility)
        self._current_period = period

        highs = self._highs.to_list()
        lows = self._lows.to_list()
        deltas = [
            directional_delta(highs[i - 1], lows[i - 1], highs[i], lows[i])
            for i in range(1, len(highs))
        ]
        last = len(highs) - 1
        raw = self._window_strength(deltas, last, period)
        self._raw = raw

        history = [self._window_strength(deltas, end, period) for end in range(period - 1, last)]
        if not history:
            normalized = clamp(raw, -ATSO_BOUND, ATSO_BOUND)
        else:
            avg = math.fsum(history) / len(history)
            if avg == 0:
                raise DivisionByZeroError(
                    f"ATSO historical average is zero (period={period}, windows={len(history)})"
                )
            normalized = (raw / avg - 1.0) * 100.0
            if avg < 0:
                normalized = -normalized
            normalized = clamp(normalized, -ATSO_BOUND, ATSO_BOUND)

        self._ema.add(normalized)
        if not self._ema.is_ready():
            return normalized
        return clamp(self._ema.calculate(), -ATSO_BOUND, ATSO_BOUND)

    def _reset_state(self) -> None:
        self._highs.reset()
        self._lows.reset()
        self._bar_closes.reset()
        self._ema.reset()
        self._current_period = None
        self._raw = None

    def __repr__(self) -> str:
        return (
            f"AdaptiveTrendStrengthOscillator(min={self.min_period}, max={self.max_period}, "
            f"volatility={self._volatility_period}, sensitivity={self.sensitivity})"
        )
