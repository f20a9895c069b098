"""
AMDO (Adaptive Momentum Divergence Oscillator).

Compares where the close sits in its recent range with where momentum sits
in its own range, over a lookback chosen from realised volatility:

1. momentum   = close - close ``max_period`` bars ago
2. volatility = sample stdev of the last ``volatility_period`` closes
3. period     = AdaptivePeriodSelector(min, max, sensitivity).select(volatility)
4. norm_price = (close - min(closes)) / (max(closes) - min(closes)) over ``period``
5. norm_mom   = the same normalisation of momentum over ``period``
6. value      = clamp((norm_price - norm_mom) * 100, -100, 100)

A positive value means price is stretched relative to momentum. A window
with a flat price or flat momentum range raises DivisionByZeroError for
that bar.

Signals:
- Zero-line crossover
- Strong divergence: |value| above amdo_divergence with price moving the
  other way on the latest bar
"""

from __future__ import annotations

from typing import List, Optional

from ....exceptions import DivisionByZeroError, InsufficientDataError, InvalidParamsError
from ...core.adaptive_period import AdaptivePeriodSelector
from ...core.bounded_series import BoundedSeries
from ...core.statistics import clamp, stdev
from ...core.validation import require_period
from ...models import DivergenceType, IndicatorConfig, PriceBar, SignalCategory
from ..base import DEFAULT_HISTORY, StreamingIndicator, crossed_above, crossed_below

AMDO_BOUND = 100.0


def _normalise(window: List[float], what: str) -> float:
    low, high = min(window), max(window)
    if high == low:
        raise DivisionByZeroError(f"AMDO {what} range is flat over {len(window)} bars")
    return (window[-1] - low) / (high - low)


def classify_strong_divergence(value: float, price_change: float, threshold: float) -> DivergenceType:
    """Oscillator beyond ``threshold`` while price moved against it."""
    if value > threshold and price_change < 0:
        return DivergenceType.BULLISH
    if value < -threshold and price_change > 0:
        return DivergenceType.BEARISH
    return DivergenceType.NONE


class AdaptiveMomentumDivergenceOscillator(StreamingIndicator):
    """
    Adaptive Momentum Divergence Oscillator, bounded to [-100, 100].

    Default Parameters:
        min_period: 5
        max_period: 14
        volatility_period: 14
        sensitivity: 1.0
    """

    name = "amdo"
    display_name = "AMDO"
    category = SignalCategory.MOMENTUM

    def __init__(
        self,
        min_period: int = 5,
        max_period: int = 14,
        volatility_period: int = 14,
        sensitivity: float = 1.0,
        config: Optional[IndicatorConfig] = None,
        history: int = DEFAULT_HISTORY,
    ) -> None:
        super().__init__(config, history)
        self._configure(min_period, max_period, volatility_period, sensitivity)
        self._price_changes: BoundedSeries[float] = BoundedSeries(history)
        self._current_period: Optional[int] = None

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
        self._bar_closes: BoundedSeries[float] = BoundedSeries(
            max(2 * max_period, volatility_period) + 1
        )
        self._momentum: BoundedSeries[float] = BoundedSeries(max_period + 1)

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
        """Replace the period bounds; buffered bars and outputs are discarded."""
        with self._lock.write_locked():
            self._configure(min_period, max_period, volatility_period, self._selector.sensitivity)
            self._values.reset()
            self._price_changes.reset()
            self._pending_error = None
            self._current_period = None

    def current_period(self) -> Optional[int]:
        """Adaptive period used for the latest bar, or None while warming up."""
        with self._lock.read_locked():
            return self._current_period

    def _update(self, bar: PriceBar) -> Optional[float]:
        closes = self._bar_closes
        closes.push(bar.close)
        max_period = self.max_period
        if len(closes) < max_period + 1:
            return None
        self._momentum.push(bar.close - closes[-(max_period + 1)])
        if len(self._momentum) < max_period or len(closes) < self._volatility_period:
            return None

        volatility = stdev(closes.last(self._volatility_period), ddof=1)
        period = self._selector.select(volatility)
        self._current_period = period

        norm_price = _normalise(closes.last(period), "price")
        norm_momentum = _normalise(self._momentum.last(period), "momentum")
        self._price_changes.push(closes[-1] - closes[-2])
        return clamp((norm_price - norm_momentum) * 100.0, -AMDO_BOUND, AMDO_BOUND)

    def _reset_state(self) -> None:
        self._bar_closes.reset()
        self._momentum.reset()
        self._price_changes.reset()
        self._current_period = None

    def is_strong_divergence(self) -> DivergenceType:
        """
        Strong divergence on the latest bar against ``amdo_divergence``.

        Raises:
            InsufficientDataError: Fewer than two AMDO values.
        """
        with self._lock.read_locked():
            self._raise_pending()
            if len(self._values) < 2:
                raise InsufficientDataError(
                    f"AMDO divergence needs 2 values, has {len(self._values)}"
                )
            return classify_strong_divergence(
                self._values[-1], self._price_changes[-1], self.config.amdo_divergence
            )

    def _markers(self, values: List[float]) -> List[float]:
        n = len(values)
        changes = self._price_changes.to_list()[-n:] if n else []
        threshold = self.config.amdo_divergence
        markers = [0.0] * n
        for i in range(1, n):
            if crossed_above(values[i - 1], values[i], 0.0):
                markers[i] = 1.0
            elif crossed_below(values[i - 1], values[i], 0.0):
                markers[i] = -1.0
            divergence = classify_strong_divergence(values[i], changes[i], threshold)
            if divergence is DivergenceType.BULLISH:
                markers[i] = 2.0
            elif divergence is DivergenceType.BEARISH:
                markers[i] = -2.0
        return markers

    def __repr__(self) -> str:
        return (
            f"AdaptiveMomentumDivergenceOscillator(min={self.min_period}, max={self.max_period}, "
            f"volatility={self._volatility_period}, sensitivity={self.sensitivity})"
        )
