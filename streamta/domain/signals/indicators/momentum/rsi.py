"""
RSI (Relative Strength Index) Indicator.

Measures the speed and magnitude of recent price changes to evaluate
overbought or oversold conditions. Uses Wilder smoothing seeded with the
simple average of the first ``period`` changes.

Signals:
- Overbought (> rsi_overbought): Potential sell signal
- Oversold (< rsi_oversold): Potential buy signal
- Zone transitions: Buy on oversold exit, sell on overbought exit
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from ...models import IndicatorConfig, PriceBar, SignalCategory
from ...core.validation import require_period
from ..base import DEFAULT_HISTORY, StreamingIndicator


def rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    """
    RSI from smoothed gain/loss averages.

    A window with no movement reads 50; one with gains and no losses 100.
    """
    if avg_loss == 0:
        return 50.0 if avg_gain == 0 else 100.0
    if avg_gain == 0:
        return 0.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


class RSIIndicator(StreamingIndicator):
    """
    Relative Strength Index indicator.

    Default Parameters:
        period: 5

    State Output:
        value: Current RSI value (0-100)
        zone: Overbought, Oversold or Neutral per the config thresholds
    """

    name = "rsi"
    display_name = "RSI"
    category = SignalCategory.MOMENTUM

    def __init__(
        self,
        period: int = 5,
        config: Optional[IndicatorConfig] = None,
        history: int = DEFAULT_HISTORY,
    ) -> None:
        super().__init__(config, history)
        self._period = require_period("period", period)
        self._prev_close: Optional[float] = None
        self._seed_changes: List[float] = []
        self._avg_gain = 0.0
        self._avg_loss = 0.0
        self._seeded = False

    @property
    def period(self) -> int:
        return self._period

    def set_period(self, period: int) -> None:
        """Change the period; smoothing restarts from the next bar."""
        require_period("period", period)
        with self._lock.write_locked():
            self._period = period
            self._values.reset()
            self._reset_state()

    def _update(self, bar: PriceBar) -> Optional[float]:
        prev, self._prev_close = self._prev_close, bar.close
        if prev is None:
            return None
        change = bar.close - prev
        gain = max(change, 0.0)
        loss = max(-change, 0.0)

        if not self._seeded:
            self._seed_changes.append(change)
            if len(self._seed_changes) < self._period:
                return None
            self._avg_gain = sum(max(c, 0.0) for c in self._seed_changes) / self._period
            self._avg_loss = sum(max(-c, 0.0) for c in self._seed_changes) / self._period
            self._seed_changes = []
            self._seeded = True
        else:
            n = self._period
            self._avg_gain = (self._avg_gain * (n - 1) + gain) / n
            self._avg_loss = (self._avg_loss * (n - 1) + loss) / n

        return rsi_from_averages(self._avg_gain, self._avg_loss)

    def _reset_state(self) -> None:
        self._prev_close = None
        self._seed_changes = []
        self._avg_gain = 0.0
        self._avg_loss = 0.0
        self._seeded = False

    def _crossover_levels(self) -> Optional[Tuple[float, float]]:
        return self.config.rsi_oversold, self.config.rsi_overbought

    def _zone_bounds(self) -> Optional[Tuple[float, float]]:
        return self.config.rsi_overbought, self.config.rsi_oversold
