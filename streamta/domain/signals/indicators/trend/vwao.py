"""
VWAO (Volume-Weighted Aroon Oscillator).

Over the last ``period + 1`` bars, each bar i (0 = oldest) carries the
volume-weighted age ``(period - i) * volume[i]``. The extreme high and low
bars' weighted ages, as a percentage of the window's total, give
Aroon-up / Aroon-down:

    VWAO = clamp(aroon_up - aroon_down, -100, 100)

A window whose total weighted volume is zero raises DivisionByZeroError for
that bar.

Signals:
- Crossing above +vwao_strong_trend: bullish; below -vwao_strong_trend: bearish
- Beyond either level: strong-trend zone
"""

from __future__ import annotations

from typing import Optional, Tuple

from ....exceptions import DivisionByZeroError
from ...core.bounded_series import BoundedSeries
from ...core.statistics import clamp
from ...core.validation import require_period
from ...models import IndicatorConfig, PriceBar, SignalCategory
from ..base import DEFAULT_HISTORY, StreamingIndicator


class VolumeWeightedAroonOscillator(StreamingIndicator):
    """
    Volume-Weighted Aroon Oscillator in [-100, 100].

    Default Parameters:
        period: 14
    """

    name = "vwao"
    display_name = "Volume Weighted Aroon Oscillator"
    category = SignalCategory.TREND

    def __init__(
        self,
        period: int = 14,
        config: Optional[IndicatorConfig] = None,
        history: int = DEFAULT_HISTORY,
    ) -> None:
        super().__init__(config, history)
        self._period = require_period("period", period)
        self._bars: BoundedSeries[PriceBar] = BoundedSeries(period + 1)

    @property
    def period(self) -> int:
        return self._period

    def set_period(self, period: int) -> None:
        require_period("period", period)
        with self._lock.write_locked():
            self._period = period
            self._bars.resize(period + 1)
            self._values.reset()
            self._pending_error = None

    def _update(self, bar: PriceBar) -> Optional[float]:
        self._bars.push(bar)
        if not self._bars.is_full():
            return None

        bars = self._bars.to_list()
        period = self._period
        high_idx = low_idx = 0
        total = 0.0
        for i, b in enumerate(bars):
            if b.high > bars[high_idx].high:
                high_idx = i
            if b.low < bars[low_idx].low:
                low_idx = i
            total += (period - i) * b.volume
        if total == 0:
            raise DivisionByZeroError("VWAO total weighted volume is zero")

        aroon_up = (period - high_idx) * bars[high_idx].volume / total * 100.0
        aroon_down = (period - low_idx) * bars[low_idx].volume / total * 100.0
        return clamp(aroon_up - aroon_down, -100.0, 100.0)

    def _reset_state(self) -> None:
        self._bars.reset()

    def is_strong_trend(self) -> bool:
        """True when the latest value lies beyond +/- vwao_strong_trend."""
        level = self.config.vwao_strong_trend
        return abs(self.calculate()) > level

    def _crossover_levels(self) -> Optional[Tuple[float, float]]:
        level = self.config.vwao_strong_trend
        return level, -level

    def _zone_bounds(self) -> Optional[Tuple[float, float]]:
        level = self.config.vwao_strong_trend
        return level, -level
