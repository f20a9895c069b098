"""
VWAP (Volume-Weighted Average Price) Indicator.

Cumulative since the last reset:

    VWAP = sum(typical_price * volume) / sum(volume)

Both sums are compensated. Until some volume has traded there is no VWAP.

Signals:
- Close crossing above VWAP: bullish; crossing below: bearish
"""

from __future__ import annotations

from typing import Optional, Tuple

from ...core.bounded_series import BoundedSeries
from ...core.statistics import KahanSum
from ...models import IndicatorConfig, PriceBar, SignalCategory
from ..base import DEFAULT_HISTORY, StreamingIndicator, crossed_above, crossed_below


class VWAPIndicator(StreamingIndicator):
    """Session VWAP; call reset() at each session boundary."""

    name = "vwap"
    display_name = "VWAP"
    category = SignalCategory.VOLUME

    def __init__(
        self,
        config: Optional[IndicatorConfig] = None,
        history: int = DEFAULT_HISTORY,
    ) -> None:
        super().__init__(config, history)
        self._price_volume = KahanSum()
        self._volume = KahanSum()
        self._aligned_closes: BoundedSeries[float] = BoundedSeries(history)

    def cumulative_volume(self) -> float:
        with self._lock.read_locked():
            return self._volume.value

    def _update(self, bar: PriceBar) -> Optional[float]:
        self._price_volume.add(bar.typical_price * bar.volume)
        self._volume.add(bar.volume)
        volume = self._volume.value
        if volume <= 0:
            return None
        self._aligned_closes.push(bar.close)
        return self._price_volume.value / volume

    def _reset_state(self) -> None:
        self._price_volume.reset()
        self._volume.reset()
        self._aligned_closes.reset()

    def _gaps(self) -> Tuple[float, float]:
        previous, current = self._last_two()
        return self._aligned_closes[-2] - previous, self._aligned_closes[-1] - current

    def _bullish_crossover(self) -> bool:
        return crossed_above(*self._gaps(), 0.0)

    def _bearish_crossover(self) -> bool:
        return crossed_below(*self._gaps(), 0.0)

    def _crossover_levels(self) -> Optional[Tuple[float, float]]:
        return None
