"""
MFI (Money Flow Index) Indicator.

Volume-weighted RSI over typical price. Each bar's raw money flow is
``typical_price * volume / mfi_volume_scale``, booked as positive or
negative by the direction of the close; unchanged closes book nothing.

    MFI = 100 - 100 / (1 + positive_flow / negative_flow)

A window with no flow either way reads 50; only positive flow 100; only
negative flow 0.

Signals:
- Crossing above mfi_oversold: bullish; below mfi_overbought: bearish
- Zones: above mfi_overbought / below mfi_oversold
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

from ...core.bounded_series import BoundedSeries
from ...core.statistics import clamp
from ...core.validation import require_period
from ...models import IndicatorConfig, PriceBar, SignalCategory
from ..base import DEFAULT_HISTORY, StreamingIndicator


def money_flow_index(positive: float, negative: float) -> float:
    if positive == 0 and negative == 0:
        return 50.0
    if negative == 0:
        return 100.0
    if positive == 0:
        return 0.0
    return clamp(100.0 - 100.0 / (1.0 + positive / negative), 0.0, 100.0)


class MoneyFlowIndex(StreamingIndicator):
    """
    Money Flow Index in [0, 100].

    Default Parameters:
        period: 5
    """

    name = "mfi"
    display_name = "MFI"
    category = SignalCategory.VOLUME

    def __init__(
        self,
        period: int = 5,
        config: Optional[IndicatorConfig] = None,
        history: int = DEFAULT_HISTORY,
    ) -> None:
        super().__init__(config, history)
        self._bars: BoundedSeries[PriceBar] = BoundedSeries(require_period("period", period) + 1)

    @property
    def period(self) -> int:
        return self._bars.capacity - 1

    def set_period(self, period: int) -> None:
        require_period("period", period)
        with self._lock.write_locked():
            self._bars.resize(period + 1)
            self._values.reset()
            self._pending_error = None

    def _update(self, bar: PriceBar) -> Optional[float]:
        self._bars.push(bar)
        if not self._bars.is_full():
            return None
        bars = self._bars.to_list()
        scale = self.config.mfi_volume_scale
        positive = []
        negative = []
        for prev, cur in zip(bars, bars[1:]):
            flow = cur.typical_price * (cur.volume / scale)
            if cur.close > prev.close:
                positive.append(flow)
            elif cur.close < prev.close:
                negative.append(flow)
        return money_flow_index(math.fsum(positive), math.fsum(negative))

    def _reset_state(self) -> None:
        self._bars.reset()

    def _crossover_levels(self) -> Optional[Tuple[float, float]]:
        return self.config.mfi_oversold, self.config.mfi_overbought

    def _zone_bounds(self) -> Optional[Tuple[float, float]]:
        return self.config.mfi_overbought, self.config.mfi_oversold
