"""
HMA (Hull Moving Average) Indicator.

    raw = 2 * WMA(close, period // 2) - WMA(close, period)
    HMA = WMA(raw, floor(sqrt(period)))

Signals:
- Close crossing above the HMA: bullish; crossing below: bearish
- Trend direction from the slope of the last two HMA values
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

from ...core.bounded_series import BoundedSeries
from ...core.moving_average import MAType, MovingAverage
from ...core.validation import require_period
from ...models import IndicatorConfig, PriceBar, SignalCategory, SignalLabel
from ...reporting.plot_export import PlotData, generate_timestamps
from ..base import DEFAULT_HISTORY, StreamingIndicator, crossed_above, crossed_below


def hull_periods(period: int) -> Tuple[int, int, int]:
    """(full, half, sqrt) WMA periods for a Hull average of ``period``."""
    return period, max(period // 2, 1), max(int(math.sqrt(period)), 1)


class HullMovingAverage(StreamingIndicator):
    """
    Hull Moving Average with price crossover signals.

    Default Parameters:
        period: 9
    """

    name = "hma"
    display_name = "Hull Moving Average"
    category = SignalCategory.TREND

    def __init__(
        self,
        period: int = 9,
        config: Optional[IndicatorConfig] = None,
        history: int = DEFAULT_HISTORY,
    ) -> None:
        super().__init__(config, history)
        self._build(require_period("period", period))
        # Close of the bar each HMA value was produced on
        self._aligned_closes: BoundedSeries[float] = BoundedSeries(history)

    def _build(self, period: int) -> None:
        full, half, root = hull_periods(period)
        self._period = period
        self._wma_full = MovingAverage(MAType.WMA, full)
        self._wma_half = MovingAverage(MAType.WMA, half)
        self._wma_raw = MovingAverage(MAType.WMA, root)

    @property
    def period(self) -> int:
        return self._period

    def set_period(self, period: int) -> None:
        require_period("period", period)
        with self._lock.write_locked():
            self._build(period)
            self._values.reset()
            self._aligned_closes.reset()
            self._pending_error = None

    def _update(self, bar: PriceBar) -> Optional[float]:
        self._wma_full.add(bar.close)
        self._wma_half.add(bar.close)
        if not self._wma_full.is_ready():
            return None
        self._wma_raw.add(2.0 * self._wma_half.calculate() - self._wma_full.calculate())
        if not self._wma_raw.is_ready():
            return None
        self._aligned_closes.push(bar.close)
        return self._wma_raw.calculate()

    def _reset_state(self) -> None:
        self._wma_full.reset()
        self._wma_half.reset()
        self._wma_raw.reset()
        self._aligned_closes.reset()

    def trend_direction(self) -> SignalLabel:
        """
        Slope of the HMA over its last two values.

        Returns:
            SignalLabel.BULLISH, SignalLabel.BEARISH or SignalLabel.NEUTRAL.

        Raises:
            NotReadyError: Fewer than two HMA values.
        """
        with self._lock.read_locked():
            previous, current = self._last_two()
        if current > previous:
            return SignalLabel.BULLISH
        if current < previous:
            return SignalLabel.BEARISH
        return SignalLabel.NEUTRAL

    def _price_pairs(self) -> Tuple[float, float, float, float]:
        previous, current = self._last_two()
        return self._aligned_closes[-2], self._aligned_closes[-1], previous, current

    def _bullish_crossover(self) -> bool:
        close_prev, close_cur, hma_prev, hma_cur = self._price_pairs()
        return crossed_above(close_prev - hma_prev, close_cur - hma_cur, 0.0)

    def _bearish_crossover(self) -> bool:
        close_prev, close_cur, hma_prev, hma_cur = self._price_pairs()
        return crossed_below(close_prev - hma_prev, close_cur - hma_cur, 0.0)

    def _crossover_levels(self) -> Optional[Tuple[float, float]]:
        return None

    def _markers(self, values: List[float]) -> List[float]:
        closes = self._aligned_closes.to_list()[-len(values):] if values else []
        markers = [0.0] * len(values)
        for i in range(1, len(values)):
            prev_gap = closes[i - 1] - values[i - 1]
            gap = closes[i] - values[i]
            if crossed_above(prev_gap, gap, 0.0):
                markers[i] = 1.0
            elif crossed_below(prev_gap, gap, 0.0):
                markers[i] = -1.0
        return markers

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> List[PlotData]:
        """HMA line, price line and crossover markers."""
        plots = super().get_plot_data(start_time, interval)
        if not plots:
            return plots
        with self._lock.read_locked():
            closes = self._aligned_closes.to_list()
        count = len(plots[0].y)
        closes = closes[-count:]
        plots.insert(1, PlotData(name="Price", x=list(plots[0].x), y=closes, type="line",
                                 timestamp=generate_timestamps(start_time, count, interval)))
        return plots
