"""
Stochastic Oscillator.

    %K = 100 * (close - lowest_low) / (highest_high - lowest_low)
    %D = SMA(%K, d_period)

Highest high and lowest low come from monotonic deques, so each bar costs
amortised O(1) regardless of ``k_period``.

Signals:
- %K crossing above %D: bullish; crossing below: bearish
- Zones: %K above stochastic_overbought / below stochastic_oversold
"""

from __future__ import annotations

from collections import deque
from typing import Deque, List, Optional, Tuple

from ...core.bounded_series import BoundedSeries
from ...core.moving_average import MAType, MovingAverage
from ...core.validation import require_period
from ...models import IndicatorConfig, PriceBar, SignalCategory
from ...reporting.plot_export import PlotData, generate_timestamps
from ..base import DEFAULT_HISTORY, StreamingIndicator, crossed_above, crossed_below


class StochasticOscillator(StreamingIndicator):
    """
    Stochastic %K/%D provider. The provider value is %K.

    Default Parameters:
        k_period: 14
        d_period: 3
    """

    name = "stochastic"
    display_name = "%K"
    category = SignalCategory.MOMENTUM

    def __init__(
        self,
        k_period: int = 14,
        d_period: int = 3,
        config: Optional[IndicatorConfig] = None,
        history: int = DEFAULT_HISTORY,
    ) -> None:
        super().__init__(config, history)
        self._k_period = require_period("k_period", k_period)
        self._d_ma = MovingAverage(MAType.SMA, require_period("d_period", d_period))
        self._index = 0
        self._highs: Deque[Tuple[int, float]] = deque()
        self._lows: Deque[Tuple[int, float]] = deque()
        self._d_values: BoundedSeries[float] = BoundedSeries(history)
        # %K value paired with each %D, for the line crossover
        self._k_at_d: BoundedSeries[float] = BoundedSeries(2)

    @property
    def k_period(self) -> int:
        return self._k_period

    @property
    def d_period(self) -> int:
        return self._d_ma.period

    def set_periods(self, k_period: int, d_period: int) -> None:
        require_period("k_period", k_period)
        require_period("d_period", d_period)
        with self._lock.write_locked():
            self._k_period = k_period
            self._d_ma = MovingAverage(MAType.SMA, d_period)
            self._values.reset()
            self._pending_error = None
            self._reset_state()

    def _update(self, bar: PriceBar) -> Optional[float]:
        idx = self._index
        self._index += 1

        while self._highs and self._highs[-1][1] <= bar.high:
            self._highs.pop()
        self._highs.append((idx, bar.high))
        while self._lows and self._lows[-1][1] >= bar.low:
            self._lows.pop()
        self._lows.append((idx, bar.low))

        oldest = idx - self._k_period + 1
        while self._highs[0][0] < oldest:
            self._highs.popleft()
        while self._lows[0][0] < oldest:
            self._lows.popleft()

        if self._index < self._k_period:
            return None

        highest = self._highs[0][1]
        lowest = self._lows[0][1]
        span = highest - lowest
        k = 50.0 if span == 0 else 100.0 * (bar.close - lowest) / span

        self._d_ma.add(k)
        if self._d_ma.is_ready():
            self._d_values.push(self._d_ma.calculate())
            self._k_at_d.push(k)
        return k

    def _reset_state(self) -> None:
        self._index = 0
        self._highs.clear()
        self._lows.clear()
        self._d_ma.reset()
        self._d_values.reset()
        self._k_at_d.reset()

    def d_values(self) -> List[float]:
        with self._lock.read_locked():
            return self._d_values.to_list()

    def _line_pairs(self) -> Optional[Tuple[float, float, float, float]]:
        if len(self._d_values) < 2 or len(self._k_at_d) < 2:
            return None
        return self._k_at_d[-2], self._k_at_d[-1], self._d_values[-2], self._d_values[-1]

    def _bullish_crossover(self) -> bool:
        self._last_two()
        pairs = self._line_pairs()
        if pairs is None:
            return False
        k_prev, k_cur, d_prev, d_cur = pairs
        return crossed_above(k_prev - d_prev, k_cur - d_cur, 0.0)

    def _bearish_crossover(self) -> bool:
        self._last_two()
        pairs = self._line_pairs()
        if pairs is None:
            return False
        k_prev, k_cur, d_prev, d_cur = pairs
        return crossed_below(k_prev - d_prev, k_cur - d_cur, 0.0)

    def _crossover_levels(self) -> Optional[Tuple[float, float]]:
        return None

    def _zone_bounds(self) -> Optional[Tuple[float, float]]:
        return self.config.stochastic_overbought, self.config.stochastic_oversold

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> List[PlotData]:
        plots = super().get_plot_data(start_time, interval)
        with self._lock.read_locked():
            d_values = self._d_values.to_list()
            count = len(self._values)
        if not plots or not d_values:
            return plots
        timestamps = generate_timestamps(start_time, count, interval)
        offset = count - len(d_values)
        plots.append(PlotData(name="%D", x=[float(i) for i in range(offset, count)], y=d_values,
                              type="line", timestamp=timestamps[offset:]))
        return plots
