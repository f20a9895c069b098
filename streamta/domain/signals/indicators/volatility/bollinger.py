"""
Bollinger Bands Indicator.

    middle = SMA(close, period)
    upper  = middle + multiplier * stdev(close, period)
    lower  = middle - multiplier * stdev(close, period)

The stdev is the sample (n - 1) deviation. The provider value is the middle
band; ``bands()`` returns all three.

Signals:
- Close re-entering above the lower band: bullish
- Close re-entering below the upper band: bearish
- Close above the upper band / below the lower band: overbought / oversold
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from ....exceptions import NotReadyError
from ...core.bounded_series import BoundedSeries
from ...core.statistics import RollingMoments
from ...core.validation import require_period, require_positive
from ...models import IndicatorConfig, PriceBar, SignalCategory, Zone
from ...reporting.plot_export import PlotData, generate_timestamps
from ..base import DEFAULT_HISTORY, StreamingIndicator, crossed_above, crossed_below


class BollingerBands(StreamingIndicator):
    """
    Bollinger Bands over a compensated rolling window.

    Default Parameters:
        period: 20
        multiplier: 2.0
    """

    name = "bollinger"
    display_name = "Bollinger Middle"
    category = SignalCategory.VOLATILITY

    def __init__(
        self,
        period: int = 20,
        multiplier: float = 2.0,
        config: Optional[IndicatorConfig] = None,
        history: int = DEFAULT_HISTORY,
    ) -> None:
        super().__init__(config, history)
        self._window = RollingMoments(require_period("period", period))
        self._multiplier = require_positive("multiplier", multiplier)
        self._upper: BoundedSeries[float] = BoundedSeries(history)
        self._lower: BoundedSeries[float] = BoundedSeries(history)
        self._aligned_closes: BoundedSeries[float] = BoundedSeries(history)

    @property
    def period(self) -> int:
        return self._window.window

    @property
    def multiplier(self) -> float:
        return self._multiplier

    def set_params(self, period: int, multiplier: float) -> None:
        require_period("period", period)
        multiplier = require_positive("multiplier", multiplier)
        with self._lock.write_locked():
            self._window = RollingMoments(period)
            self._multiplier = multiplier
            self._values.reset()
            self._pending_error = None
            self._upper.reset()
            self._lower.reset()
            self._aligned_closes.reset()

    def _update(self, bar: PriceBar) -> Optional[float]:
        self._window.push(bar.close)
        if not self._window.is_ready():
            return None
        middle = self._window.mean()
        width = self._multiplier * self._window.stdev(ddof=1)
        self._upper.push(middle + width)
        self._lower.push(middle - width)
        self._aligned_closes.push(bar.close)
        return middle

    def _reset_state(self) -> None:
        self._window.reset()
        self._upper.reset()
        self._lower.reset()
        self._aligned_closes.reset()

    def bands(self) -> Tuple[float, float, float]:
        """
        Latest (upper, middle, lower).

        Raises:
            NotReadyError: Until ``period`` closes have been added.
        """
        with self._lock.read_locked():
            self._raise_pending()
            if not self._values:
                raise NotReadyError(f"{self.name} has no output yet")
            return self._upper[-1], self._values[-1], self._lower[-1]

    def bandwidth(self) -> float:
        """(upper - lower) / middle, or 0 when the middle band is 0."""
        upper, middle, lower = self.bands()
        return 0.0 if middle == 0 else (upper - lower) / middle

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------

    def _recent(self) -> Tuple[float, float]:
        self._last_two()
        return self._aligned_closes[-2], self._aligned_closes[-1]

    def _bullish_crossover(self) -> bool:
        prev, cur = self._recent()
        return crossed_above(prev - self._lower[-2], cur - self._lower[-1], 0.0)

    def _bearish_crossover(self) -> bool:
        prev, cur = self._recent()
        return crossed_below(prev - self._upper[-2], cur - self._upper[-1], 0.0)

    def _crossover_levels(self) -> Optional[Tuple[float, float]]:
        return None

    def _classify_zone(self) -> Zone:
        close = self._aligned_closes[-1]
        if close > self._upper[-1]:
            return Zone.OVERBOUGHT
        if close < self._lower[-1]:
            return Zone.OVERSOLD
        return Zone.NEUTRAL

    def _markers(self, values: List[float]) -> List[float]:
        n = len(values)
        closes = self._aligned_closes.to_list()[-n:] if n else []
        upper = self._upper.to_list()[-n:] if n else []
        lower = self._lower.to_list()[-n:] if n else []
        markers = [0.0] * n
        for i in range(n):
            if i > 0:
                if crossed_above(closes[i - 1] - lower[i - 1], closes[i] - lower[i], 0.0):
                    markers[i] = 1.0
                elif crossed_below(closes[i - 1] - upper[i - 1], closes[i] - upper[i], 0.0):
                    markers[i] = -1.0
            if closes[i] > upper[i]:
                markers[i] = 2.0
            elif closes[i] < lower[i]:
                markers[i] = -2.0
        return markers

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> List[PlotData]:
        """Upper, middle and lower bands plus signal markers."""
        plots = super().get_plot_data(start_time, interval)
        if not plots:
            return plots
        with self._lock.read_locked():
            upper = self._upper.to_list()
            lower = self._lower.to_list()
        count = len(plots[0].y)
        x = list(plots[0].x)
        timestamps = generate_timestamps(start_time, count, interval)
        return [
            PlotData(name="Bollinger Upper", x=x, y=upper[-count:], type="line", timestamp=timestamps),
            plots[0],
            PlotData(name="Bollinger Lower", x=list(x), y=lower[-count:], type="line",
                     timestamp=list(timestamps)),
            plots[1],
        ]
