"""
MACD (Moving Average Convergence Divergence) Indicator.

    macd      = EMA(close, fast) - EMA(close, slow)
    signal    = EMA(macd, signal_period)
    histogram = macd - signal

The provider value is the histogram, so the zero-line crossover of the
base class is the classic MACD/signal line cross.
"""

from __future__ import annotations

from typing import List, Optional

from ....exceptions import InvalidParamsError
from ...core.bounded_series import BoundedSeries
from ...core.moving_average import MAType, MovingAverage
from ...core.validation import require_period
from ...models import IndicatorConfig, PriceBar, SignalCategory
from ...reporting.plot_export import PlotData, generate_timestamps
from ..base import DEFAULT_HISTORY, StreamingIndicator


def _check_periods(fast: int, slow: int, signal: int) -> None:
    require_period("fast_period", fast)
    require_period("slow_period", slow)
    require_period("signal_period", signal)
    if fast >= slow:
        raise InvalidParamsError(f"fast period ({fast}) must be less than slow period ({slow})")


class MACDIndicator(StreamingIndicator):
    """
    MACD histogram provider.

    Default Parameters:
        fast_period: 12
        slow_period: 26
        signal_period: 9
    """

    name = "macd"
    display_name = "MACD"
    category = SignalCategory.MOMENTUM

    def __init__(
        self,
        fast_period: int = 12,
        slow_period: int = 26,
        signal_period: int = 9,
        config: Optional[IndicatorConfig] = None,
        history: int = DEFAULT_HISTORY,
    ) -> None:
        super().__init__(config, history)
        _check_periods(fast_period, slow_period, signal_period)
        self._build(fast_period, slow_period, signal_period)
        self._macd_line: BoundedSeries[float] = BoundedSeries(history)
        self._signal_line: BoundedSeries[float] = BoundedSeries(history)

    def _build(self, fast: int, slow: int, signal: int) -> None:
        self._fast = MovingAverage(MAType.EMA, fast)
        self._slow = MovingAverage(MAType.EMA, slow)
        self._signal = MovingAverage(MAType.EMA, signal)

    @property
    def periods(self) -> tuple:
        return self._fast.period, self._slow.period, self._signal.period

    def set_periods(self, fast_period: int, slow_period: int, signal_period: int) -> None:
        """Replace all three periods; every line restarts from empty."""
        _check_periods(fast_period, slow_period, signal_period)
        with self._lock.write_locked():
            self._build(fast_period, slow_period, signal_period)
            self._values.reset()
            self._pending_error = None
            self._macd_line.reset()
            self._signal_line.reset()

    def _update(self, bar: PriceBar) -> Optional[float]:
        self._fast.add(bar.close)
        self._slow.add(bar.close)
        if not self._slow.is_ready():
            return None
        macd = self._fast.calculate() - self._slow.calculate()
        self._macd_line.push(macd)
        self._signal.add(macd)
        if not self._signal.is_ready():
            return None
        signal = self._signal.calculate()
        self._signal_line.push(signal)
        return macd - signal

    def _reset_state(self) -> None:
        self._fast.reset()
        self._slow.reset()
        self._signal.reset()
        self._macd_line.reset()
        self._signal_line.reset()

    def macd_line(self) -> List[float]:
        with self._lock.read_locked():
            return self._macd_line.to_list()

    def signal_line(self) -> List[float]:
        with self._lock.read_locked():
            return self._signal_line.to_list()

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> List[PlotData]:
        """MACD and signal lines plus the histogram as bars, right-aligned."""
        with self._lock.read_locked():
            macd = self._macd_line.to_list()
            signal = self._signal_line.to_list()
            hist = self._values.to_list()
        if not macd:
            return []
        x = [float(i) for i in range(len(macd))]
        timestamps = generate_timestamps(start_time, len(macd), interval)
        plots = [PlotData(name="MACD", x=x, y=macd, type="line", timestamp=timestamps)]
        for label, series, kind in (("Signal", signal, "line"), ("Histogram", hist, "bar")):
            if series:
                offset = len(x) - len(series)
                plots.append(PlotData(name=label, x=x[offset:], y=series, type=kind,
                                      timestamp=timestamps[offset:]))
        return plots
