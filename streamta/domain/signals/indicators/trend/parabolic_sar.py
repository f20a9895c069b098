"""
Parabolic SAR (Stop and Reverse) Indicator.

Trails price with a stop that accelerates toward the extreme point of the
current trend; when price pierces the stop, the trend flips and the stop
jumps to the prior extreme point.

Signals:
- Flip from downtrend to uptrend: bullish
- Flip from uptrend to downtrend: bearish
"""

from __future__ import annotations

from typing import Optional, Tuple

from ....exceptions import InvalidParamsError, NotReadyError
from ...core.bounded_series import BoundedSeries
from ...core.validation import require_positive
from ...models import IndicatorConfig, PriceBar, SignalCategory
from ..base import DEFAULT_HISTORY, StreamingIndicator


def _check_steps(step: float, max_step: float) -> None:
    require_positive("step", step)
    require_positive("max_step", max_step)
    if step > max_step:
        raise InvalidParamsError(f"step ({step}) must be <= max_step ({max_step})")


class ParabolicSAR(StreamingIndicator):
    """
    Parabolic SAR. The provider value is the stop level.

    Default Parameters:
        step: 0.02 (acceleration increment)
        max_step: 0.2 (acceleration cap)
    """

    name = "psar"
    display_name = "Parabolic SAR"
    category = SignalCategory.TREND

    def __init__(
        self,
        step: float = 0.02,
        max_step: float = 0.2,
        config: Optional[IndicatorConfig] = None,
        history: int = DEFAULT_HISTORY,
    ) -> None:
        super().__init__(config, history)
        _check_steps(step, max_step)
        self._step = float(step)
        self._max_step = float(max_step)
        self._highs: BoundedSeries[float] = BoundedSeries(3)
        self._lows: BoundedSeries[float] = BoundedSeries(3)
        self._trend: BoundedSeries[bool] = BoundedSeries(2)
        self._af = 0.0
        self._ep = 0.0
        self._sar = 0.0
        self._uptrend = False

    @property
    def steps(self) -> Tuple[float, float]:
        return self._step, self._max_step

    def set_params(self, step: float, max_step: float) -> None:
        """Replace the acceleration settings; all state is discarded."""
        _check_steps(step, max_step)
        with self._lock.write_locked():
            self._step = float(step)
            self._max_step = float(max_step)
            self._values.reset()
            self._closes.reset()
            self._pending_error = None
            self._reset_state()

    def is_uptrend(self) -> bool:
        """
        Current trend direction.

        Raises:
            NotReadyError: Before the trend is initialised (two bars).
        """
        with self._lock.read_locked():
            if not self._trend:
                raise NotReadyError("parabolic SAR trend not initialised")
            return self._uptrend

    def _update(self, bar: PriceBar) -> Optional[float]:
        self._highs.push(bar.high)
        self._lows.push(bar.low)
        if not self._trend:
            if len(self._highs) < 2:
                return None
            self._initialize()
        else:
            self._advance()
        self._trend.push(self._uptrend)
        return self._sar

    def _initialize(self) -> None:
        prev_mid = (self._highs[-2] + self._lows[-2]) / 2.0
        mid = (self._highs[-1] + self._lows[-1]) / 2.0
        self._uptrend = mid >= prev_mid
        if self._uptrend:
            self._ep = max(self._highs[-1], self._highs[-2])
            self._sar = self._lows[-2]
        else:
            self._ep = min(self._lows[-1], self._lows[-2])
            self._sar = self._highs[-2]
        self._af = self._step

    def _advance(self) -> None:
        high, low = self._highs[-1], self._lows[-1]
        prior_lows = self._lows[:-1]
        prior_highs = self._highs[:-1]
        sar = self._sar + self._af * (self._ep - self._sar)

        if self._uptrend:
            sar = min(sar, *prior_lows)
            if low < sar:
                self._uptrend = False
                sar = self._ep
                self._ep = low
                self._af = self._step
            elif high > self._ep:
                self._ep = high
                self._af = min(self._af + self._step, self._max_step)
        else:
            sar = max(sar, *prior_highs)
            if high > sar:
                self._uptrend = True
                sar = self._ep
                self._ep = high
                self._af = self._step
            elif low < self._ep:
                self._ep = low
                self._af = min(self._af + self._step, self._max_step)
        self._sar = sar

    def _reset_state(self) -> None:
        self._highs.reset()
        self._lows.reset()
        self._trend.reset()
        self._af = 0.0
        self._ep = 0.0
        self._sar = 0.0
        self._uptrend = False

    def _flipped(self) -> Optional[bool]:
        self._last_two()
        if len(self._trend) < 2 or self._trend[-2] == self._trend[-1]:
            return None
        return self._trend[-1]

    def _bullish_crossover(self) -> bool:
        return self._flipped() is True

    def _bearish_crossover(self) -> bool:
        return self._flipped() is False

    def _crossover_levels(self) -> Optional[Tuple[float, float]]:
        return None
