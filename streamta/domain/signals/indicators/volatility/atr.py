"""
ATR (Average True Range) Indicator.

    TR  = max(high - low, |high - prev_close|, |low - prev_close|)
    ATR = SMA(TR, period)

The first bar has no previous close and produces no true range.

Signals:
- Close advancing by more than one ATR: bullish breakout
- Close falling by more than one ATR: bearish breakout
"""

from __future__ import annotations

from typing import Optional, Tuple

from ....exceptions import InvalidInputError
from ...core.statistics import RollingMoments
from ...core.validation import require_period
from ...models import IndicatorConfig, PriceBar, SignalCategory
from ..base import DEFAULT_HISTORY, StreamingIndicator


def true_range(high: float, low: float, prev_close: float) -> float:
    return max(high - low, abs(high - prev_close), abs(low - prev_close))


class AverageTrueRange(StreamingIndicator):
    """
    Simple-average ATR.

    Default Parameters:
        period: 14
        validate_close: True (reject closes outside [low, high])
    """

    name = "atr"
    display_name = "ATR"
    category = SignalCategory.VOLATILITY

    def __init__(
        self,
        period: int = 14,
        validate_close: bool = True,
        config: Optional[IndicatorConfig] = None,
        history: int = DEFAULT_HISTORY,
    ) -> None:
        super().__init__(config, history)
        self._ranges = RollingMoments(require_period("period", period))
        self._validate_close = bool(validate_close)
        self._prev_close: Optional[float] = None

    @property
    def period(self) -> int:
        return self._ranges.window

    def set_period(self, period: int) -> None:
        require_period("period", period)
        with self._lock.write_locked():
            self._ranges = RollingMoments(period)
            self._prev_close = None
            self._values.reset()
            self._closes.reset()
            self._pending_error = None

    def _validate_bar(self, bar: PriceBar) -> None:
        if self._validate_close and not bar.low <= bar.close <= bar.high:
            raise InvalidInputError(
                f"close {bar.close} out of bounds [{bar.low}, {bar.high}]"
            )

    def _update(self, bar: PriceBar) -> Optional[float]:
        prev, self._prev_close = self._prev_close, bar.close
        if prev is None:
            return None
        self._ranges.push(true_range(bar.high, bar.low, prev))
        if not self._ranges.is_ready():
            return None
        return self._ranges.mean()

    def _reset_state(self) -> None:
        self._ranges.reset()
        self._prev_close = None

    def _breakout(self) -> float:
        # Needs two ATR values so the move is measured against a settled range
        self._last_two()
        return self._closes[-1] - self._closes[-2]

    def _bullish_crossover(self) -> bool:
        return self._breakout() > self._values[-1]

    def _bearish_crossover(self) -> bool:
        return -self._breakout() > self._values[-1]

    def _crossover_levels(self) -> Optional[Tuple[float, float]]:
        return None
