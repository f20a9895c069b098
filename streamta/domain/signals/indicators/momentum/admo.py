"""
ADMO (Adaptive DEMA Momentum Oscillator).

Z-score of the latest DEMA of typical price against its recent mean, scaled
up when the DEMA's own dispersion is unusually high relative to its history:

    dema   = 2 * EMA(tp) - EMA(EMA(tp))
    z      = (dema - mean(dema, length)) / stdev(dema, stdev_length)
    norm   = (stdev - mean(stdev history)) / stdev(stdev history)
    score  = z * (1 + norm * weight)

The score is deliberately unclamped; under a volatility burst it can sit far
outside +/-1.

Signals:
- Zero-line crossover: bullish when the score crosses above zero
- Zones: above admo_overbought / below admo_oversold
"""

from __future__ import annotations

from typing import Optional, Tuple

from ...models import IndicatorConfig, PriceBar, SignalCategory
from ...core.bounded_series import BoundedSeries
from ...core.moving_average import RunningEma
from ...core.statistics import mean, stdev
from ...core.validation import require_finite, require_period
from ..base import DEFAULT_HISTORY, StreamingIndicator

DEFAULT_LENGTH = 20
DEFAULT_STDEV_LENGTH = 14
DEFAULT_WEIGHT = 0.3


class AdaptiveDemaMomentumOscillator(StreamingIndicator):
    """
    Adaptive DEMA Momentum Oscillator.

    Default Parameters:
        length: 20 (EMA smoothing and mean window)
        stdev_length: 14 (dispersion window)
        weight: 0.3 (influence of the normalised dispersion term)

    The first value is emitted once max(length, stdev_length) DEMA points
    are buffered.
    """

    name = "admo"
    display_name = "ADMO"
    category = SignalCategory.MOMENTUM

    def __init__(
        self,
        length: int = DEFAULT_LENGTH,
        stdev_length: int = DEFAULT_STDEV_LENGTH,
        weight: float = DEFAULT_WEIGHT,
        config: Optional[IndicatorConfig] = None,
        history: int = DEFAULT_HISTORY,
    ) -> None:
        super().__init__(config, history)
        self._configure(length, stdev_length, weight)

    def _configure(self, length: int, stdev_length: int, weight: float) -> None:
        require_period("length", length)
        require_period("stdev_length", stdev_length)
        self._length = length
        self._stdev_length = stdev_length
        self._weight = require_finite("weight", weight)
        self._ema1 = RunningEma(length)
        self._ema2 = RunningEma(length)
        self._dema: BoundedSeries[float] = BoundedSeries(max(length, stdev_length))
        self._stdevs: BoundedSeries[float] = BoundedSeries(stdev_length)

    @property
    def length(self) -> int:
        return self._length

    @property
    def stdev_length(self) -> int:
        return self._stdev_length

    @property
    def weight(self) -> float:
        return self._weight

    def set_parameters(self, length: int, stdev_length: int, weight: float) -> None:
        """
        Replace the periods and weight.

        Windows, EMA state and emitted values are discarded; the retained
        closes survive so divergence checks resume as soon as two new values
        exist.

        Raises:
            InvalidParamsError: If a period is below one or weight is not finite.
        """
        require_period("length", length)
        require_period("stdev_length", stdev_length)
        require_finite("weight", weight)
        with self._lock.write_locked():
            self._configure(length, stdev_length, weight)
            self._values.reset()
            self._pending_error = None

    def _update(self, bar: PriceBar) -> Optional[float]:
        fast = self._ema1.update(bar.typical_price)
        slow = self._ema2.update(fast)
        self._dema.push(2.0 * fast - slow)
        if not self._dema.is_full():
            return None

        mean_dema = mean(self._dema.last(self._length))
        stdev_value = stdev(self._dema.last(self._stdev_length), ddof=0)
        self._stdevs.push(stdev_value)

        window = self._stdevs.to_list()
        sma_stdev = mean(window)
        stdev_stdev = stdev(window, ddof=1)

        normalized = 0.0 if stdev_stdev == 0 else (stdev_value - sma_stdev) / stdev_stdev
        z_score = 0.0 if stdev_value == 0 else (self._dema[-1] - mean_dema) / stdev_value
        return z_score * (1.0 + normalized * self._weight)

    def _reset_state(self) -> None:
        self._ema1.reset()
        self._ema2.reset()
        self._dema.reset()
        self._stdevs.reset()

    def _zone_bounds(self) -> Optional[Tuple[float, float]]:
        return self.config.admo_overbought, self.config.admo_oversold

    def __repr__(self) -> str:
        return (
            f"AdaptiveDemaMomentumOscillator(length={self._length}, "
            f"stdev_length={self._stdev_length}, weight={self._weight})"
        )
