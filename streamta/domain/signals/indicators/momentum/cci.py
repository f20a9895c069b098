"""
CCI (Commodity Channel Index) Indicator.

    CCI = (tp - SMA(tp)) / (0.015 * mean_deviation(tp))

A window with zero mean deviation (flat typical price) reads 0.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from ...core.bounded_series import BoundedSeries
from ...core.statistics import mean
from ...core.validation import require_period, require_positive
from ...models import IndicatorConfig, PriceBar, SignalCategory
from ..base import DEFAULT_HISTORY, StreamingIndicator

CCI_CONSTANT = 0.015


class CCIIndicator(StreamingIndicator):
    """
    Commodity Channel Index.

    Default Parameters:
        period: 20
        constant: 0.015 (Lambert's scaling factor)
    """

    name = "cci"
    display_name = "CCI"
    category = SignalCategory.MOMENTUM

    def __init__(
        self,
        period: int = 20,
        constant: float = CCI_CONSTANT,
        config: Optional[IndicatorConfig] = None,
        history: int = DEFAULT_HISTORY,
    ) -> None:
        super().__init__(config, history)
        self._typical: BoundedSeries[float] = BoundedSeries(require_period("period", period))
        self._constant = require_positive("constant", constant)

    @property
    def period(self) -> int:
        return self._typical.capacity

    def set_period(self, period: int) -> None:
        require_period("period", period)
        with self._lock.write_locked():
            self._typical.resize(period)
            self._values.reset()
            self._pending_error = None

    def _update(self, bar: PriceBar) -> Optional[float]:
        self._typical.push(bar.typical_price)
        if not self._typical.is_full():
            return None
        window = self._typical.to_array()
        ma = mean(window)
        mean_dev = float(np.abs(window - ma).mean())
        if mean_dev == 0:
            return 0.0
        return float((window[-1] - ma) / (self._constant * mean_dev))

    def _reset_state(self) -> None:
        self._typical.reset()

    def _zone_bounds(self) -> Optional[Tuple[float, float]]:
        return self.config.cci_overbought, self.config.cci_oversold
