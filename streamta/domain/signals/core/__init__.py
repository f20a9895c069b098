"""
Streaming numeric kernels shared by all signal providers.

Provides:
- BoundedSeries: Fixed-capacity rolling buffer
- MovingAverage / RunningEma: SMA, EMA, WMA kernels
- RollingMoments and two-pass statistics helpers
- AdaptivePeriodSelector: Volatility to lookback mapping
"""

from .adaptive_period import AdaptivePeriodSelector
from .bounded_series import BoundedSeries
from .moving_average import MAType, MovingAverage, RunningEma, ema_smoothing_factor, weighted_average
from .statistics import KahanSum, RollingMoments, clamp, mean, stdev, variance

__all__ = [
    "AdaptivePeriodSelector",
    "BoundedSeries",
    "MAType",
    "MovingAverage",
    "RunningEma",
    "ema_smoothing_factor",
    "weighted_average",
    "KahanSum",
    "RollingMoments",
    "clamp",
    "mean",
    "stdev",
    "variance",
]
