"""Trend indicators: ATSO, HMA, VWAO, Parabolic SAR."""

from .atso import AdaptiveTrendStrengthOscillator
from .hma import HullMovingAverage
from .parabolic_sar import ParabolicSAR
from .vwao import VolumeWeightedAroonOscillator

__all__ = [
    "AdaptiveTrendStrengthOscillator",
    "HullMovingAverage",
    "ParabolicSAR",
    "VolumeWeightedAroonOscillator",
]
