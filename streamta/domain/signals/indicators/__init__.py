"""
Indicators package for streaming technical analysis.

Provides:
- SignalProvider: Protocol the confluence engine consumes
- StreamingIndicator: Base class with validation, locking and queries
- ProviderRegistry: Name and category lookup of configured providers
- Concrete providers grouped by category
"""

from .base import SignalProvider, StreamingIndicator, TransactionalProvider
from .momentum import (
    AdaptiveDemaMomentumOscillator,
    AdaptiveMomentumDivergenceOscillator,
    CCIIndicator,
    MACDIndicator,
    RSIIndicator,
    StochasticOscillator,
)
from .registry import ProviderRegistry
from .trend import (
    AdaptiveTrendStrengthOscillator,
    HullMovingAverage,
    ParabolicSAR,
    VolumeWeightedAroonOscillator,
)
from .volatility import AverageTrueRange, BollingerBands
from .volume import MoneyFlowIndex, VWAPIndicator

__all__ = [
    "SignalProvider",
    "StreamingIndicator",
    "TransactionalProvider",
    "ProviderRegistry",
    # Momentum
    "AdaptiveDemaMomentumOscillator",
    "AdaptiveMomentumDivergenceOscillator",
    "CCIIndicator",
    "MACDIndicator",
    "RSIIndicator",
    "StochasticOscillator",
    # Trend
    "AdaptiveTrendStrengthOscillator",
    "HullMovingAverage",
    "ParabolicSAR",
    "VolumeWeightedAroonOscillator",
    # Volatility
    "AverageTrueRange",
    "BollingerBands",
    # Volume
    "MoneyFlowIndex",
    "VWAPIndicator",
]
