"""Momentum indicators: RSI, ADMO, AMDO, MACD, Stochastic, CCI."""

from .admo import AdaptiveDemaMomentumOscillator
from .amdo import AdaptiveMomentumDivergenceOscillator
from .cci import CCIIndicator
from .macd import MACDIndicator
from .rsi import RSIIndicator
from .stochastic import StochasticOscillator

__all__ = [
    "AdaptiveDemaMomentumOscillator",
    "AdaptiveMomentumDivergenceOscillator",
    "CCIIndicator",
    "MACDIndicator",
    "RSIIndicator",
    "StochasticOscillator",
]
