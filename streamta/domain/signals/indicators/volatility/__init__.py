"""Volatility indicators: ATR, Bollinger Bands."""

from .atr import AverageTrueRange
from .bollinger import BollingerBands

__all__ = ["AverageTrueRange", "BollingerBands"]
