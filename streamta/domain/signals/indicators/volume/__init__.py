"""Volume indicators: MFI, VWAP."""

from .mfi import MoneyFlowIndex
from .vwap import VWAPIndicator

__all__ = ["MoneyFlowIndex", "VWAPIndicator"]
