"""
Streaming Signal Engine - incremental indicators and confluence labelling.

This module provides:
- PriceBar / IndicatorConfig: Validated inputs and threshold snapshot
- Streaming kernels: BoundedSeries, MovingAverage, AdaptivePeriodSelector
- Signal providers: ADMO, ATSO, RSI, MFI, VWAO, HMA and more
- ConfluenceEngine: Regime-aware combination into a SignalLabel

Usage:
    from streamta.domain.signals import build_default_engine

    engine = build_default_engine()
    for high, low, close, volume in bars:
        engine.add(high, low, close, volume)

    label = engine.get_combined_signal()
    divergences = engine.get_divergence_signals()
"""

from .confluence_engine import ConfluenceEngine, ConfluenceMember, ZoneMode, select_label
from .divergence import detect_divergence
from .engine_factory import build_default_engine
from .indicators import ProviderRegistry, SignalProvider, StreamingIndicator
from .models import (
    ConfluenceScore,
    ConfluenceSettings,
    DivergenceType,
    IndicatorConfig,
    LabelThresholds,
    PriceBar,
    ProviderSettings,
    Regime,
    SignalCategory,
    SignalLabel,
    Zone,
)

__all__ = [
    # Models
    "ConfluenceScore",
    "ConfluenceSettings",
    "DivergenceType",
    "IndicatorConfig",
    "LabelThresholds",
    "PriceBar",
    "ProviderSettings",
    "Regime",
    "SignalCategory",
    "SignalLabel",
    "Zone",
    # Providers
    "ProviderRegistry",
    "SignalProvider",
    "StreamingIndicator",
    # Engine
    "ConfluenceEngine",
    "ConfluenceMember",
    "ZoneMode",
    "build_default_engine",
    "detect_divergence",
    "select_label",
]
