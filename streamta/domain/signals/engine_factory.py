"""
Factory for the default confluence engine.

The default member set and its hand-tuned weights:

    provider  weight  role
    rsi       1.0     oversold/overbought exits, reversal zones
    mfi       1.2     volume-weighted oversold/overbought exits, reversal zones
    vwao      1.0     strong-trend breakouts, trend zones (trend-confirming)
    hma       1.5     price crossing the Hull average (trend-confirming)
    admo      0.8     zero-line crossovers, reversal zones
    atso      0.5     zero-line crossovers plus |value| strength (trend-confirming)

ATR and Bollinger Bands are fed the same bars for regime detection only.
"""

from __future__ import annotations

from typing import Optional

from ...utils.logging_setup import get_logger
from .confluence_engine import ConfluenceEngine, ConfluenceMember, ZoneMode
from .indicators.momentum.admo import AdaptiveDemaMomentumOscillator
from .indicators.momentum.rsi import RSIIndicator
from .indicators.trend.atso import AdaptiveTrendStrengthOscillator
from .indicators.trend.hma import HullMovingAverage
from .indicators.trend.vwao import VolumeWeightedAroonOscillator
from .indicators.volatility.atr import AverageTrueRange
from .indicators.volatility.bollinger import BollingerBands
from .indicators.volume.mfi import MoneyFlowIndex
from .models import ConfluenceSettings, IndicatorConfig, ProviderSettings

logger = get_logger(__name__)


def build_default_engine(
    indicator_config: Optional[IndicatorConfig] = None,
    settings: Optional[ConfluenceSettings] = None,
    provider_settings: Optional[ProviderSettings] = None,
) -> ConfluenceEngine:
    """
    Build the engine with the default six scored providers.

    Args:
        indicator_config: Thresholds shared by all providers.
        settings: Confluence thresholds and regime constants.
        provider_settings: Periods and weights of the providers.

    Returns:
        A fresh ConfluenceEngine.

    Raises:
        InvalidParamsError: If any period or weight is invalid.
    """
    config = indicator_config or IndicatorConfig()
    ps = provider_settings or ProviderSettings()

    members = [
        ConfluenceMember(
            RSIIndicator(ps.rsi_period, config=config),
            ps.weight("rsi"),
            zone_mode=ZoneMode.REVERSAL,
        ),
        ConfluenceMember(
            MoneyFlowIndex(ps.mfi_period, config=config),
            ps.weight("mfi"),
            zone_mode=ZoneMode.REVERSAL,
        ),
        ConfluenceMember(
            VolumeWeightedAroonOscillator(ps.vwao_period, config=config),
            ps.weight("vwao"),
            trend_confirming=True,
            zone_mode=ZoneMode.TREND,
        ),
        ConfluenceMember(
            HullMovingAverage(ps.hma_period, config=config),
            ps.weight("hma"),
            trend_confirming=True,
        ),
        ConfluenceMember(
            AdaptiveDemaMomentumOscillator(
                ps.admo_length, ps.admo_stdev_length, ps.admo_weight, config=config
            ),
            ps.weight("admo"),
            zone_mode=ZoneMode.REVERSAL,
        ),
        ConfluenceMember(
            AdaptiveTrendStrengthOscillator(
                ps.atso_min_period,
                ps.atso_max_period,
                ps.atso_volatility_period,
                ps.atso_sensitivity,
                config=config,
            ),
            ps.weight("atso"),
            trend_confirming=True,
            strength=True,
        ),
    ]
    atr = AverageTrueRange(ps.atr_period, config=config)
    bands = BollingerBands(ps.bollinger_period, ps.bollinger_multiplier, config=config)

    engine = ConfluenceEngine(members, atr, bands, settings)
    logger.info(
        "Confluence engine built",
        extra={
            "members": [m.name for m in members],
            "weights": {m.name: m.weight for m in members},
        },
    )
    return engine
