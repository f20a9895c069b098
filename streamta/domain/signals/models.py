"""
Signal Engine Domain Models.

Defines core domain models for the streaming signal engine:
- PriceBar: One validated high/low/close/volume sample
- IndicatorConfig: Immutable threshold snapshot shared by providers
- ConfluenceSettings / ProviderSettings: Engine tuning and default provider set
- ConfluenceScore: Diagnostic breakdown of one confluence evaluation
- Enums: Categories, zones, divergence kinds, regimes, labels
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple

from ..exceptions import InvalidInputError, InvalidParamsError


class SignalCategory(Enum):
    """Category of a signal provider based on what it measures."""

    MOMENTUM = "momentum"
    TREND = "trend"
    VOLATILITY = "volatility"
    VOLUME = "volume"


class Zone(Enum):
    """Position of the latest indicator value relative to its bounds."""

    OVERBOUGHT = "Overbought"
    OVERSOLD = "Oversold"
    NEUTRAL = "Neutral"


class DivergenceType(Enum):
    """Type of divergence between price and indicator."""

    BULLISH = "bullish"  # Price made the lowest close of three, indicator rose
    BEARISH = "bearish"  # Price made the highest close of three, indicator fell
    NONE = "none"


class Regime(Enum):
    """Market regime used to scale trend-confirming contributions."""

    TRENDING = "trending"
    CHOP = "chop"


class SignalLabel(Enum):
    """Discrete bias label emitted by the confluence engine."""

    STRONG_BULLISH = "Strong Bullish"
    BULLISH = "Bullish"
    WEAK_BULLISH = "Weak Bullish"
    NEUTRAL = "Neutral"
    WEAK_BEARISH = "Weak Bearish"
    BEARISH = "Bearish"
    STRONG_BEARISH = "Strong Bearish"

    def __str__(self) -> str:
        return self.value

    @property
    def is_bullish(self) -> bool:
        return self in (SignalLabel.STRONG_BULLISH, SignalLabel.BULLISH, SignalLabel.WEAK_BULLISH)

    @property
    def is_bearish(self) -> bool:
        return self in (SignalLabel.STRONG_BEARISH, SignalLabel.BEARISH, SignalLabel.WEAK_BEARISH)


@dataclass(frozen=True)
class PriceBar:
    """One OHLCV sample without the open, which no provider uses."""

    high: float
    low: float
    close: float
    volume: float = 0.0

    def validate(self, require_positive_close: bool = False) -> "PriceBar":
        """
        Check the bar invariants.

        Args:
            require_positive_close: Reject close == 0 (for price-ratio consumers).

        Returns:
            The bar itself, so calls can be chained.

        Raises:
            InvalidInputError: If any field is NaN/Inf, high < low, close < 0,
                or volume < 0.
        """
        for name in ("high", "low", "close", "volume"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidInputError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise InvalidInputError(f"{name} must be finite, got {value}")
        if self.high < self.low:
            raise InvalidInputError(f"high {self.high} is below low {self.low}")
        if self.low < 0:
            raise InvalidInputError(f"low must be non-negative, got {self.low}")
        if self.close < 0 or (require_positive_close and self.close == 0):
            raise InvalidInputError(f"invalid close {self.close}")
        if self.volume < 0:
            raise InvalidInputError(f"volume must be non-negative, got {self.volume}")
        return self

    @property
    def typical_price(self) -> float:
        return (self.high + self.low + self.close) / 3.0


@dataclass(frozen=True)
class IndicatorConfig:
    """
    Immutable snapshot of provider thresholds.

    Validated once at construction; a new config requires new provider
    instances.
    """

    rsi_overbought: float = 70.0
    rsi_oversold: float = 30.0
    mfi_overbought: float = 80.0
    mfi_oversold: float = 20.0
    admo_overbought: float = 1.0
    admo_oversold: float = -1.0
    stochastic_overbought: float = 80.0
    stochastic_oversold: float = 20.0
    cci_overbought: float = 100.0
    cci_oversold: float = -100.0
    vwao_strong_trend: float = 70.0
    divergence_threshold: float = 0.0
    mfi_volume_scale: float = 300000.0
    atso_ema_period: int = 5
    amdo_divergence: float = 50.0

    def __post_init__(self) -> None:
        for name, value in vars(self).items():
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidParamsError(f"{name} must be a finite number, got {value!r}")
        pairs = (
            ("rsi", self.rsi_overbought, self.rsi_oversold),
            ("mfi", self.mfi_overbought, self.mfi_oversold),
            ("admo", self.admo_overbought, self.admo_oversold),
            ("stochastic", self.stochastic_overbought, self.stochastic_oversold),
            ("cci", self.cci_overbought, self.cci_oversold),
        )
        for prefix, overbought, oversold in pairs:
            if overbought <= oversold:
                raise InvalidParamsError(
                    f"{prefix} overbought ({overbought}) must be greater than oversold ({oversold})"
                )
        if self.vwao_strong_trend <= 0:
            raise InvalidParamsError("vwao_strong_trend must be positive")
        if self.divergence_threshold < 0:
            raise InvalidParamsError("divergence_threshold must be non-negative")
        if self.amdo_divergence <= 0:
            raise InvalidParamsError("amdo_divergence must be positive")
        if self.mfi_volume_scale <= 0:
            raise InvalidParamsError("mfi_volume_scale must be positive")
        if int(self.atso_ema_period) != self.atso_ema_period or self.atso_ema_period < 1:
            raise InvalidParamsError("atso_ema_period must be an integer >= 1")


@dataclass(frozen=True)
class LabelThresholds:
    """Net-score thresholds for the three label strengths."""

    strong: float
    normal: float
    weak: float

    def shifted(self, offset: float) -> "LabelThresholds":
        return LabelThresholds(self.strong + offset, self.normal + offset, self.weak + offset)


@dataclass(frozen=True)
class ConfluenceSettings:
    """
    Hand-tuned constants of the confluence engine.

    Attributes:
        strong_threshold / normal_threshold / weak_threshold: Base label bands.
        high_vol_ratio: ATR/close at or above which thresholds loosen.
        low_vol_ratio: ATR/close at or below which thresholds tighten.
        vol_threshold_shift: Amount added/subtracted by the volatility bands.
        chop_vol_ratio / chop_bandwidth: Chop when both ratios are below these.
        chop_trend_scale: Multiplier for trend-confirming members during chop.
        momentum_bonus: Added when three closes move monotonically with the net.
        zone_weight: Fraction of a member's weight granted for a zone reading.
    """

    strong_threshold: float = 3.0
    normal_threshold: float = 2.0
    weak_threshold: float = 1.0
    high_vol_ratio: float = 0.03
    low_vol_ratio: float = 0.005
    vol_threshold_shift: float = 0.5
    chop_vol_ratio: float = 0.01
    chop_bandwidth: float = 0.04
    chop_trend_scale: float = 0.6
    momentum_bonus: float = 0.5
    zone_weight: float = 0.5

    def __post_init__(self) -> None:
        for name, value in vars(self).items():
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidParamsError(f"{name} must be a finite number, got {value!r}")
        if not self.strong_threshold > self.normal_threshold > self.weak_threshold > 0:
            raise InvalidParamsError("thresholds must satisfy strong > normal > weak > 0")
        if self.vol_threshold_shift < 0 or self.weak_threshold - self.vol_threshold_shift <= 0:
            raise InvalidParamsError("vol_threshold_shift must keep the weak threshold positive")
        if not 0 <= self.low_vol_ratio < self.high_vol_ratio:
            raise InvalidParamsError("low_vol_ratio must be below high_vol_ratio")
        if self.chop_vol_ratio <= 0 or self.chop_bandwidth <= 0:
            raise InvalidParamsError("chop thresholds must be positive")
        if not 0 < self.chop_trend_scale <= 1:
            raise InvalidParamsError("chop_trend_scale must be in (0, 1]")
        if self.momentum_bonus < 0 or self.zone_weight < 0:
            raise InvalidParamsError("momentum_bonus and zone_weight must be non-negative")

    @property
    def base_thresholds(self) -> LabelThresholds:
        return LabelThresholds(self.strong_threshold, self.normal_threshold, self.weak_threshold)


DEFAULT_WEIGHTS: Dict[str, float] = {
    "rsi": 1.0,
    "mfi": 1.2,
    "vwao": 1.0,
    "hma": 1.5,
    "admo": 0.8,
    "atso": 0.5,
}


@dataclass(frozen=True)
class ProviderSettings:
    """Periods and weights of the default provider set."""

    rsi_period: int = 5
    mfi_period: int = 5
    vwao_period: int = 14
    hma_period: int = 9
    admo_length: int = 20
    admo_stdev_length: int = 14
    admo_weight: float = 0.3
    atso_min_period: int = 2
    atso_max_period: int = 14
    atso_volatility_period: int = 14
    atso_sensitivity: float = 2.0
    atr_period: int = 14
    bollinger_period: int = 20
    bollinger_multiplier: float = 2.0
    weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))

    def __post_init__(self) -> None:
        for name in (
            "rsi_period", "mfi_period", "vwao_period", "hma_period", "admo_length",
            "admo_stdev_length", "atso_min_period", "atso_max_period",
            "atso_volatility_period", "atr_period", "bollinger_period",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise InvalidParamsError(f"{name} must be an integer >= 1, got {value!r}")
        if self.atso_max_period < self.atso_min_period:
            raise InvalidParamsError("atso_max_period must be >= atso_min_period")
        if self.atso_sensitivity <= 0:
            raise InvalidParamsError("atso_sensitivity must be positive")
        if self.bollinger_multiplier <= 0:
            raise InvalidParamsError("bollinger_multiplier must be positive")
        unknown = set(self.weights) - set(DEFAULT_WEIGHTS)
        if unknown:
            raise InvalidParamsError(f"unknown provider weights: {sorted(unknown)}")
        for name, weight in self.weights.items():
            if not math.isfinite(weight) or weight < 0:
                raise InvalidParamsError(f"weight for {name} must be non-negative")

    def weight(self, name: str) -> float:
        return self.weights.get(name, DEFAULT_WEIGHTS[name])


@dataclass
class ConfluenceScore:
    """Breakdown of one confluence evaluation, kept for diagnostics."""

    bull: float
    bear: float
    label: SignalLabel
    thresholds: LabelThresholds
    regime: Regime
    vol_ratio: float
    bandwidth_pct: float
    momentum_bonus: float = 0.0
    contributions: Dict[str, Tuple[float, float]] = field(default_factory=dict)

    @property
    def net(self) -> float:
        return self.bull - self.bear

    def to_dict(self) -> Dict[str, object]:
        return {
            "label": self.label.value,
            "bull": self.bull,
            "bear": self.bear,
            "net": self.net,
            "regime": self.regime.value,
            "vol_ratio": self.vol_ratio,
            "bandwidth_pct": self.bandwidth_pct,
            "momentum_bonus": self.momentum_bonus,
            "thresholds": {
                "strong": self.thresholds.strong,
                "normal": self.thresholds.normal,
                "weak": self.thresholds.weak,
            },
            "contributions": {k: {"bull": b, "bear": s} for k, (b, s) in self.contributions.items()},
        }
