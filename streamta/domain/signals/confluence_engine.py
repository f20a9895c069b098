"""
ConfluenceEngine - Regime-aware combination of signal providers into one label.

Per bar:
1. Validate the bar (close must be positive; it divides the regime ratios)
2. Forward it to every provider, atomically: if any provider rejects it,
   every provider is restored to its pre-bar state and ProviderError is raised
3. Invalidate the cached score

Per query (lazy, cached until the next bar):
- Each member adds its weight to a bull or bear accumulator when its
  crossover fires, a fraction of it for a zone reading, and (for strength
  members) a share proportional to |value| / 100
- Trend-confirming members are scaled down while the market is in chop
  (ATR/close and Bollinger bandwidth/close both below their thresholds)
- A momentum bonus is added when the last three closes move monotonically
  in the direction the net score already points
- Label thresholds shift with ATR/close: high volatility loosens them,
  very low volatility tightens them

Query errors from providers (NotReadyError while warming up,
DivisionByZeroError from a degenerate window) propagate unchanged out of
the score queries. Divergence signals skip providers in either state.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from ...utils.logging_setup import get_logger
from ...utils.rwlock import ReadWriteLock
from ...utils.trace_context import new_bar
from ..exceptions import DivisionByZeroError, InvalidParamsError, NotReadyError, ProviderError
from .core.bounded_series import BoundedSeries
from .indicators.base import TransactionalProvider
from .indicators.registry import ProviderRegistry
from .indicators.volatility.atr import AverageTrueRange
from .indicators.volatility.bollinger import BollingerBands
from .models import (
    ConfluenceScore,
    ConfluenceSettings,
    DivergenceType,
    LabelThresholds,
    PriceBar,
    Regime,
    SignalLabel,
    Zone,
)
from .reporting.plot_export import PlotData

logger = get_logger(__name__)

# Closes kept for the momentum-confirmation bonus
MOMENTUM_WINDOW = 3


class ZoneMode(Enum):
    """How a member's zone reading maps to a direction."""

    REVERSAL = "reversal"  # Oversold is bullish, overbought bearish (oscillators)
    TREND = "trend"  # Overbought is bullish, oversold bearish (trend strength)


@dataclass(frozen=True)
class ConfluenceMember:
    """
    One provider's participation in the confluence score.

    Attributes:
        provider: The signal provider.
        weight: Score added when the provider's crossover fires.
        trend_confirming: Scaled by chop_trend_scale while in chop.
        zone_mode: Direction of zone readings, or None to ignore zones.
        strength: Also contribute weight * |value| / 100 (bounded oscillators).
    """

    provider: TransactionalProvider
    weight: float
    trend_confirming: bool = False
    zone_mode: Optional[ZoneMode] = None
    strength: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.provider, TransactionalProvider):
            raise InvalidParamsError(
                f"{type(self.provider).__name__} does not support snapshot/restore"
            )
        if isinstance(self.weight, bool) or not isinstance(self.weight, (int, float)) or self.weight < 0:
            raise InvalidParamsError(f"weight for {self.provider.name} must be non-negative")

    @property
    def name(self) -> str:
        return self.provider.name


def select_label(net: float, thresholds: LabelThresholds) -> SignalLabel:
    """Map a net score to a label, strongest band first."""
    if net >= thresholds.strong:
        return SignalLabel.STRONG_BULLISH
    if net >= thresholds.normal:
        return SignalLabel.BULLISH
    if net >= thresholds.weak:
        return SignalLabel.WEAK_BULLISH
    if net <= -thresholds.strong:
        return SignalLabel.STRONG_BEARISH
    if net <= -thresholds.normal:
        return SignalLabel.BEARISH
    if net <= -thresholds.weak:
        return SignalLabel.WEAK_BEARISH
    return SignalLabel.NEUTRAL


class ConfluenceEngine:
    """
    Combines weighted signal providers into a discrete bias label.

    Safe for one writer (``add``, ``reset``) and many concurrent readers.

    Usage:
        engine = build_default_engine()
        for bar in bars:
            engine.add(bar.high, bar.low, bar.close, bar.volume)
        label = engine.get_combined_signal()
    """

    def __init__(
        self,
        members: Sequence[ConfluenceMember],
        atr: AverageTrueRange,
        bands: BollingerBands,
        settings: Optional[ConfluenceSettings] = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            members: Scored providers, evaluated in order.
            atr: Provider of the volatility ratio (ATR / close).
            bands: Provider of the bandwidth ratio ((upper - lower) / close).
            settings: Thresholds and tuning constants.

        Raises:
            InvalidParamsError: No members, or duplicate provider names.
        """
        if not members:
            raise InvalidParamsError("confluence engine needs at least one member")
        self._settings = settings or ConfluenceSettings()
        self._members: List[ConfluenceMember] = list(members)
        self._atr = atr
        self._bands = bands

        self._registry = ProviderRegistry()
        for member in self._members:
            if member.name in self._registry:
                raise InvalidParamsError(f"duplicate provider name {member.name!r}")
            self._registry.register(member.provider)

        # Regime providers are fed the same bars but not scored
        self._all: List[TransactionalProvider] = [m.provider for m in self._members]
        for provider in (atr, bands):
            if provider.name not in self._registry:
                self._all.append(provider)

        self._lock = ReadWriteLock()
        self._cache_lock = threading.Lock()
        self._closes: BoundedSeries[float] = BoundedSeries(MOMENTUM_WINDOW)
        self._cached: Optional[ConfluenceScore] = None
        self._last_label: Optional[SignalLabel] = None
        self._bar_count = 0

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def settings(self) -> ConfluenceSettings:
        return self._settings

    @property
    def members(self) -> List[ConfluenceMember]:
        return list(self._members)

    @property
    def bar_count(self) -> int:
        return self._bar_count

    def providers(self) -> List[TransactionalProvider]:
        """Scored providers in evaluation order."""
        return self._registry.get_all()  # type: ignore[return-value]

    def get_provider(self, name: str) -> Optional[TransactionalProvider]:
        """Look up a scored provider, or one of the regime providers, by name."""
        provider = self._registry.get(name)
        if provider is not None:
            return provider  # type: ignore[return-value]
        for regime_provider in (self._atr, self._bands):
            if regime_provider.name == name:
                return regime_provider
        return None

    # ------------------------------------------------------------------
    # Ingest
    # ------------------------------------------------------------------

    def add(self, high: float, low: float, close: float, volume: float) -> None:
        """
        Ingest one bar into every provider, all or nothing.

        Raises:
            InvalidInputError: The bar itself is invalid; nothing was touched.
            ProviderError: A provider rejected the bar; all providers were
                restored to their previous state.
        """
        self.add_bar(PriceBar(high, low, close, volume))

    def add_bar(self, bar: PriceBar) -> None:
        bar.validate(require_positive_close=True)
        with new_bar(), self._lock.write_locked():
            snapshots = [(p, p.snapshot()) for p in self._all]
            for provider in self._all:
                try:
                    provider.add(bar.high, bar.low, bar.close, bar.volume)
                except Exception as exc:
                    for restored, state in snapshots:
                        restored.restore(state)
                    logger.warning(
                        "Bar rejected by provider, update rolled back",
                        extra={"provider": provider.name, "error": str(exc)},
                    )
                    raise ProviderError(provider.name, exc) from exc

            self._closes.push(bar.close)
            self._bar_count += 1
            with self._cache_lock:
                self._cached = None
            logger.debug(
                "Bar ingested",
                extra={"close": bar.close, "count": self._bar_count},
            )

    def reset(self) -> None:
        """Reset every provider and drop the cached score."""
        with self._lock.write_locked():
            for provider in self._all:
                provider.reset()
            self._closes.reset()
            self._bar_count = 0
            with self._cache_lock:
                self._cached = None
                self._last_label = None
        logger.info("Confluence engine reset")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_combined_signal(self) -> SignalLabel:
        """
        Label for the latest bar.

        Raises:
            NotReadyError: A provider is still warming up.
            DivisionByZeroError: A provider's latest window is degenerate.
        """
        return self.get_score().label

    def get_score(self) -> ConfluenceScore:
        """Full breakdown behind the latest label (cached until the next bar)."""
        with self._lock.read_locked():
            with self._cache_lock:
                if self._cached is None:
                    self._cached = self._compute()
                return self._cached

    def volatility_ratio(self) -> float:
        """ATR / close of the latest bar."""
        with self._lock.read_locked():
            return self._volatility_ratio()

    def is_chop(self) -> bool:
        """True when both regime ratios are below their chop thresholds."""
        with self._lock.read_locked():
            return self._regime(self._volatility_ratio(), self._bandwidth_pct()) is Regime.CHOP

    def get_divergence_signals(self) -> Dict[str, DivergenceType]:
        """
        Providers currently diverging from price.

        Providers without enough data, or holding a degenerate-window
        error for the latest bar, are skipped; providers with no
        divergence are omitted.
        """
        signals: Dict[str, DivergenceType] = {}
        with self._lock.read_locked():
            for member in self._members:
                check = getattr(member.provider, "is_divergence", None)
                if check is None:
                    continue
                try:
                    divergence = check()
                except (NotReadyError, DivisionByZeroError):
                    continue
                if divergence is not DivergenceType.NONE:
                    signals[member.name] = divergence
        return signals

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> List[PlotData]:
        """Plot series of every scored provider, in evaluation order."""
        plots: List[PlotData] = []
        with self._lock.read_locked():
            for member in self._members:
                export = getattr(member.provider, "get_plot_data", None)
                if export is not None:
                    plots.extend(export(start_time, interval))
        return plots

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def _last_close(self) -> float:
        if not self._closes:
            raise NotReadyError("confluence engine has no bars")
        return self._closes[-1]

    def _volatility_ratio(self) -> float:
        return self._atr.calculate() / self._last_close()

    def _bandwidth_pct(self) -> float:
        upper, _, lower = self._bands.bands()
        return (upper - lower) / self._last_close()

    def _regime(self, vol_ratio: float, bandwidth_pct: float) -> Regime:
        s = self._settings
        if vol_ratio < s.chop_vol_ratio and bandwidth_pct < s.chop_bandwidth:
            return Regime.CHOP
        return Regime.TRENDING

    def _thresholds(self, vol_ratio: float) -> LabelThresholds:
        s = self._settings
        base = s.base_thresholds
        if vol_ratio >= s.high_vol_ratio:
            return base.shifted(-s.vol_threshold_shift)
        if vol_ratio <= s.low_vol_ratio:
            return base.shifted(s.vol_threshold_shift)
        return base

    def _contribution(self, member: ConfluenceMember, scale: float) -> Tuple[float, float]:
        provider = member.provider
        bull = bear = 0.0
        weight = member.weight * scale

        if provider.is_bullish_crossover():
            bull += weight
        if provider.is_bearish_crossover():
            bear += weight

        if member.zone_mode is not None:
            zone = provider.zone()
            partial = weight * self._settings.zone_weight
            if zone is not Zone.NEUTRAL:
                bullish_zone = Zone.OVERSOLD if member.zone_mode is ZoneMode.REVERSAL else Zone.OVERBOUGHT
                if zone is bullish_zone:
                    bull += partial
                else:
                    bear += partial

        if member.strength:
            value = provider.last_value()
            if value is None:
                raise NotReadyError(f"{member.name} has no output yet")
            share = weight * min(abs(value), 100.0) / 100.0
            if value > 0:
                bull += share
            elif value < 0:
                bear += share

        return bull, bear

    def _momentum_bonus(self, net: float) -> float:
        if len(self._closes) < MOMENTUM_WINDOW:
            return 0.0
        a, b, c = self._closes.to_list()
        if a < b < c and net > 0:
            return self._settings.momentum_bonus
        if a > b > c and net < 0:
            return -self._settings.momentum_bonus
        return 0.0

    def _compute(self) -> ConfluenceScore:
        vol_ratio = self._volatility_ratio()
        bandwidth_pct = self._bandwidth_pct()
        regime = self._regime(vol_ratio, bandwidth_pct)
        thresholds = self._thresholds(vol_ratio)

        contributions: Dict[str, Tuple[float, float]] = {}
        bull = bear = 0.0
        for member in self._members:
            scale = 1.0
            if member.trend_confirming and regime is Regime.CHOP:
                scale = self._settings.chop_trend_scale
            member_bull, member_bear = self._contribution(member, scale)
            contributions[member.name] = (member_bull, member_bear)
            bull += member_bull
            bear += member_bear

        bonus = self._momentum_bonus(bull - bear)
        if bonus > 0:
            bull += bonus
        elif bonus < 0:
            bear -= bonus

        label = select_label(bull - bear, thresholds)
        score = ConfluenceScore(
            bull=bull,
            bear=bear,
            label=label,
            thresholds=thresholds,
            regime=regime,
            vol_ratio=vol_ratio,
            bandwidth_pct=bandwidth_pct,
            momentum_bonus=bonus,
            contributions=contributions,
        )

        if label is not self._last_label:
            logger.info(
                "Confluence label changed",
                extra={
                    "previous": str(self._last_label) if self._last_label else None,
                    "label": label.value,
                    "net": round(score.net, 4),
                    "regime": regime.value,
                },
            )
            self._last_label = label
        return score

    def __repr__(self) -> str:
        names = ", ".join(m.name for m in self._members)
        return f"ConfluenceEngine(members=[{names}], bars={self._bar_count})"
