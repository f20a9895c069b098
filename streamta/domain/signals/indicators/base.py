"""
Signal Provider Protocol and Base Class.

Defines the capability surface every indicator exposes to the confluence
engine, and a base class that implements the shared parts once:

- Bar validation before any state is touched
- Single-writer / many-reader locking around every call
- Crossover, zone and divergence queries over the retained output series
- Deferred computation errors (re-raised by every query for that bar)
- State snapshot/restore so the engine can roll a batched update back
- Plot-data export of the output series and its signal markers
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from ....utils.logging_setup import get_logger
from ....utils.rwlock import ReadWriteLock
from ...exceptions import DivisionByZeroError, InvalidParamsError, NotReadyError, RecoverableError
from ..core.bounded_series import BoundedSeries
from ..core.validation import require_period
from ..divergence import detect_divergence
from ..models import DivergenceType, IndicatorConfig, PriceBar, SignalCategory, Zone
from ..reporting.plot_export import PlotData, build_series_plot

logger = get_logger(__name__)

# Output values retained per indicator for crossover queries and plotting
DEFAULT_HISTORY = 256

# Closes retained for divergence checks
CLOSE_HISTORY = 3


@runtime_checkable
class SignalProvider(Protocol):
    """
    Protocol for everything the confluence engine can consume.

    Each provider must define:
    - name: Unique identifier (e.g., "rsi", "atso")
    - category: SignalCategory

    And implement:
    - add(): Ingest one bar
    - last_value(): Latest output, or None while warming up
    - is_bullish_crossover() / is_bearish_crossover(): Latest-bar crossings
    - zone(): Overbought / Oversold / Neutral classification
    """

    name: str
    category: SignalCategory

    def add(self, high: float, low: float, close: float, volume: float = 0.0) -> None:
        ...

    def last_value(self) -> Optional[float]:
        ...

    def is_bullish_crossover(self) -> bool:
        ...

    def is_bearish_crossover(self) -> bool:
        ...

    def zone(self) -> Zone:
        ...


@runtime_checkable
class TransactionalProvider(SignalProvider, Protocol):
    """A SignalProvider whose state can be captured and rolled back."""

    def snapshot(self) -> Any:
        ...

    def restore(self, state: Any) -> None:
        ...

    def reset(self) -> None:
        ...


def crossed_above(previous: float, current: float, level: float) -> bool:
    """True when the series moved from at-or-below ``level`` to above it."""
    return previous <= level < current


def crossed_below(previous: float, current: float, level: float) -> bool:
    """True when the series moved from at-or-above ``level`` to below it."""
    return previous >= level > current


def classify_zone(value: float, overbought: float, oversold: float) -> Zone:
    if value > overbought:
        return Zone.OVERBOUGHT
    if value < oversold:
        return Zone.OVERSOLD
    return Zone.NEUTRAL


class StreamingIndicator(ABC):
    """
    Abstract base class for streaming signal providers.

    Provides:
    - add()/add_bar() with validation and write locking
    - Query methods with read locking
    - Default zero-line crossover and bounded zone logic

    Subclasses must implement:
    - _update(): Consume one validated bar, return the new output or None
    - _reset_state(): Clear subclass buffers

    Subclasses may override:
    - _crossover_levels(): (bullish level, bearish level), or None
    - _zone_bounds(): (overbought, oversold), or None for always-neutral
    - _bullish_crossover()/_bearish_crossover(): non-level crossovers
    """

    name: str = ""
    display_name: str = ""
    category: SignalCategory = SignalCategory.MOMENTUM
    requires_positive_close: bool = False

    def __init__(
        self,
        config: Optional[IndicatorConfig] = None,
        history: int = DEFAULT_HISTORY,
    ) -> None:
        if config is None:
            config = IndicatorConfig()
        if not isinstance(config, IndicatorConfig):
            raise InvalidParamsError(f"config must be an IndicatorConfig, got {type(config).__name__}")
        require_period("history", history, minimum=2)
        self.config = config
        self._lock = ReadWriteLock()
        self._values: BoundedSeries[float] = BoundedSeries(history)
        self._closes: BoundedSeries[float] = BoundedSeries(CLOSE_HISTORY)
        self._pending_error: Optional[RecoverableError] = None

    # ------------------------------------------------------------------
    # Ingest
    # ------------------------------------------------------------------

    def add(self, high: float, low: float, close: float, volume: float = 0.0) -> None:
        """
        Ingest one bar.

        Raises:
            InvalidInputError: If the bar is invalid; no state is mutated.
        """
        self.add_bar(PriceBar(high, low, close, volume))

    def add_bar(self, bar: PriceBar) -> None:
        bar.validate(self.requires_positive_close)
        self._validate_bar(bar)
        with self._lock.write_locked():
            self._pending_error = None
            self._closes.push(bar.close)
            try:
                value = self._update(bar)
            except DivisionByZeroError as exc:
                # The bar is consumed; queries re-raise until the next bar.
                self._pending_error = exc
                logger.debug(
                    "Indicator output deferred",
                    extra={"indicator": self.name, "error": str(exc)},
                )
                return
            if value is not None:
                self._values.push(value)

    def _validate_bar(self, bar: PriceBar) -> None:
        """Provider-specific bar checks; runs before any state is mutated."""

    @abstractmethod
    def _update(self, bar: PriceBar) -> Optional[float]:
        """
        Consume one validated bar under the write lock.

        Returns:
            The new output value, or None while warming up.
        """
        ...

    @abstractmethod
    def _reset_state(self) -> None:
        """Clear subclass buffers and accumulators (configuration survives)."""
        ...

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _raise_pending(self) -> None:
        if self._pending_error is not None:
            err = self._pending_error
            raise type(err)(*err.args) from err

    def last_value(self) -> Optional[float]:
        """Latest output value, or None while warming up."""
        with self._lock.read_locked():
            self._raise_pending()
            return self._values[-1] if self._values else None

    def calculate(self) -> float:
        """
        Latest output value.

        Raises:
            NotReadyError: While warming up.
        """
        with self._lock.read_locked():
            self._raise_pending()
            if not self._values:
                raise NotReadyError(f"{self.name} has no output yet")
            return self._values[-1]

    def is_ready(self) -> bool:
        with self._lock.read_locked():
            return bool(self._values) and self._pending_error is None

    def is_bullish_crossover(self) -> bool:
        with self._lock.read_locked():
            self._raise_pending()
            return self._bullish_crossover()

    def is_bearish_crossover(self) -> bool:
        with self._lock.read_locked():
            self._raise_pending()
            return self._bearish_crossover()

    def zone(self) -> Zone:
        with self._lock.read_locked():
            self._raise_pending()
            if not self._values:
                raise NotReadyError(f"{self.name} has no output yet")
            return self._classify_zone()

    def is_divergence(self) -> DivergenceType:
        """
        Price/indicator divergence over the newest three closes.

        Raises:
            InsufficientDataError: Fewer than 3 closes or 2 output values.
        """
        with self._lock.read_locked():
            self._raise_pending()
            return detect_divergence(
                self._closes.to_list(),
                self._values.last(2),
                self.config.divergence_threshold,
            )

    def values(self) -> List[float]:
        """Copy of the retained output series, oldest first."""
        with self._lock.read_locked():
            return self._values.to_list()

    def closes(self) -> List[float]:
        """Copy of the retained closes, oldest first."""
        with self._lock.read_locked():
            return self._closes.to_list()

    # ------------------------------------------------------------------
    # Crossover and zone hooks
    # ------------------------------------------------------------------

    def _last_two(self) -> Tuple[float, float]:
        if len(self._values) < 2:
            raise NotReadyError(
                f"{self.name} crossover needs 2 values, has {len(self._values)}"
            )
        return self._values[-2], self._values[-1]

    def _crossover_levels(self) -> Optional[Tuple[float, float]]:
        return 0.0, 0.0

    def _zone_bounds(self) -> Optional[Tuple[float, float]]:
        return None

    def _classify_zone(self) -> Zone:
        bounds = self._zone_bounds()
        if bounds is None:
            return Zone.NEUTRAL
        return classify_zone(self._values[-1], *bounds)

    def _bullish_crossover(self) -> bool:
        previous, current = self._last_two()
        levels = self._crossover_levels()
        return levels is not None and crossed_above(previous, current, levels[0])

    def _bearish_crossover(self) -> bool:
        previous, current = self._last_two()
        levels = self._crossover_levels()
        return levels is not None and crossed_below(previous, current, levels[1])

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Clear all accumulated state; configuration and periods are kept."""
        with self._lock.write_locked():
            self._values.reset()
            self._closes.reset()
            self._pending_error = None
            self._reset_state()

    def snapshot(self) -> Dict[str, Any]:
        """Deep copy of the mutable state, for restore()."""
        with self._lock.read_locked():
            return copy.deepcopy({k: v for k, v in vars(self).items() if k != "_lock"})

    def restore(self, state: Dict[str, Any]) -> None:
        """Replace the mutable state with a snapshot() result."""
        with self._lock.write_locked():
            vars(self).update(copy.deepcopy(state))

    # ------------------------------------------------------------------
    # Plot export
    # ------------------------------------------------------------------

    def _markers(self, values: List[float]) -> List[float]:
        levels = self._crossover_levels()
        bounds = self._zone_bounds()
        markers = [0.0] * len(values)
        for i, value in enumerate(values):
            if levels is not None and i > 0:
                if crossed_above(values[i - 1], value, levels[0]):
                    markers[i] = 1.0
                elif crossed_below(values[i - 1], value, levels[1]):
                    markers[i] = -1.0
            if bounds is not None:
                zone = classify_zone(value, *bounds)
                if zone is Zone.OVERBOUGHT:
                    markers[i] = 2.0
                elif zone is Zone.OVERSOLD:
                    markers[i] = -2.0
        return markers

    def get_plot_data(self, start_time: int = 0, interval: int = 1) -> List[PlotData]:
        """Line series of the retained output plus signal markers."""
        with self._lock.read_locked():
            values = self._values.to_list()
            markers = self._markers(values)
        return build_series_plot(self.display_name or self.name, values, markers, start_time, interval)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, values={len(self._values)})"
