"""Pytest configuration and fixtures."""

import logging
from typing import List

import numpy as np
import pytest

from streamta.domain.signals.models import PriceBar
from streamta.utils import logging_setup
from streamta.utils.logging_setup import CATEGORIES, LOGGER_ROOT, shutdown_logging


def make_bars(
    n: int,
    seed: int = 42,
    start: float = 100.0,
    drift: float = 0.0,
    scale: float = 0.5,
) -> List[PriceBar]:
    """
    Random-walk bars whose close always lies inside [low, high].

    Args:
        n: Number of bars.
        seed: Generator seed.
        start: First close.
        drift: Added to every step (positive trends up).
        scale: Standard deviation of a step.
    """
    rng = np.random.default_rng(seed)
    closes = start + np.cumsum(rng.normal(drift, scale, n))
    highs = closes + rng.random(n) * 0.5
    lows = closes - rng.random(n) * 0.5
    volumes = rng.integers(1_000, 10_000, n)
    return [
        PriceBar(float(h), float(l), float(c), float(v))
        for h, l, c, v in zip(highs, lows, closes, volumes)
    ]


def flat_bars(n: int, high: float = 10.0, low: float = 9.0, close: float = 9.5,
              volume: float = 1000.0) -> List[PriceBar]:
    return [PriceBar(high, low, close, volume) for _ in range(n)]


def feed(provider, bars) -> None:
    """Add every bar to a provider or engine."""
    for bar in bars:
        provider.add(bar.high, bar.low, bar.close, bar.volume)


@pytest.fixture
def random_bars() -> List[PriceBar]:
    """300 bars of a driftless random walk around 100."""
    return make_bars(300)


@pytest.fixture
def uptrend_bars() -> List[PriceBar]:
    """120 bars drifting steadily upward."""
    return make_bars(120, seed=7, drift=0.4, scale=0.2)


@pytest.fixture
def downtrend_bars() -> List[PriceBar]:
    """120 bars drifting steadily downward from 200."""
    return make_bars(120, seed=11, start=200.0, drift=-0.4, scale=0.2)


@pytest.fixture
def reset_logging():
    """Undo handler, level and flag changes made by logging setup."""
    yield
    shutdown_logging()
    for category in CATEGORIES:
        logger = logging.getLogger(f"{LOGGER_ROOT}.{category}")
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)
        for f in logger.filters[:]:
            logger.removeFilter(f)
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
    logging_setup.set_verbose_mode(False)
    logging_setup.set_log_level_override(None)
    logging_setup._category_loggers.clear()
