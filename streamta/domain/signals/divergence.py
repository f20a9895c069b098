"""
Three-close price/indicator divergence.

The latest close is compared with the two before it to find a local
extreme, and the two newest indicator values give the indicator's
direction:

- Bullish: latest close is the strict minimum of the three closes while
  the indicator rose by more than ``threshold``.
- Bearish: latest close is the strict maximum of the three closes while
  the indicator fell by more than ``threshold``.
"""

from __future__ import annotations

from typing import Sequence

from ..exceptions import InsufficientDataError
from .models import DivergenceType


def detect_divergence(
    closes: Sequence[float],
    values: Sequence[float],
    threshold: float = 0.0,
) -> DivergenceType:
    """
    Classify divergence from the newest closes and indicator values.

    Args:
        closes: Close history, oldest first (at least 3 entries).
        values: Indicator history, oldest first (at least 2 entries).
        threshold: Minimum indicator move that counts as rising/falling.

    Returns:
        DivergenceType.BULLISH, BEARISH or NONE.

    Raises:
        InsufficientDataError: Fewer than 3 closes or 2 values.
    """
    if len(closes) < 3 or len(values) < 2:
        raise InsufficientDataError(
            f"divergence needs 3 closes and 2 values, have {len(closes)} and {len(values)}"
        )
    c0, c1, c2 = closes[-3], closes[-2], closes[-1]
    delta = values[-1] - values[-2]

    if c2 < c0 and c2 < c1 and delta > threshold:
        return DivergenceType.BULLISH
    if c2 > c0 and c2 > c1 and -delta > threshold:
        return DivergenceType.BEARISH
    return DivergenceType.NONE
