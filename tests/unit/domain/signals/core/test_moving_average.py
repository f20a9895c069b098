"""
Unit tests for the moving-average kernels.

Tests:
- SMA / WMA / EMA values on a known sequence
- EMA seeding law (first value equals the SMA of the first period samples)
- Warm-up and input validation
- Period changes
- RunningEma first-sample seeding
"""

import math

import pytest

from streamta.domain.exceptions import InvalidInputError, InvalidParamsError, NotReadyError
from streamta.domain.signals.core.moving_average import (
    MAType,
    MovingAverage,
    RunningEma,
    ema_smoothing_factor,
    weighted_average,
)


def _filled(ma_type: MAType, period: int, values) -> MovingAverage:
    ma = MovingAverage(ma_type, period)
    for v in values:
        ma.add(v)
    return ma


# =============================================================================
# Known values
# =============================================================================


class TestKnownValues:
    """Period 3 over 1, 2, 3, 4, 5."""

    def test_sma(self) -> None:
        assert _filled(MAType.SMA, 3, [1, 2, 3, 4, 5]).calculate() == pytest.approx(4.0)

    def test_wma_weights_newest_heaviest(self) -> None:
        # (1*3 + 2*4 + 3*5) / 6
        assert _filled(MAType.WMA, 3, [1, 2, 3, 4, 5]).calculate() == pytest.approx(26.0 / 6.0)

    def test_ema(self) -> None:
        # seed 2, then 2 + 0.5*(4-2) = 3, then 3 + 0.5*(5-3) = 4
        assert _filled(MAType.EMA, 3, [1, 2, 3, 4, 5]).calculate() == pytest.approx(4.0)

    def test_weighted_average_helper(self) -> None:
        assert weighted_average([3.0, 4.0, 5.0]) == pytest.approx(26.0 / 6.0)
        with pytest.raises(NotReadyError):
            weighted_average([])

    def test_smoothing_factor(self) -> None:
        assert ema_smoothing_factor(3) == pytest.approx(0.5)
        assert ema_smoothing_factor(19) == pytest.approx(0.1)


# =============================================================================
# Warm-up and seeding
# =============================================================================


class TestWarmup:
    """Readiness rules."""

    @pytest.mark.parametrize("ma_type", list(MAType))
    def test_not_ready_before_period(self, ma_type: MAType) -> None:
        ma = _filled(ma_type, 4, [1, 2, 3])

        assert not ma.is_ready()
        with pytest.raises(NotReadyError):
            ma.calculate()

    @pytest.mark.parametrize("ma_type", list(MAType))
    def test_ready_at_period(self, ma_type: MAType) -> None:
        ma = _filled(ma_type, 4, [1, 2, 3, 4])
        assert ma.is_ready()

    def test_ema_first_value_is_sma(self) -> None:
        values = [10.0, 12.5, 9.0, 11.0, 13.0]
        ema = _filled(MAType.EMA, 5, values)
        sma = _filled(MAType.SMA, 5, values)

        assert ema.calculate() == sma.calculate()

    def test_ema_of_constant_is_exact(self) -> None:
        ema = _filled(MAType.EMA, 7, [101.37] * 500)
        assert ema.calculate() == 101.37

    def test_reset_restarts_seeding(self) -> None:
        ema = _filled(MAType.EMA, 3, [1, 2, 3, 4, 5])
        ema.reset()

        assert not ema.is_ready()
        for v in (7, 8, 9):
            ema.add(v)
        assert ema.calculate() == pytest.approx(8.0)


# =============================================================================
# Validation and reconfiguration
# =============================================================================


class TestValidation:
    """Constructor and input checks."""

    @pytest.mark.parametrize("period", [0, -3, 1.5])
    def test_invalid_period(self, period) -> None:
        with pytest.raises(InvalidParamsError):
            MovingAverage(MAType.SMA, period)

    def test_invalid_type(self) -> None:
        with pytest.raises(InvalidParamsError):
            MovingAverage("sma", 3)  # type: ignore[arg-type]

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_input_rejected(self, value: float) -> None:
        ma = _filled(MAType.SMA, 2, [1.0, 2.0])

        with pytest.raises(InvalidInputError):
            ma.add(value)
        assert ma.calculate() == pytest.approx(1.5)

    def test_set_period_discards_history(self) -> None:
        ma = _filled(MAType.SMA, 2, [1, 2, 3])
        ma.set_period(3)

        assert ma.period == 3
        assert not ma.is_ready()
        for v in (4, 5, 6):
            ma.add(v)
        assert ma.calculate() == pytest.approx(5.0)

    def test_set_period_invalid(self) -> None:
        ma = MovingAverage(MAType.WMA, 3)
        with pytest.raises(InvalidParamsError):
            ma.set_period(0)
        assert ma.period == 3


class TestRunningEma:
    """First-sample seeded EMA."""

    def test_first_sample_is_value(self) -> None:
        ema = RunningEma(9)
        assert ema.update(42.0) == 42.0

    def test_update_rule(self) -> None:
        ema = RunningEma(3)
        ema.update(2.0)
        assert ema.update(4.0) == pytest.approx(3.0)

    def test_reset(self) -> None:
        ema = RunningEma(3)
        ema.update(2.0)
        ema.reset()
        assert ema.value is None
        assert ema.update(5.0) == 5.0
