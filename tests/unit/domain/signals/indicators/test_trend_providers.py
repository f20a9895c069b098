"""
Unit tests for the trend providers: Hull MA, VWAO and Parabolic SAR.
"""

import pytest

from conftest import feed
from streamta.domain.exceptions import DivisionByZeroError, InvalidParamsError, NotReadyError
from streamta.domain.signals.indicators.trend.hma import HullMovingAverage, hull_periods
from streamta.domain.signals.indicators.trend.parabolic_sar import ParabolicSAR
from streamta.domain.signals.indicators.trend.vwao import VolumeWeightedAroonOscillator
from streamta.domain.signals.models import IndicatorConfig, PriceBar, SignalCategory, SignalLabel, Zone


def closes_to_bars(closes):
    return [PriceBar(c, c, c, 1000.0) for c in closes]


# =============================================================================
# Hull Moving Average
# =============================================================================


class TestHullMovingAverage:
    """Hull MA and price crossovers."""

    def test_hull_periods(self) -> None:
        assert hull_periods(9) == (9, 4, 3)
        assert hull_periods(16) == (16, 8, 4)
        assert hull_periods(1) == (1, 1, 1)

    def test_warmup(self) -> None:
        hma = HullMovingAverage(9)
        bars = closes_to_bars([float(i) for i in range(1, 12)])
        feed(hma, bars[:10])
        assert hma.last_value() is None
        feed(hma, bars[10:])
        assert hma.last_value() is not None

    def test_tracks_linear_series_without_lag(self) -> None:
        hma = HullMovingAverage(9)
        feed(hma, closes_to_bars([float(i) for i in range(1, 31)]))
        assert hma.calculate() == pytest.approx(30.0)

    def test_constant_series(self) -> None:
        hma = HullMovingAverage(4)
        feed(hma, closes_to_bars([10.0] * 10))
        assert hma.calculate() == 10.0
        assert hma.trend_direction() == SignalLabel.NEUTRAL

    def test_trend_direction(self) -> None:
        up = HullMovingAverage(9)
        feed(up, closes_to_bars([float(i) for i in range(1, 31)]))
        assert up.trend_direction() == SignalLabel.BULLISH

        down = HullMovingAverage(9)
        feed(down, closes_to_bars([float(i) for i in range(30, 0, -1)]))
        assert down.trend_direction() == SignalLabel.BEARISH

    def test_trend_direction_not_ready(self) -> None:
        with pytest.raises(NotReadyError):
            HullMovingAverage(4).trend_direction()

    def test_price_crosses_above(self) -> None:
        hma = HullMovingAverage(4)
        feed(hma, closes_to_bars([10.0] * 8))
        hma.add_bar(PriceBar(12.0, 12.0, 12.0))

        assert hma.calculate() < 12.0
        assert hma.is_bullish_crossover()
        assert not hma.is_bearish_crossover()

    def test_price_crosses_below(self) -> None:
        hma = HullMovingAverage(4)
        feed(hma, closes_to_bars([10.0] * 8))
        hma.add_bar(PriceBar(8.0, 8.0, 8.0))

        assert hma.is_bearish_crossover()
        assert not hma.is_bullish_crossover()

    def test_zone_is_neutral(self, random_bars) -> None:
        hma = HullMovingAverage()
        feed(hma, random_bars)
        assert hma.zone() == Zone.NEUTRAL

    def test_plot_includes_price(self, random_bars) -> None:
        hma = HullMovingAverage()
        feed(hma, random_bars)
        names = [p.name for p in hma.get_plot_data()]
        assert names == ["Hull Moving Average", "Price", "Hull Moving Average Signals"]

    def test_set_period(self, random_bars) -> None:
        hma = HullMovingAverage()
        feed(hma, random_bars[:30])
        hma.set_period(16)
        assert hma.period == 16
        assert hma.values() == []


# =============================================================================
# Volume-Weighted Aroon Oscillator
# =============================================================================


class TestVWAO:
    """Volume-weighted Aroon oscillator."""

    def test_metadata(self) -> None:
        vwao = VolumeWeightedAroonOscillator()
        assert vwao.name == "vwao"
        assert vwao.category == SignalCategory.TREND
        assert vwao.period == 14

    def test_known_value(self) -> None:
        vwao = VolumeWeightedAroonOscillator(2)
        feed(vwao, [
            PriceBar(10.0, 9.0, 9.5, 1.0),
            PriceBar(11.0, 10.0, 10.5, 1.0),
            PriceBar(12.0, 11.0, 11.5, 1.0),
        ])
        # Weights 2, 1, 0; high at the newest bar, low at the oldest
        assert vwao.calculate() == pytest.approx(-200.0 / 3.0)

    def test_bounded(self, random_bars) -> None:
        vwao = VolumeWeightedAroonOscillator()
        feed(vwao, random_bars)
        assert all(-100.0 <= v <= 100.0 for v in vwao.values())

    def test_zero_volume_is_deferred_error(self) -> None:
        vwao = VolumeWeightedAroonOscillator(2)
        feed(vwao, [PriceBar(10.0, 9.0, 9.5, 0.0)] * 3)

        assert not vwao.is_ready()
        with pytest.raises(DivisionByZeroError):
            vwao.last_value()

        feed(vwao, [PriceBar(10.0, 9.0, 9.5, 50.0)] * 2)
        assert vwao.is_ready()

    def test_strong_trend(self) -> None:
        bars = [
            PriceBar(10.0, 9.0, 9.5, 1.0),
            PriceBar(11.0, 10.0, 10.5, 1.0),
            PriceBar(12.0, 11.0, 11.5, 1.0),
        ]
        default = VolumeWeightedAroonOscillator(2)
        feed(default, bars)
        assert not default.is_strong_trend()
        assert default.zone() == Zone.NEUTRAL

        sensitive = VolumeWeightedAroonOscillator(2, config=IndicatorConfig(vwao_strong_trend=50.0))
        feed(sensitive, bars)
        assert sensitive.is_strong_trend()
        assert sensitive.zone() == Zone.OVERSOLD

    def test_set_period(self) -> None:
        vwao = VolumeWeightedAroonOscillator()
        vwao.set_period(5)
        assert vwao.period == 5
        with pytest.raises(InvalidParamsError):
            vwao.set_period(0)


# =============================================================================
# Parabolic SAR
# =============================================================================


class TestParabolicSAR:
    """Stop-and-reverse trend follower."""

    RISING = [
        PriceBar(11.0, 10.0, 10.5),
        PriceBar(12.0, 11.0, 11.5),
        PriceBar(13.0, 12.0, 12.5),
        PriceBar(14.0, 13.0, 13.5),
    ]

    def test_initialises_on_second_bar(self) -> None:
        sar = ParabolicSAR()
        sar.add_bar(self.RISING[0])
        assert sar.last_value() is None
        with pytest.raises(NotReadyError):
            sar.is_uptrend()

        sar.add_bar(self.RISING[1])
        assert sar.calculate() == pytest.approx(10.0)
        assert sar.is_uptrend()

    def test_uptrend_stop_below_lows(self) -> None:
        sar = ParabolicSAR()
        feed(sar, self.RISING)
        assert sar.is_uptrend()
        assert sar.calculate() == pytest.approx(10.12)
        assert not sar.is_bearish_crossover()

    def test_flip_to_downtrend(self) -> None:
        sar = ParabolicSAR()
        feed(sar, self.RISING)
        sar.add(10.0, 8.0, 9.0)

        assert not sar.is_uptrend()
        # The stop jumps to the prior extreme point
        assert sar.calculate() == pytest.approx(14.0)
        assert sar.is_bearish_crossover()
        assert not sar.is_bullish_crossover()

    def test_uptrend_series(self, uptrend_bars) -> None:
        sar = ParabolicSAR()
        feed(sar, uptrend_bars)
        if sar.is_uptrend():
            assert sar.calculate() <= uptrend_bars[-1].low

    @pytest.mark.parametrize("step,max_step", [(0.0, 0.2), (0.3, 0.2), (0.02, -1.0)])
    def test_invalid_steps(self, step: float, max_step: float) -> None:
        with pytest.raises(InvalidParamsError):
            ParabolicSAR(step, max_step)

    def test_set_params_resets(self) -> None:
        sar = ParabolicSAR()
        feed(sar, self.RISING)
        sar.set_params(0.01, 0.1)
        assert sar.steps == (0.01, 0.1)
        assert sar.last_value() is None
