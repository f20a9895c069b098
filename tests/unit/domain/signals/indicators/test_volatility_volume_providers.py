"""
Unit tests for ATR, Bollinger Bands, MFI and VWAP.
"""

import math

import pytest

from conftest import feed
from streamta.domain.exceptions import InvalidInputError, NotReadyError
from streamta.domain.signals.indicators.volatility.atr import AverageTrueRange, true_range
from streamta.domain.signals.indicators.volatility.bollinger import BollingerBands
from streamta.domain.signals.indicators.volume.mfi import MoneyFlowIndex, money_flow_index
from streamta.domain.signals.indicators.volume.vwap import VWAPIndicator
from streamta.domain.signals.models import IndicatorConfig, PriceBar, Zone


# =============================================================================
# ATR
# =============================================================================


class TestAverageTrueRange:
    """Simple-average true range."""

    def test_true_range(self) -> None:
        assert true_range(11.0, 9.5, 9.5) == pytest.approx(1.5)
        assert true_range(12.0, 11.5, 10.0) == pytest.approx(2.0)
        assert true_range(9.0, 8.5, 10.0) == pytest.approx(1.5)

    def test_known_value(self) -> None:
        atr = AverageTrueRange(2)
        feed(atr, [PriceBar(10.0, 9.0, 9.5), PriceBar(11.0, 9.5, 10.5)])
        assert atr.last_value() is None

        atr.add(12.0, 10.0, 11.0)
        assert atr.calculate() == pytest.approx(1.75)

    def test_rejects_close_outside_range(self) -> None:
        atr = AverageTrueRange(2)
        with pytest.raises(InvalidInputError):
            atr.add(10.0, 9.0, 10.5)
        assert atr.closes() == []

    def test_close_check_can_be_disabled(self) -> None:
        atr = AverageTrueRange(2, validate_close=False)
        atr.add(10.0, 9.0, 10.5)
        assert atr.closes() == [10.5]

    def test_breakouts(self) -> None:
        flat = [PriceBar(10.0, 9.0, 9.5)] * 3

        up = AverageTrueRange(2)
        feed(up, flat)
        up.add(13.0, 11.0, 12.9)
        assert up.calculate() == pytest.approx(2.25)
        assert up.is_bullish_crossover()
        assert not up.is_bearish_crossover()

        down = AverageTrueRange(2)
        feed(down, flat)
        down.add(9.0, 6.0, 6.1)
        assert down.is_bearish_crossover()
        assert not down.is_bullish_crossover()

    def test_breakout_needs_two_values(self) -> None:
        atr = AverageTrueRange(2)
        feed(atr, [PriceBar(10.0, 9.0, 9.5)] * 3)
        with pytest.raises(NotReadyError):
            atr.is_bullish_crossover()


# =============================================================================
# Bollinger Bands
# =============================================================================


class TestBollingerBands:
    """Bands, zones and re-entry signals."""

    def test_known_bands(self) -> None:
        bands = BollingerBands(5, 2.0)
        feed(bands, [PriceBar(c, c, c) for c in (1.0, 2.0, 3.0, 4.0, 5.0)])

        upper, middle, lower = bands.bands()
        sd = math.sqrt(2.5)
        assert middle == pytest.approx(3.0)
        assert upper == pytest.approx(3.0 + 2 * sd)
        assert lower == pytest.approx(3.0 - 2 * sd)
        assert bands.bandwidth() == pytest.approx(4 * sd / 3.0)

    def test_bands_not_ready(self) -> None:
        with pytest.raises(NotReadyError):
            BollingerBands().bands()

    def test_close_above_upper_is_overbought(self) -> None:
        bands = BollingerBands(10, 2.0)
        feed(bands, [PriceBar(10.0, 10.0, 10.0)] * 9)
        bands.add(20.0, 20.0, 20.0)
        assert bands.zone() == Zone.OVERBOUGHT

    def test_reentry_above_lower_is_bullish(self) -> None:
        bands = BollingerBands(3, 0.5)
        feed(bands, [PriceBar(c + 0.1, c - 0.1, c) for c in (10.0, 10.0, 10.0, 7.0)])
        assert bands.zone() == Zone.OVERSOLD

        bands.add(9.6, 9.4, 9.5)
        assert bands.is_bullish_crossover()
        assert not bands.is_bearish_crossover()

    def test_reentry_below_upper_is_bearish(self) -> None:
        bands = BollingerBands(3, 0.5)
        feed(bands, [PriceBar(c + 0.1, c - 0.1, c) for c in (10.0, 10.0, 10.0, 13.0)])
        assert bands.zone() == Zone.OVERBOUGHT

        bands.add(10.6, 10.4, 10.5)
        assert bands.is_bearish_crossover()
        assert not bands.is_bullish_crossover()

    def test_plot_series(self, random_bars) -> None:
        bands = BollingerBands()
        feed(bands, random_bars)
        names = [p.name for p in bands.get_plot_data()]
        assert names == ["Bollinger Upper", "Bollinger Middle", "Bollinger Lower",
                         "Bollinger Middle Signals"]


# =============================================================================
# MFI
# =============================================================================


class TestMoneyFlowIndex:
    """Volume-scaled money flow."""

    @pytest.mark.parametrize(
        "positive,negative,expected",
        [(0.0, 0.0, 50.0), (5.0, 0.0, 100.0), (0.0, 5.0, 0.0), (3.0, 1.0, 75.0)],
    )
    def test_money_flow_index(self, positive: float, negative: float, expected: float) -> None:
        assert money_flow_index(positive, negative) == pytest.approx(expected)

    def test_known_value(self) -> None:
        mfi = MoneyFlowIndex(2)
        feed(mfi, [
            PriceBar(10.5, 9.5, 10.0, 300000.0),
            PriceBar(11.5, 10.5, 11.0, 300000.0),
            PriceBar(11.0, 10.0, 10.5, 300000.0),
        ])
        # Positive flow 11.0, negative flow 10.5
        assert mfi.calculate() == pytest.approx(100.0 - 100.0 / (1.0 + 11.0 / 10.5))

    def test_direction_extremes(self) -> None:
        rising = MoneyFlowIndex(3)
        feed(rising, [PriceBar(c + 0.5, c - 0.5, c, 1000.0) for c in (10.0, 11.0, 12.0, 13.0)])
        assert rising.calculate() == 100.0
        assert rising.zone() == Zone.OVERBOUGHT

        falling = MoneyFlowIndex(3)
        feed(falling, [PriceBar(c + 0.5, c - 0.5, c, 1000.0) for c in (13.0, 12.0, 11.0, 10.0)])
        assert falling.calculate() == 0.0
        assert falling.zone() == Zone.OVERSOLD

    def test_no_flow_reads_fifty(self) -> None:
        mfi = MoneyFlowIndex(2)
        feed(mfi, [PriceBar(10.5 + i, 9.5 + i, 10.0 + i, 0.0) for i in range(3)])
        assert mfi.calculate() == 50.0

    def test_volume_scale_cancels(self, random_bars) -> None:
        small = MoneyFlowIndex(5, config=IndicatorConfig(mfi_volume_scale=1.0))
        large = MoneyFlowIndex(5)
        feed(small, random_bars[:40])
        feed(large, random_bars[:40])
        assert small.values() == pytest.approx(large.values())

    def test_oversold_exit(self) -> None:
        mfi = MoneyFlowIndex(2)
        feed(mfi, [PriceBar(c + 0.5, c - 0.5, c, 1000.0) for c in (12.0, 11.0, 10.0)])
        assert mfi.calculate() == 0.0

        mfi.add(11.5, 10.5, 11.0, 1000.0)
        assert mfi.is_bullish_crossover()


# =============================================================================
# VWAP
# =============================================================================


class TestVWAP:
    """Cumulative volume-weighted price."""

    def test_known_value(self) -> None:
        vwap = VWAPIndicator()
        feed(vwap, [PriceBar(10.0, 10.0, 10.0, 100.0), PriceBar(20.0, 20.0, 20.0, 300.0)])
        assert vwap.calculate() == pytest.approx(17.5)
        assert vwap.cumulative_volume() == pytest.approx(400.0)

    def test_zero_volume_not_ready(self) -> None:
        vwap = VWAPIndicator()
        feed(vwap, [PriceBar(10.0, 9.0, 9.5, 0.0)] * 3)
        assert vwap.last_value() is None
        with pytest.raises(NotReadyError):
            vwap.calculate()

    def test_price_crosses_above(self) -> None:
        vwap = VWAPIndicator()
        feed(vwap, [PriceBar(10.0, 10.0, 10.0, 100.0), PriceBar(12.0, 12.0, 12.0, 100.0)])
        assert vwap.calculate() == pytest.approx(11.0)
        assert vwap.is_bullish_crossover()

    def test_reset_starts_new_session(self) -> None:
        vwap = VWAPIndicator()
        feed(vwap, [PriceBar(10.0, 10.0, 10.0, 100.0)])
        vwap.reset()
        feed(vwap, [PriceBar(30.0, 30.0, 30.0, 5.0)])
        assert vwap.calculate() == pytest.approx(30.0)
