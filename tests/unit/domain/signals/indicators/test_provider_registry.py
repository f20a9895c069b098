"""
Unit tests for ProviderRegistry.
"""

import pytest

from streamta.domain.signals.indicators import (
    AdaptiveTrendStrengthOscillator,
    HullMovingAverage,
    MoneyFlowIndex,
    ProviderRegistry,
    RSIIndicator,
)
from streamta.domain.signals.models import SignalCategory


class TestProviderRegistry:
    """Registration, lookup and category filtering."""

    @pytest.fixture
    def registry(self) -> ProviderRegistry:
        registry = ProviderRegistry()
        for provider in (RSIIndicator(), HullMovingAverage(), AdaptiveTrendStrengthOscillator(),
                         MoneyFlowIndex()):
            registry.register(provider)
        return registry

    def test_lookup_by_name(self, registry: ProviderRegistry) -> None:
        assert isinstance(registry.get("rsi"), RSIIndicator)
        assert registry.get("missing") is None
        assert "hma" in registry
        assert len(registry) == 4

    def test_registration_order(self, registry: ProviderRegistry) -> None:
        assert registry.names() == ["rsi", "hma", "atso", "mfi"]
        assert [p.name for p in registry] == ["rsi", "hma", "atso", "mfi"]

    def test_by_category(self, registry: ProviderRegistry) -> None:
        trend = registry.get_by_category(SignalCategory.TREND)
        assert [p.name for p in trend] == ["hma", "atso"]
        assert registry.get_by_category(SignalCategory.VOLATILITY) == []

    def test_replace_same_name(self, registry: ProviderRegistry) -> None:
        replacement = RSIIndicator(14)
        registry.register(replacement)
        assert registry.get("rsi") is replacement
        assert len(registry) == 4

    def test_unregister(self, registry: ProviderRegistry) -> None:
        assert registry.unregister("mfi")
        assert not registry.unregister("mfi")
        assert registry.get_by_category(SignalCategory.VOLUME) == []

    def test_rejects_non_provider(self, registry: ProviderRegistry) -> None:
        with pytest.raises(TypeError):
            registry.register(object())  # type: ignore[arg-type]

    def test_clear(self, registry: ProviderRegistry) -> None:
        registry.clear()
        assert len(registry) == 0
        assert registry.get_by_category(SignalCategory.TREND) == []
