"""
Provider Registry - registration and lookup of signal providers.

Provides:
- Registration and lookup by name
- Filtering by category
- Insertion-ordered iteration (the engine's evaluation order)

Providers need explicit periods and configuration, so there is no
auto-discovery; callers register configured instances.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Set

from ....utils.logging_setup import get_logger
from ..models import SignalCategory
from .base import SignalProvider

logger = get_logger(__name__)


class ProviderRegistry:
    """Registry of configured SignalProvider instances keyed by name."""

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._providers: Dict[str, SignalProvider] = {}
        self._by_category: Dict[SignalCategory, Set[str]] = {
            cat: set() for cat in SignalCategory
        }

    def clear(self) -> None:
        """Clear all registered providers."""
        self._providers.clear()
        for cat in self._by_category:
            self._by_category[cat].clear()

    def register(self, provider: SignalProvider) -> None:
        """
        Register a provider.

        Re-registering a name replaces the previous provider and removes it
        from its old category.

        Args:
            provider: Provider implementing the SignalProvider protocol.

        Raises:
            TypeError: If ``provider`` does not implement SignalProvider.
        """
        if not isinstance(provider, SignalProvider):
            raise TypeError(f"{type(provider).__name__} does not implement SignalProvider")

        existing = self._providers.get(provider.name)
        if existing is not None:
            logger.warning(
                "Overwriting registered provider",
                extra={"provider": provider.name},
            )
            self._by_category[existing.category].discard(provider.name)

        self._providers[provider.name] = provider
        self._by_category[provider.category].add(provider.name)

    def unregister(self, name: str) -> bool:
        """
        Remove a provider by name.

        Returns:
            True if a provider was removed.
        """
        provider = self._providers.pop(name, None)
        if provider is None:
            return False
        self._by_category[provider.category].discard(name)
        return True

    def get(self, name: str) -> Optional[SignalProvider]:
        """Get a provider by name, or None."""
        return self._providers.get(name)

    def get_all(self) -> List[SignalProvider]:
        """All providers in registration order."""
        return list(self._providers.values())

    def get_by_category(self, category: SignalCategory) -> List[SignalProvider]:
        """Providers of one category, in registration order."""
        names = self._by_category.get(category, set())
        return [p for n, p in self._providers.items() if n in names]

    def names(self) -> List[str]:
        return list(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __iter__(self) -> Iterator[SignalProvider]:
        return iter(list(self._providers.values()))
