"""
BoundedSeries - fixed-capacity append-with-eviction buffer.

Every rolling window in the engine is one of these, so no buffer can grow
past its configured lookback no matter how long the feed runs.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Generic, Iterator, List, TypeVar, Union, overload

import numpy as np

from .validation import require_period

T = TypeVar("T")


class BoundedSeries(Generic[T]):
    """
    Append-only series that keeps at most ``capacity`` of the newest items.

    Example:
        >>> s = BoundedSeries[float](3)
        >>> for v in (1, 2, 3, 4):
        ...     s.push(v)
        >>> list(s)
        [2, 3, 4]
    """

    __slots__ = ("_items",)

    def __init__(self, capacity: int) -> None:
        self._items: Deque[T] = deque(maxlen=require_period("capacity", capacity))

    @property
    def capacity(self) -> int:
        return self._items.maxlen  # type: ignore[return-value]

    def push(self, value: T) -> None:
        """Append ``value``, evicting the oldest item once over capacity."""
        self._items.append(value)

    def reset(self) -> None:
        self._items.clear()

    def resize(self, capacity: int) -> None:
        """Change the capacity. Existing items are discarded, not carried over."""
        self._items = deque(maxlen=require_period("capacity", capacity))

    def is_full(self) -> bool:
        return len(self._items) == self.capacity

    def last(self, n: int = 1) -> List[T]:
        """Return the newest ``n`` items, oldest first."""
        if n <= 0:
            return []
        if n >= len(self._items):
            return list(self._items)
        return list(self._items)[-n:]

    def to_list(self) -> List[T]:
        return list(self._items)

    def to_array(self) -> np.ndarray:
        return np.fromiter(self._items, dtype=float, count=len(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> List[T]: ...

    def __getitem__(self, index: Union[int, slice]) -> Union[T, List[T]]:
        if isinstance(index, slice):
            return list(self._items)[index]
        return self._items[index]

    def __repr__(self) -> str:
        return f"BoundedSeries(capacity={self.capacity}, items={list(self._items)!r})"
