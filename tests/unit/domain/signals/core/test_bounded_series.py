"""
Unit tests for BoundedSeries.

Tests:
- Eviction at capacity
- Tail access and slicing
- Resize and reset
- Capacity validation
"""

import numpy as np
import pytest

from streamta.domain.exceptions import InvalidParamsError
from streamta.domain.signals.core.bounded_series import BoundedSeries


class TestBoundedSeries:
    """Tests for the fixed-capacity buffer."""

    def test_evicts_oldest_past_capacity(self) -> None:
        s = BoundedSeries[float](3)
        for v in (1.0, 2.0, 3.0, 4.0):
            s.push(v)

        assert list(s) == [2.0, 3.0, 4.0]
        assert len(s) == 3
        assert s.is_full()

    def test_never_exceeds_capacity(self) -> None:
        s = BoundedSeries[int](5)
        for v in range(1000):
            s.push(v)
            assert len(s) <= 5
        assert s.to_list() == [995, 996, 997, 998, 999]

    def test_last(self) -> None:
        s = BoundedSeries[int](4)
        for v in range(4):
            s.push(v)

        assert s.last() == [3]
        assert s.last(2) == [2, 3]
        assert s.last(10) == [0, 1, 2, 3]
        assert s.last(0) == []

    def test_indexing_and_slicing(self) -> None:
        s = BoundedSeries[int](3)
        for v in (5, 6, 7):
            s.push(v)

        assert s[0] == 5
        assert s[-1] == 7
        assert s[:-1] == [5, 6]

    def test_to_array(self) -> None:
        s = BoundedSeries[float](3)
        s.push(1.5)
        s.push(2.5)

        arr = s.to_array()
        assert isinstance(arr, np.ndarray)
        assert arr.tolist() == [1.5, 2.5]

    def test_reset_keeps_capacity(self) -> None:
        s = BoundedSeries[int](3)
        s.push(1)
        s.reset()

        assert len(s) == 0
        assert not s
        assert s.capacity == 3

    def test_resize_discards_items(self) -> None:
        s = BoundedSeries[int](3)
        for v in (1, 2, 3):
            s.push(v)
        s.resize(5)

        assert s.capacity == 5
        assert len(s) == 0

    @pytest.mark.parametrize("capacity", [0, -1, 2.5, True])
    def test_invalid_capacity(self, capacity) -> None:
        with pytest.raises(InvalidParamsError):
            BoundedSeries(capacity)

    def test_invalid_resize(self) -> None:
        s = BoundedSeries[int](3)
        with pytest.raises(InvalidParamsError):
            s.resize(0)
