"""
Readers/writer lock for the single-writer, many-reader indicator contract.

Any number of readers may hold the lock together; a writer holds it alone.
Waiting writers block new readers so a steady stream of queries cannot
starve ``add``.

Usage:
    lock = ReadWriteLock()

    with lock.write_locked():
        mutate()

    with lock.read_locked():
        return query()
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator


class ReadWriteLock:
    """Writer-preferring readers/writer lock built on a single Condition."""

    __slots__ = ("_cond", "_readers", "_writer", "_writers_waiting")

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold the lock in shared mode for the duration of the block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the lock exclusively for the duration of the block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    def __deepcopy__(self, memo: Dict[int, Any]) -> "ReadWriteLock":
        # State snapshots copy their owner; each copy gets its own unlocked lock.
        return ReadWriteLock()

    def __repr__(self) -> str:
        return (
            f"ReadWriteLock(readers={self._readers}, writer={self._writer}, "
            f"writers_waiting={self._writers_waiting})"
        )
