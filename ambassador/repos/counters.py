from __future__ import annotations

import threading
from typing import Protocol

from ambassador.services.unit_of_work import record_undo


class IdSequence(Protocol):
    def next(self) -> int: ...
    def peek(self) -> int: ...


class Sequence:
    """Monotonic id allocator.  Ids are never rolled back and never reused;
    a failed unit of work leaves a gap."""

    def __init__(self, start: int = 1) -> None:
        self._lock = threading.Lock()
        self._next = start

    def next(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value

    def peek(self) -> int:
        with self._lock:
            return self._next


class CounterRepo(Protocol):
    def increment(self, name: str, by: int = 1) -> int: ...
    def decrement(self, name: str, by: int = 1) -> int: ...
    def get(self, name: str) -> int: ...
    def snapshot(self) -> dict[str, int]: ...


class InMemoryCounterRepo:
    """Named totals with atomic, journaled updates."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: dict[str, int] = {}

    def increment(self, name: str, by: int = 1) -> int:
        with self._lock:
            self._counts[name] = self._counts.get(name, 0) + by
            value = self._counts[name]
        record_undo(lambda: self._adjust(name, -by))
        return value

    def decrement(self, name: str, by: int = 1) -> int:
        return self.increment(name, -by)

    def get(self, name: str) -> int:
        with self._lock:
            return self._counts.get(name, 0)

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counts)

    def _adjust(self, name: str, by: int) -> None:
        with self._lock:
            self._counts[name] = self._counts.get(name, 0) + by
