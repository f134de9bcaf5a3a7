"""Two-sequence snapshot history used by ``UndoableState``."""

from __future__ import annotations

from collections import deque
from typing import Deque, Generic, Tuple, TypeVar

T = TypeVar("T")


class History(Generic[T]):
    """Bounded past plus unbounded future of whole-value snapshots.

    ``past`` is ordered oldest -> newest and never holds more than
    ``capacity`` entries. ``future`` is ordered nearest -> farthest, so its
    left end is the value a redo restores next.
    """

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self._past: Deque[T] = deque()
        self._future: Deque[T] = deque()

    @property
    def past(self) -> Tuple[T, ...]:
        return tuple(self._past)

    @property
    def future(self) -> Tuple[T, ...]:
        return tuple(self._future)

    @property
    def can_step_back(self) -> bool:
        return bool(self._past)

    @property
    def can_step_forward(self) -> bool:
        return bool(self._future)

    def sizes(self) -> Tuple[int, int]:
        return len(self._past), len(self._future)

    def record(self, previous: T) -> bool:
        """Start a new timeline after ``previous``; True if an entry was evicted."""

        evicted = self._push_past(previous)
        self._future.clear()
        return evicted

    def step_back(self, current: T) -> T:
        restored = self._past.pop()
        self._future.appendleft(current)
        return restored

    def step_forward(self, current: T) -> T:
        restored = self._future.popleft()
        self._push_past(current)
        return restored

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()

    def _push_past(self, value: T) -> bool:
        evicted = len(self._past) >= self.capacity
        if evicted:
            self._past.popleft()
        self._past.append(value)
        return evicted


__all__ = ["History"]
