"""Observable value cells backing the store's reactive surface."""

from __future__ import annotations

from contextlib import suppress
from typing import Callable, Generic, List, Optional, Protocol, TypeVar

from undoable_state.runtime import telemetry

T = TypeVar("T")

Subscriber = Callable[[T], None]


class ReadOnlyState(Protocol[T]):
    """What observers get: a readable value plus change subscriptions."""

    @property
    def value(self) -> T:
        ...

    def subscribe(self, callback: Callable[[T], None]) -> "Subscription":
        ...


class Subscription:
    """Handle returned from ``StateCell.subscribe``; closing it unsubscribes."""

    def __init__(self, cell: "StateCell[object]", callback: Callable) -> None:
        self._cell = cell
        self._callback = callback
        self.active = True

    def cancel(self) -> None:
        if not self.active:
            return
        self._cell.unsubscribe(self._callback)
        self.active = False

    close = cancel

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.cancel()
        return False


class StateCell(Generic[T]):
    """Value holder with a subscriber list.

    Writes are split in two steps so an owner can update several cells
    before any subscriber runs: ``_store`` swaps the value silently and
    ``notify`` fans the current value out.
    """

    def __init__(self, initial: T, *, name: str = "cell") -> None:
        self.name = name
        self._value = initial
        self._subscribers: List[Subscriber[T]] = []

    @property
    def value(self) -> T:
        return self._value

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Subscriber[T]) -> Subscription:
        self._subscribers.append(callback)
        return Subscription(self, callback)  # type: ignore[arg-type]

    def unsubscribe(self, callback: Subscriber[T]) -> None:
        with suppress(ValueError):
            self._subscribers.remove(callback)

    def _store(self, value: T) -> None:
        self._value = value

    def notify(self) -> None:
        """Call every subscriber; the first exception is re-raised at the end."""

        first_error: Optional[Exception] = None
        # copy: callbacks may unsubscribe while we iterate
        for callback in list(self._subscribers):
            try:
                callback(self._value)
            except Exception as exc:
                telemetry.record_event(
                    "cell.subscriber_error",
                    level="error",
                    data={"cell": self.name, "error": repr(exc)},
                )
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    def __repr__(self) -> str:
        return f"StateCell(name={self.name!r}, value={self._value!r})"


__all__ = ["ReadOnlyState", "StateCell", "Subscriber", "Subscription"]
