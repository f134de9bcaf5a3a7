"""``UndoableState``: a value cell with bounded undo/redo history."""

from __future__ import annotations

import asyncio
import operator
import threading
from typing import (
    Any,
    Callable,
    Generic,
    Hashable,
    List,
    MutableMapping,
    Tuple,
    TypeVar,
)

from undoable_state.config import (
    DEFAULT_MAX_HISTORY,
    StateConfig,
    validate_max_history,
)
from undoable_state.errors import InvalidConfiguration
from undoable_state.runtime import telemetry

from .cells import ReadOnlyState, StateCell
from .history import History

T = TypeVar("T")


class UndoableState(Generic[T]):
    """Current value plus past/future snapshots, observable through cells.

    Two calling conventions are offered for every mutator:

    * ``set_value_sync`` / ``undo_sync`` / ``redo_sync`` (and the ``value``
      setter) run immediately without locking. Use them from the one flow of
      control that owns the store, typically the UI event loop.
    * Serialized variants hold the store's single ``threading.Lock`` across
      the whole read-modify-write, so writers from other threads or event
      loops are applied one at a time. ``set_value_blocking`` /
      ``undo_blocking`` / ``redo_blocking`` wait for it on the calling
      thread; ``await set_value(...)`` / ``await undo()`` / ``await redo()``
      wait in a worker thread so the event loop keeps running.

    Mixing the two conventions concurrently is a caller error; the immediate
    variants never look at the lock. The lock is not re-entrant: subscribers
    must not call serialized variants on the same store.

    Subscribers of ``state``, ``can_undo_state`` and ``can_redo_state`` are
    notified synchronously, after all three cells already hold the
    post-mutation values. Flag cells only notify when the flag flips.
    """

    def __init__(
        self,
        initial_value: T,
        max_history: int = DEFAULT_MAX_HISTORY,
        equality_check: Callable[[T, T], bool] = operator.eq,
        *,
        name: str = "state",
    ) -> None:
        try:
            self._max_history = validate_max_history(max_history)
        except InvalidConfiguration:
            telemetry.record_event(
                "state.invalid_config",
                level="error",
                data={"state": name, "max_history": max_history},
            )
            raise

        self.name = name
        self._initial_value = initial_value
        self._equality_check = equality_check
        self._history: History[T] = History(self._max_history)
        self._lock = threading.Lock()

        self._state: StateCell[T] = StateCell(initial_value, name=f"{name}.value")
        self._can_undo: StateCell[bool] = StateCell(False, name=f"{name}.can_undo")
        self._can_redo: StateCell[bool] = StateCell(False, name=f"{name}.can_redo")

    @classmethod
    def from_config(
        cls, initial_value: T, config: StateConfig, *, name: str = "state"
    ) -> "UndoableState[T]":
        config.validate()
        return cls(
            initial_value,
            max_history=config.max_history,
            equality_check=config.equality_check,
            name=name,
        )

    # -- reactive surface -------------------------------------------------

    @property
    def state(self) -> ReadOnlyState[T]:
        return self._state

    @property
    def can_undo_state(self) -> ReadOnlyState[bool]:
        return self._can_undo

    @property
    def can_redo_state(self) -> ReadOnlyState[bool]:
        return self._can_redo

    @property
    def value(self) -> T:
        return self._state.value

    @value.setter
    def value(self, new_value: T) -> None:
        self.set_value_sync(new_value)

    @property
    def can_undo(self) -> bool:
        return self._can_undo.value

    @property
    def can_redo(self) -> bool:
        return self._can_redo.value

    @property
    def max_history(self) -> int:
        return self._max_history

    @property
    def initial_value(self) -> T:
        """The value the store was constructed with."""

        return self._initial_value

    @property
    def history_size(self) -> int:
        return self._history.sizes()[0]

    @property
    def future_size(self) -> int:
        return self._history.sizes()[1]

    def sizes(self) -> Tuple[int, int]:
        """Return ``(history_size, future_size)``."""

        return self._history.sizes()

    @property
    def past(self) -> Tuple[T, ...]:
        """Undoable values, oldest first."""

        return self._history.past

    @property
    def future(self) -> Tuple[T, ...]:
        """Redoable values, the next redo target first."""

        return self._history.future

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    # -- immediate entry points -------------------------------------------

    def set_value_sync(self, new_value: T) -> None:
        current = self._state.value
        if self._equality_check(new_value, current):
            return
        if self._history.record(current):
            telemetry.record_event("state.evict", data=self._event_data())
        self._state._store(new_value)
        self._publish("state.set")

    def undo_sync(self) -> None:
        if not self._history.can_step_back:
            return
        self._state._store(self._history.step_back(self._state.value))
        self._publish("state.undo")

    def redo_sync(self) -> None:
        if not self._history.can_step_forward:
            return
        self._state._store(self._history.step_forward(self._state.value))
        self._publish("state.redo")

    def clear(self) -> None:
        """Drop all undo and redo history; the current value is kept."""

        self._history.clear()
        self._publish("state.clear", value_changed=False)

    # -- serialized entry points ------------------------------------------

    def set_value_blocking(self, new_value: T) -> None:
        with self._lock:
            self._traced("set_value", self.set_value_sync, new_value)

    def undo_blocking(self) -> None:
        with self._lock:
            self._traced("undo", self.undo_sync)

    def redo_blocking(self) -> None:
        with self._lock:
            self._traced("redo", self.redo_sync)

    async def set_value(self, new_value: T) -> None:
        await self._acquire()
        try:
            self._traced("set_value", self.set_value_sync, new_value)
        finally:
            self._lock.release()

    async def undo(self) -> None:
        await self._acquire()
        try:
            self._traced("undo", self.undo_sync)
        finally:
            self._lock.release()

    async def redo(self) -> None:
        await self._acquire()
        try:
            self._traced("redo", self.redo_sync)
        finally:
            self._lock.release()

    # -- internals ----------------------------------------------------------

    async def _acquire(self) -> None:
        if self._lock.acquire(blocking=False):
            return
        pending = asyncio.ensure_future(asyncio.to_thread(self._lock.acquire))
        try:
            await asyncio.shield(pending)
        except asyncio.CancelledError:
            # the worker thread still takes the lock after the caller gave up
            pending.add_done_callback(self._release_abandoned)
            raise

    def _release_abandoned(self, pending: "asyncio.Future[bool]") -> None:
        if not pending.cancelled() and pending.exception() is None:
            self._lock.release()

    def _traced(
        self, operation: str, mutate: Callable[..., None], *args: Any
    ) -> None:
        with telemetry.span(f"state::{operation}", metadata={"state": self.name}):
            mutate(*args)

    def _publish(self, event: str, *, value_changed: bool = True) -> None:
        can_undo = self._history.can_step_back
        can_redo = self._history.can_step_forward
        undo_flipped = can_undo != self._can_undo.value
        redo_flipped = can_redo != self._can_redo.value
        self._can_undo._store(can_undo)
        self._can_redo._store(can_redo)

        telemetry.record_event(event, data=self._event_data())

        # every cell holds post-mutation state before any subscriber runs
        pending: List[StateCell[Any]] = []
        if value_changed:
            pending.append(self._state)
        if undo_flipped:
            pending.append(self._can_undo)
        if redo_flipped:
            pending.append(self._can_redo)

        errors: List[Exception] = []
        for cell in pending:
            try:
                cell.notify()
            except Exception as exc:
                errors.append(exc)
        if errors:
            raise errors[0]

    def _event_data(self) -> dict[str, object]:
        history_size, future_size = self._history.sizes()
        return {
            "state": self.name,
            "history_size": history_size,
            "future_size": future_size,
            "max_history": self._max_history,
        }

    def __repr__(self) -> str:
        history_size, future_size = self._history.sizes()
        return (
            f"UndoableState(value={self.value!r}, history_size={history_size}, "
            f"future_size={future_size})"
        )


def remember_undoable_state(
    scope: MutableMapping[Hashable, UndoableState],
    key: Hashable,
    initial_value: T,
    max_history: int = DEFAULT_MAX_HISTORY,
    equality_check: Callable[[T, T], bool] = operator.eq,
) -> UndoableState[T]:
    """Return the store kept in ``scope`` under ``key``, creating it once.

    ``scope`` is whatever mapping the host ties to a screen or session. A
    stored entry is rebuilt when ``initial_value`` or ``max_history``
    differs from the pair it was created with.
    """

    existing = scope.get(key)
    if (
        existing is not None
        and existing.max_history == max_history
        and existing.initial_value == initial_value
    ):
        return existing
    created: UndoableState[T] = UndoableState(
        initial_value,
        max_history=max_history,
        equality_check=equality_check,
        name=str(key),
    )
    scope[key] = created
    return created


__all__ = ["UndoableState", "remember_undoable_state"]
