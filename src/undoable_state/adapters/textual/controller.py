"""UI-agnostic bridge that forwards ``UndoableState`` cells to widget hooks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, List, TypeVar

from undoable_state.state import Subscription, UndoableState

T = TypeVar("T")


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - hook left unset
    return None


@dataclass(slots=True)
class TextualUndoHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_value: Callable[[object], None]
    update_undo: Callable[[bool], None] = _noop
    update_redo: Callable[[bool], None] = _noop
    update_status: Callable[[str], None] = _noop
    # receives one line per gesture and per value change
    log: Callable[[str], None] = _noop


class TextualUndoAdapter(Generic[T]):
    """Subscribes to a store's cells and maps user gestures onto it."""

    def __init__(self, store: UndoableState[T], hooks: TextualUndoHooks) -> None:
        self.store = store
        self.hooks = hooks
        self._subscriptions: List[Subscription] = [
            store.state.subscribe(self._on_value),
            store.can_undo_state.subscribe(hooks.update_undo),
            store.can_redo_state.subscribe(hooks.update_redo),
        ]
        hooks.update_value(store.value)
        hooks.update_undo(store.can_undo)
        hooks.update_redo(store.can_redo)
        self._refresh_status()

    def handle_edit(self, value: T) -> None:
        self._log_state("edit ->", value=value)
        self.store.value = value
        self._refresh_status()

    def handle_undo(self) -> None:
        self._log_state("undo ->")
        self.store.undo_sync()
        self._refresh_status()

    def handle_redo(self) -> None:
        self._log_state("redo ->")
        self.store.redo_sync()
        self._refresh_status()

    def handle_clear(self) -> None:
        self._log_state("clear ->")
        self.store.clear()
        self._refresh_status()

    def close(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions.clear()

    def status_text(self) -> str:
        history_size, future_size = self.store.sizes()
        return f"History: {history_size}, Future: {future_size}"

    def _on_value(self, value: T) -> None:
        self.hooks.update_value(value)
        self._log_state("value <-")

    def _refresh_status(self) -> None:
        self.hooks.update_status(self.status_text())

    def _log_state(self, prefix: str, **fields: object) -> None:
        history_size, future_size = self.store.sizes()
        snapshot = {
            "value": self.store.value,
            "can_undo": self.store.can_undo,
            "can_redo": self.store.can_redo,
            "history": history_size,
            "future": future_size,
        }
        snapshot.update(fields)
        parts = [prefix] + [f"{key}={value!r}" for key, value in snapshot.items()]
        self.hooks.log(" ".join(parts))


__all__ = ["TextualUndoAdapter", "TextualUndoHooks"]
