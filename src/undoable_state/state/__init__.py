"""Observable cells, snapshot history, and the undoable store."""

from .cells import ReadOnlyState, StateCell, Subscription
from .history import History
from .store import UndoableState, remember_undoable_state

__all__ = [
    "History",
    "ReadOnlyState",
    "StateCell",
    "Subscription",
    "UndoableState",
    "remember_undoable_state",
]
