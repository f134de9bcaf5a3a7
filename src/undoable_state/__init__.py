"""Undo/redo value container with observable state for UI layers."""

from .config import DEFAULT_MAX_HISTORY, StateConfig
from .errors import InvalidConfiguration
from .state import (
    ReadOnlyState,
    StateCell,
    Subscription,
    UndoableState,
    remember_undoable_state,
)

__all__ = [
    "DEFAULT_MAX_HISTORY",
    "InvalidConfiguration",
    "ReadOnlyState",
    "StateCell",
    "StateConfig",
    "Subscription",
    "UndoableState",
    "remember_undoable_state",
]

__version__ = "0.1.0"
