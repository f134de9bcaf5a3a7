"""Errors raised while building undoable state containers."""

from __future__ import annotations


class InvalidConfiguration(ValueError):
    """Raised when a store is constructed with an unusable history bound."""

    def __init__(self, message: str, *, max_history: object | None = None) -> None:
        super().__init__(message)
        self.max_history = max_history


__all__ = ["InvalidConfiguration"]
