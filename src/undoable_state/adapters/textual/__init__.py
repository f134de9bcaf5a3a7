"""Textual adapter: hooks, controller, and the sample editor app."""

from .controller import TextualUndoAdapter, TextualUndoHooks

__all__ = ["TextualUndoAdapter", "TextualUndoHooks"]
