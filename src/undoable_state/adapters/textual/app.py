"""Executable Textual sample: a text field with undo, redo and clear."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from textual.app import App, ComposeResult
    from textual.containers import Horizontal, Vertical
    from textual.widgets import Button, Footer, Header, Input, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use undoable_state.adapters.textual.app"
    ) from exc

from undoable_state.config import StateConfig
from undoable_state.errors import InvalidConfiguration
from undoable_state.runtime import telemetry
from undoable_state.state import UndoableState

from .controller import TextualUndoAdapter, TextualUndoHooks


@dataclass
class UIState:
    value_text: str = ""
    status_text: str = ""


class UndoSampleApp(App[None]):
    """Single text field whose edits can be undone and redone."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#editor {
		padding: 1 1;
		border: round $accent;
	}

	#controls {
		height: auto;
	}

	#controls Button {
		margin: 0 1;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+z", "undo", "Undo"),
        ("ctrl+y", "redo", "Redo"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, *, config: StateConfig, initial: str = "") -> None:
        super().__init__()
        self._config = config
        self._initial = initial
        self._state = UIState()
        self.store: UndoableState[str] | None = None
        self.adapter: TextualUndoAdapter[str] | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="editor"):
            yield Input(value=self._initial, placeholder="Input", id="input")
            yield Static("", id="current-value")
            with Horizontal(id="controls"):
                yield Button("Undo", id="undo", disabled=True)
                yield Button("Redo", id="redo", disabled=True)
                yield Button("Clear", id="clear")
        yield Static("", id="status-line")
        yield Footer()

    def on_mount(self) -> None:
        self.store = UndoableState.from_config(
            self._initial, self._config, name="sample"
        )
        hooks = TextualUndoHooks(
            update_value=self._update_value,
            update_undo=lambda enabled: self._set_enabled("#undo", enabled),
            update_redo=lambda enabled: self._set_enabled("#redo", enabled),
            update_status=self._update_status,
            log=lambda line: telemetry.record_event("sample.ui", data={"line": line}),
        )
        self.adapter = TextualUndoAdapter(self.store, hooks)

    def on_unmount(self) -> None:
        if self.adapter:
            self.adapter.close()
            self.adapter = None

    def on_input_changed(self, event: Input.Changed) -> None:
        # programmatic updates after undo/redo arrive here too; the store
        # drops them as equal writes
        if self.adapter:
            self.adapter.handle_edit(event.value)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if not self.adapter:
            return
        if event.button.id == "undo":
            self.adapter.handle_undo()
        elif event.button.id == "redo":
            self.adapter.handle_redo()
        elif event.button.id == "clear":
            self.adapter.handle_clear()

    def action_undo(self) -> None:
        if self.adapter:
            self.adapter.handle_undo()

    def action_redo(self) -> None:
        if self.adapter:
            self.adapter.handle_redo()

    def _update_value(self, value: object) -> None:
        self._state.value_text = str(value)
        self.query_one("#current-value", Static).update(
            f"Current value: '{self._state.value_text}'"
        )
        field = self.query_one("#input", Input)
        if field.value != self._state.value_text:
            field.value = self._state.value_text

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        self.query_one("#status-line", Static).update(status)

    def _set_enabled(self, selector: str, enabled: bool) -> None:
        self.query_one(selector, Button).disabled = not enabled


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    defaults = StateConfig.from_env()
    parser = argparse.ArgumentParser(description="Run the undoable state demo.")
    parser.add_argument(
        "--max-history",
        type=int,
        default=defaults.max_history,
        help=(
            "Number of undo steps to keep "
            f"(env UNDOABLE_STATE_MAX_HISTORY, default: {defaults.max_history})"
        ),
    )
    parser.add_argument(
        "--initial",
        default="",
        help="Initial text of the field (default: empty)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    try:
        config = StateConfig(max_history=args.max_history).validate()
    except InvalidConfiguration as exc:
        raise SystemExit(f"error: {exc}") from exc
    app = UndoSampleApp(config=config, initial=args.initial)
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
