from __future__ import annotations

import random
from typing import Any, Dict, List, Tuple

import pytest

from undoable_state import (
    InvalidConfiguration,
    StateConfig,
    UndoableState,
    remember_undoable_state,
)


def make_state(*values: str, initial: str = "A", max_history: int = 50) -> UndoableState[str]:
    state = UndoableState(initial, max_history=max_history)
    for value in values:
        state.value = value
    return state


def assert_invariants(state: UndoableState[Any]) -> None:
    history_size, future_size = state.sizes()
    assert history_size <= state.max_history
    assert state.can_undo == (history_size > 0)
    assert state.can_redo == (future_size > 0)
    assert state.can_undo_state.value == state.can_undo
    assert state.can_redo_state.value == state.can_redo


def test_creates_with_initial_state() -> None:
    state = UndoableState("initial")

    assert state.value == "initial"
    assert state.state.value == "initial"
    assert state.can_undo is False
    assert state.can_redo is False
    assert state.sizes() == (0, 0)
    assert state.max_history == 50


def test_literal_scenario() -> None:
    state = UndoableState("A", max_history=50)

    state.set_value_sync("B")
    assert (state.value, state.past, state.future) == ("B", ("A",), ())

    state.set_value_sync("C")
    assert (state.value, state.past, state.future) == ("C", ("A", "B"), ())

    state.undo_sync()
    assert (state.value, state.past, state.future) == ("B", ("A",), ("C",))

    state.undo_sync()
    # future lists the next redo target first
    assert (state.value, state.past, state.future) == ("A", (), ("B", "C"))
    assert state.can_undo is False

    state.redo_sync()
    assert (state.value, state.past, state.future) == ("B", ("A",), ("C",))
    assert state.can_redo is True

    state.set_value_sync("D")
    assert (state.value, state.past, state.future) == ("D", ("A", "B"), ())
    assert state.can_redo is False

    state.clear()
    assert (state.value, state.past, state.future) == ("D", (), ())
    assert state.can_undo is False
    assert state.can_redo is False


def test_respects_maximum_history_size() -> None:
    state = UndoableState(0, max_history=3)

    for i in range(1, 6):
        state.value = i

    assert state.value == 5
    assert state.history_size == 3

    restored = []
    for _ in range(3):
        state.undo_sync()
        restored.append(state.value)

    assert restored == [4, 3, 2]
    assert state.can_undo is False


def test_duplicate_value_is_ignored() -> None:
    state = make_state("B")
    notifications: List[object] = []
    state.state.subscribe(notifications.append)
    state.can_undo_state.subscribe(notifications.append)
    state.can_redo_state.subscribe(notifications.append)

    state.value = "B"

    assert state.value == "B"
    assert state.past == ("A",)
    assert state.future == ()
    assert notifications == []


def test_custom_equality_check() -> None:
    state = UndoableState(
        "Hello", equality_check=lambda a, b: a.lower() == b.lower()
    )

    state.value = "HELLO"
    assert state.can_undo is False
    assert state.value == "Hello"

    state.value = "World"
    assert state.can_undo is True
    assert state.value == "World"


def test_new_value_invalidates_redo() -> None:
    state = make_state("B", "C")
    state.undo_sync()
    assert state.can_redo is True

    state.value = "D"

    assert state.can_redo is False
    assert state.future_size == 0
    state.undo_sync()
    assert state.value == "B"
    state.redo_sync()
    assert state.value == "D"


def test_operations_on_empty_history_are_noops() -> None:
    state = UndoableState("Test")
    calls: List[object] = []
    state.state.subscribe(calls.append)

    state.undo_sync()
    state.redo_sync()
    state.clear()

    assert state.value == "Test"
    assert state.sizes() == (0, 0)
    assert calls == []


def test_clear_keeps_current_value() -> None:
    state = make_state("B", "C")
    state.undo_sync()
    values: List[str] = []
    flags: List[Tuple[str, bool]] = []
    state.state.subscribe(values.append)
    state.can_undo_state.subscribe(lambda flag: flags.append(("undo", flag)))
    state.can_redo_state.subscribe(lambda flag: flags.append(("redo", flag)))

    state.clear()

    assert state.value == "B"
    assert state.sizes() == (0, 0)
    assert values == []
    assert sorted(flags) == [("redo", False), ("undo", False)]


def test_undo_then_redo_round_trip() -> None:
    rng = random.Random(7)
    state: UndoableState[int] = UndoableState(0, max_history=5)
    for step in range(1, 40):
        state.value = step
        if state.can_undo and rng.random() < 0.5:
            before = (state.value, state.past, state.future)
            state.undo_sync()
            state.redo_sync()
            assert (state.value, state.past, state.future) == before


@pytest.mark.parametrize("seed", [1, 2, 3, 4])
def test_invariants_hold_for_random_operations(seed: int) -> None:
    rng = random.Random(seed)
    state: UndoableState[int] = UndoableState(0, max_history=4)

    for _ in range(300):
        op = rng.choice(["set", "set", "undo", "redo", "clear"])
        if op == "set":
            state.set_value_sync(rng.randint(0, 6))
        elif op == "undo":
            state.undo_sync()
        elif op == "redo":
            state.redo_sync()
        else:
            state.clear()
        assert_invariants(state)


def test_observers_see_post_mutation_state() -> None:
    state = make_state("B")
    seen: List[Dict[str, object]] = []

    def snapshot(_value: object) -> None:
        seen.append(
            {
                "value": state.state.value,
                "can_undo": state.can_undo_state.value,
                "can_redo": state.can_redo_state.value,
                "sizes": state.sizes(),
            }
        )

    state.state.subscribe(snapshot)
    state.can_undo_state.subscribe(snapshot)
    state.can_redo_state.subscribe(snapshot)

    state.undo_sync()

    expected = {"value": "A", "can_undo": False, "can_redo": True, "sizes": (0, 1)}
    assert len(seen) == 3
    assert all(entry == expected for entry in seen)


def test_flag_cells_only_notify_on_flip() -> None:
    state = make_state("B")
    undo_flags: List[bool] = []
    state.can_undo_state.subscribe(undo_flags.append)

    state.value = "C"
    state.value = "D"
    state.undo_sync()
    state.undo_sync()
    state.undo_sync()

    assert undo_flags == [False]


@pytest.mark.parametrize("max_history", [0, -1, -50])
def test_rejects_non_positive_max_history(max_history: int) -> None:
    with pytest.raises(InvalidConfiguration) as excinfo:
        UndoableState("test", max_history=max_history)

    assert excinfo.value.max_history == max_history
    assert isinstance(excinfo.value, ValueError)


def test_rejects_non_integer_max_history() -> None:
    with pytest.raises(InvalidConfiguration):
        UndoableState("test", max_history=True)  # type: ignore[arg-type]
    with pytest.raises(InvalidConfiguration):
        UndoableState("test", max_history=2.5)  # type: ignore[arg-type]


def test_accepts_single_entry_history() -> None:
    state = make_state("B", "C", max_history=1)

    assert state.past == ("B",)


def test_from_config() -> None:
    config = StateConfig(max_history=2, equality_check=lambda a, b: a.strip() == b.strip())
    state = UndoableState.from_config("a", config)

    state.value = " a "
    assert state.can_undo is False
    state.value = "b"
    state.value = "c"
    state.value = "d"
    assert state.past == ("b", "c")


def test_repr_includes_sizes() -> None:
    state = make_state("Updated", initial="Test")
    state.undo_sync()

    text = repr(state)

    assert "Test" in text
    assert "history_size=0" in text
    assert "future_size=1" in text


def test_remember_returns_same_store_for_key() -> None:
    scope: Dict[object, UndoableState[Any]] = {}

    first = remember_undoable_state(scope, "editor", "")
    first.value = "typed"
    again = remember_undoable_state(scope, "editor", "")

    assert again is first
    assert again.value == "typed"
    assert remember_undoable_state(scope, "other", "") is not first


def test_remember_rebuilds_when_max_history_changes() -> None:
    scope: Dict[object, UndoableState[Any]] = {}
    first = remember_undoable_state(scope, "editor", "", max_history=5)

    second = remember_undoable_state(scope, "editor", "", max_history=10)

    assert second is not first
    assert second.max_history == 10
    assert scope["editor"] is second


def test_remember_rebuilds_when_initial_value_changes() -> None:
    scope: Dict[object, UndoableState[Any]] = {}
    first = remember_undoable_state(scope, "editor", "draft")
    first.value = "typed"

    second = remember_undoable_state(scope, "editor", "other draft")

    assert second is not first
    assert second.value == "other draft"
    assert second.initial_value == "other draft"
    assert second.can_undo is False
    assert remember_undoable_state(scope, "editor", "other draft") is second


def test_failing_value_subscriber_still_publishes_flags() -> None:
    state = make_state("B")
    redo_flags: List[bool] = []
    undo_flags: List[bool] = []
    later_values: List[str] = []

    def explode(_value: str) -> None:
        raise RuntimeError("render failed")

    state.state.subscribe(explode)
    state.state.subscribe(later_values.append)
    state.can_undo_state.subscribe(undo_flags.append)
    state.can_redo_state.subscribe(redo_flags.append)

    with pytest.raises(RuntimeError, match="render failed"):
        state.undo_sync()

    assert state.value == "A"
    assert later_values == ["A"]
    assert undo_flags == [False]
    assert redo_flags == [True]
