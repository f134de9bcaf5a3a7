"""Construction-time options for undoable state containers."""

from __future__ import annotations

import operator
from dataclasses import dataclass, field
from typing import Any, Callable

from undoable_state.errors import InvalidConfiguration
from undoable_state.runtime.telemetry import env

DEFAULT_MAX_HISTORY = 50

EqualityCheck = Callable[[Any, Any], bool]


def validate_max_history(max_history: object) -> int:
    """Return ``max_history`` if it is a positive int, else raise."""

    if isinstance(max_history, bool) or not isinstance(max_history, int):
        raise InvalidConfiguration(
            f"max_history must be an integer, was {max_history!r}",
            max_history=max_history,
        )
    if max_history <= 0:
        raise InvalidConfiguration(
            f"max_history must be positive, was {max_history}",
            max_history=max_history,
        )
    return max_history


@dataclass(frozen=True, slots=True)
class StateConfig:
    max_history: int = DEFAULT_MAX_HISTORY
    equality_check: EqualityCheck = field(default=operator.eq)

    def validate(self) -> "StateConfig":
        validate_max_history(self.max_history)
        return self

    @classmethod
    def from_env(cls, *, equality_check: EqualityCheck = operator.eq) -> "StateConfig":
        """Read ``UNDOABLE_STATE_MAX_HISTORY``, falling back to the default."""

        raw = env("MAX_HISTORY")
        if raw is None or not raw.strip():
            return cls(equality_check=equality_check)
        try:
            max_history = int(raw)
        except ValueError as exc:
            raise InvalidConfiguration(
                f"UNDOABLE_STATE_MAX_HISTORY must be an integer, was {raw!r}",
                max_history=raw,
            ) from exc
        return cls(max_history=max_history, equality_check=equality_check).validate()


__all__ = ["DEFAULT_MAX_HISTORY", "EqualityCheck", "StateConfig", "validate_max_history"]
