"""Application saga – EditState machine and per-run bookkeeping."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from adt_saga.kernel.errors import SagaStateError
from adt_saga.kernel.types.refs import ObjectRef


class EditState(str, enum.Enum):
    """Lifecycle states of one edit saga run."""

    INIT = "INIT"
    VALIDATING = "VALIDATING"
    CREATED = "CREATED"
    LOCKED = "LOCKED"
    UPDATING = "UPDATING"
    CHECKED = "CHECKED"
    UNLOCKED = "UNLOCKED"
    ACTIVATING = "ACTIVATING"
    DONE = "DONE"
    ERROR = "ERROR"
    """Absorbing failure state, reachable from every non-terminal state."""


TERMINAL_STATES: frozenset[EditState] = frozenset({EditState.DONE, EditState.ERROR})

TRANSITIONS: dict[EditState, frozenset[EditState]] = {
    EditState.INIT: frozenset({EditState.VALIDATING, EditState.LOCKED, EditState.DONE}),
    EditState.VALIDATING: frozenset({EditState.CREATED, EditState.LOCKED}),
    EditState.CREATED: frozenset({EditState.LOCKED, EditState.ACTIVATING, EditState.DONE}),
    EditState.LOCKED: frozenset({EditState.UPDATING, EditState.CHECKED}),
    EditState.UPDATING: frozenset({EditState.CHECKED, EditState.UNLOCKED}),
    EditState.CHECKED: frozenset({EditState.UPDATING, EditState.UNLOCKED}),
    EditState.UNLOCKED: frozenset({EditState.ACTIVATING, EditState.DONE}),
    EditState.ACTIVATING: frozenset({EditState.DONE}),
    EditState.DONE: frozenset(),
    EditState.ERROR: frozenset(),
}


def can_transition(current: EditState, target: EditState) -> bool:
    if target is EditState.ERROR:
        return current not in TERMINAL_STATES
    return target in TRANSITIONS[current]


@dataclass
class EditRun:
    """Mutable record of one saga run: current state, history, finished steps."""

    operation: str
    ref: ObjectRef
    state: EditState = EditState.INIT
    history: list[tuple[EditState, EditState]] = field(default_factory=list)
    steps_completed: list[str] = field(default_factory=list)

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def advance(self, target: EditState) -> None:
        """Move to *target*; raise :class:`SagaStateError` if not allowed."""
        if not can_transition(self.state, target):
            raise SagaStateError(self.state.value, target.value)
        self.history.append((self.state, target))
        self.state = target

    def step_done(self, step: str) -> None:
        self.steps_completed.append(step)

    def fail(self) -> None:
        if not self.finished:
            self.advance(EditState.ERROR)


__all__ = ["EditRun", "EditState", "TERMINAL_STATES", "TRANSITIONS", "can_transition"]
