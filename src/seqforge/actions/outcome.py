"""Action lifecycle states and outcomes."""

import logging
from enum import StrEnum

from pydantic import BaseModel, Field

from seqforge.generation.errors import ErrorKind

logger = logging.getLogger(__name__)


class ActionState(StrEnum):
    """States of one action invocation."""

    UNVALIDATED = "unvalidated"
    VALIDATED = "validated"
    EXECUTING = "executing"
    COMPLETED = "completed"
    REJECTED = "rejected"
    FAILED = "failed"


TERMINAL_STATES = frozenset({ActionState.COMPLETED, ActionState.REJECTED, ActionState.FAILED})

_TRANSITIONS: dict[ActionState, frozenset[ActionState]] = {
    ActionState.UNVALIDATED: frozenset({ActionState.VALIDATED}),
    ActionState.VALIDATED: frozenset({ActionState.EXECUTING}),
    ActionState.EXECUTING: TERMINAL_STATES,
}


class ActionRun:
    """State of a single invocation. Created per message, never shared.

    Raises RuntimeError on a transition the lifecycle does not allow.
    """

    def __init__(self, conversation_id: str) -> None:
        self.conversation_id = conversation_id
        self.state = ActionState.UNVALIDATED
        self.history: list[ActionState] = [self.state]

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def transition(self, target: ActionState) -> None:
        allowed = _TRANSITIONS.get(self.state, frozenset())
        if target not in allowed:
            raise RuntimeError(f"Illegal action transition {self.state} -> {target}")
        logger.debug("Conversation %s: %s -> %s", self.conversation_id, self.state, target)
        self.state = target
        self.history.append(target)


class OutcomeStatus(StrEnum):
    """How an invocation ended, as seen by the user."""

    HANDLED = "handled"
    REJECTED = "rejected"
    FAILED = "failed"


class ActionOutcome(BaseModel):
    """Terminal result of an invocation.

    Attributes:
        status: Handled, rejected or failed.
        text: User-facing text; this is what gets persisted.
        error_kind: Kind of failure for rejected and failed outcomes.
        detail: Internal diagnostic, logged but never persisted.
    """

    status: OutcomeStatus
    text: str
    error_kind: ErrorKind | None = None
    detail: str | None = Field(default=None, repr=False)

    @classmethod
    def handled(cls, text: str) -> "ActionOutcome":
        return cls(status=OutcomeStatus.HANDLED, text=text)

    @classmethod
    def rejected(cls, kind: ErrorKind, text: str, detail: str | None = None) -> "ActionOutcome":
        return cls(status=OutcomeStatus.REJECTED, text=text, error_kind=kind, detail=detail)

    @classmethod
    def failed(cls, kind: ErrorKind, text: str, detail: str | None = None) -> "ActionOutcome":
        return cls(status=OutcomeStatus.FAILED, text=text, error_kind=kind, detail=detail)

    @property
    def state(self) -> ActionState:
        """Terminal ActionState matching this outcome."""
        return {
            OutcomeStatus.HANDLED: ActionState.COMPLETED,
            OutcomeStatus.REJECTED: ActionState.REJECTED,
            OutcomeStatus.FAILED: ActionState.FAILED,
        }[self.status]
