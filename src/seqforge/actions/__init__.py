"""Chat actions exposed to the hosting agent runtime."""

from seqforge.actions.context import (
    ActionContext,
    MemorySink,
    Message,
    RuntimeContext,
    StreamMemory,
)
from seqforge.actions.dispatcher import EvolveTraitsAction, GenerateSequenceAction
from seqforge.actions.outcome import ActionOutcome, ActionRun, ActionState, OutcomeStatus

__all__ = [
    "ActionContext",
    "ActionOutcome",
    "ActionRun",
    "ActionState",
    "EvolveTraitsAction",
    "GenerateSequenceAction",
    "MemorySink",
    "Message",
    "OutcomeStatus",
    "RuntimeContext",
    "StreamMemory",
]
