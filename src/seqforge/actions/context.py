"""Interfaces between actions and the hosting agent runtime."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol, TextIO

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class Message(BaseModel):
    """An incoming chat message.

    Attributes:
        text: Message text as typed by the user.
        conversation_id: Conversation the outcome is written back to.
    """

    text: str = Field(default="", description="Message text")
    conversation_id: str = Field(description="Conversation the message belongs to")


class MemorySink(Protocol):
    """Persistence collaborator that stores action outcomes."""

    def write(self, outcome_text: str, conversation_id: str) -> None: ...


class ActionContext(Protocol):
    """What an action needs from the runtime: settings and somewhere to persist."""

    @property
    def memory(self) -> MemorySink: ...

    def get_setting(self, key: str) -> str | None: ...


@dataclass
class RuntimeContext:
    """Plain ActionContext backed by a settings mapping and a sink."""

    memory: MemorySink
    settings: Mapping[str, str] = field(default_factory=dict)

    def get_setting(self, key: str) -> str | None:
        return self.settings.get(key)


class StreamMemory:
    """MemorySink that writes each outcome as a line to a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def write(self, outcome_text: str, conversation_id: str) -> None:
        logger.debug("Writing outcome for conversation %s", conversation_id)
        self._stream.write(f"{outcome_text}\n")
        self._stream.flush()
