"""Normalized backend event models.

Every backend payload is classified into exactly one of these models. The
``kind`` field is the discriminator; ``Unrecognized`` is the passthrough arm
for backend event types this package does not know about.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class EventKind(StrEnum):
    """Closed set of semantic event kinds."""

    SESSION_START = "session_start"
    USER_MESSAGE = "user_message"
    MESSAGE_DELTA = "message_delta"
    MESSAGE_COMPLETE = "message_complete"
    REASONING_DELTA = "reasoning_delta"
    REASONING_COMPLETE = "reasoning_complete"
    TOOL_START = "tool_start"
    TOOL_COMPLETE = "tool_complete"
    MODEL_CHANGED = "model_changed"
    USAGE = "usage"
    IDLE = "idle"
    ERROR = "error"
    UNRECOGNIZED = "unrecognized"


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    event_id: str = ""


class SessionStart(_Event):
    """Session opened; carries the model selected at creation time."""

    kind: Literal[EventKind.SESSION_START] = EventKind.SESSION_START
    model: str | None = None


class UserMessage(_Event):
    """A user prompt. Only present in historical logs."""

    kind: Literal[EventKind.USER_MESSAGE] = EventKind.USER_MESSAGE
    text: str = ""


class MessageDelta(_Event):
    """Incremental assistant text."""

    kind: Literal[EventKind.MESSAGE_DELTA] = EventKind.MESSAGE_DELTA
    text: str = ""


class MessageComplete(_Event):
    """Full assistant text; supersedes any accumulated deltas."""

    kind: Literal[EventKind.MESSAGE_COMPLETE] = EventKind.MESSAGE_COMPLETE
    text: str = ""


class ReasoningDelta(_Event):
    kind: Literal[EventKind.REASONING_DELTA] = EventKind.REASONING_DELTA
    reasoning_id: str = ""
    text: str = ""


class ReasoningComplete(_Event):
    kind: Literal[EventKind.REASONING_COMPLETE] = EventKind.REASONING_COMPLETE
    reasoning_id: str = ""
    text: str = ""


class ToolStart(_Event):
    """A tool call began."""

    kind: Literal[EventKind.TOOL_START] = EventKind.TOOL_START
    call_id: str
    tool_name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolComplete(_Event):
    """A tool call finished. Does not repeat the tool name or arguments."""

    kind: Literal[EventKind.TOOL_COMPLETE] = EventKind.TOOL_COMPLETE
    call_id: str
    success: bool = True
    result: str = ""
    error: str | None = None


class ModelChanged(_Event):
    kind: Literal[EventKind.MODEL_CHANGED] = EventKind.MODEL_CHANGED
    new_model: str


class Usage(_Event):
    """Per-reply accounting; also reports the model that produced the reply."""

    kind: Literal[EventKind.USAGE] = EventKind.USAGE
    model: str | None = None
    token_count: int | None = None


class Idle(_Event):
    """Generation finished for the session."""

    kind: Literal[EventKind.IDLE] = EventKind.IDLE


class Error(_Event):
    """Terminal failure for the current turn."""

    kind: Literal[EventKind.ERROR] = EventKind.ERROR
    message: str = ""


class Unrecognized(_Event):
    """Backend event type this package does not handle."""

    kind: Literal[EventKind.UNRECOGNIZED] = EventKind.UNRECOGNIZED
    raw_type: str = ""


Event = Annotated[
    SessionStart
    | UserMessage
    | MessageDelta
    | MessageComplete
    | ReasoningDelta
    | ReasoningComplete
    | ToolStart
    | ToolComplete
    | ModelChanged
    | Usage
    | Idle
    | Error
    | Unrecognized,
    Field(discriminator="kind"),
]
