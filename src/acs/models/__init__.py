"""Pydantic models for ACS."""

from acs.models.events import (
    Error,
    Event,
    EventKind,
    Idle,
    MessageComplete,
    MessageDelta,
    ModelChanged,
    ReasoningComplete,
    ReasoningDelta,
    SessionStart,
    ToolComplete,
    ToolStart,
    Unrecognized,
    Usage,
    UserMessage,
)
from acs.models.sessions import SessionGroups, SessionMetadata
from acs.models.transcript import Message, ToolExecution, ToolStatus, Transcript, Turn

__all__ = [
    "Error",
    "Event",
    "EventKind",
    "Idle",
    "Message",
    "MessageComplete",
    "MessageDelta",
    "ModelChanged",
    "ReasoningComplete",
    "ReasoningDelta",
    "SessionGroups",
    "SessionMetadata",
    "SessionStart",
    "ToolComplete",
    "ToolExecution",
    "ToolStart",
    "ToolStatus",
    "Transcript",
    "Turn",
    "Unrecognized",
    "Usage",
    "UserMessage",
]
