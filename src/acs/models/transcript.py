"""Transcript-level models: tool executions, messages, turns."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, Field


class ToolStatus(StrEnum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ToolExecution(BaseModel):
    """One tool call, merged from its start and (optional) completion."""

    call_id: str
    tool_name: str
    arguments: dict[str, Any] = Field(default_factory=dict)
    status: ToolStatus = ToolStatus.PENDING
    result: str = ""
    error: str | None = None
    label: str = ""
    detail: str | None = None

    @property
    def is_resolved(self) -> bool:
        return self.status is not ToolStatus.PENDING


class Message(BaseModel):
    """A chat message as shown to the user."""

    id: str
    role: Literal["user", "assistant"]
    text: str = ""
    model: str | None = None
    tool_executions: list[ToolExecution] = Field(default_factory=list)
    reasoning: str | None = None


class Turn(BaseModel):
    """One user prompt plus the assistant activity answering it."""

    user_message: Message | None = None
    assistant_messages: list[Message] = Field(default_factory=list)
    tool_executions: list[ToolExecution] = Field(default_factory=list)
    active_model: str | None = None


class Transcript(BaseModel):
    """Finished result of reconstructing a session log."""

    session_id: str = ""
    turns: list[Turn] = Field(default_factory=list)
    messages: list[Message] = Field(default_factory=list)
    last_model: str | None = None
