"""Protocol definitions for the backend and the UI boundary."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import Any, Literal, Protocol

from acs.models.sessions import SessionMetadata
from acs.models.transcript import Message, ToolExecution


class BackendProtocol(Protocol):
    """Assistant backend connection.

    ``send`` and ``abort`` are one-way: their effects are observed only
    through later items of ``events()``.
    """

    def events(self) -> AsyncIterator[Any]: ...

    async def send(self, prompt: str, attachments: Sequence[str] = ()) -> None: ...

    async def abort(self) -> None: ...

    async def get_full_log(self, session_id: str) -> list[Any]: ...


class SessionListingProtocol(Protocol):
    """Optional backend capability: enumerate stored sessions."""

    async def list_sessions(self) -> list[SessionMetadata]: ...


class ModelSelectionProtocol(Protocol):
    """Optional backend capability: restart the session on another model."""

    async def select_model(self, model_id: str) -> None: ...


class UiSinkProtocol(Protocol):
    """Receiver of ordered UI updates."""

    def open_message(self, message_id: str, role: Literal["user", "assistant"]) -> None: ...

    def append_text(self, message_id: str, chunk: str) -> None: ...

    def set_full_text(self, message_id: str, text: str) -> None: ...

    def stream_end(self, message_id: str) -> None: ...

    def set_tool_status(self, message_id: str, execution: ToolExecution) -> None: ...

    def set_reasoning(self, message_id: str, text: str, complete: bool) -> None: ...

    def usage_update(self, tokens: int) -> None: ...

    def generation_complete(self) -> None: ...

    def error(self, message: str) -> None: ...

    def model_changed(self, model_id: str) -> None: ...

    def transcript_ready(self, messages: list[Message]) -> None: ...
