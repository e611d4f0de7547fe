"""Protocol definitions for services."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from result import Result

from acs.models.sessions import SessionGroups
from acs.models.transcript import Transcript


class ChatServiceProtocol(Protocol):
    """Interface for chat session operations."""

    @property
    def is_generating(self) -> bool: ...

    async def send(self, prompt: str, attachments: Sequence[str] = ()) -> Result[str, str]: ...

    async def abort(self) -> Result[None, str]: ...

    async def resume(
        self, session_id: str, model_id: str | None = None
    ) -> Result[Transcript, str]: ...

    async def select_model(self, model_id: str) -> Result[None, str]: ...

    async def list_sessions(self) -> Result[SessionGroups, str]: ...

    def new_session(self) -> None: ...
