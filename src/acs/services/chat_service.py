"""Chat session service."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from result import Err, Ok, Result

from acs.data.classifier import classify, classify_log
from acs.errors import SessionNotFoundError
from acs.models.events import Error, Event
from acs.models.sessions import SessionGroups, SessionMetadata
from acs.models.transcript import Transcript
from acs.services.live_stream import LiveStreamController, new_message_id
from acs.services.reconstructor import reconstruct

if TYPE_CHECKING:
    from acs.config import Config
    from acs.data.protocols import BackendProtocol, UiSinkProtocol

logger = logging.getLogger(__name__)


class ChatSessionService:
    """Drives one chat session against a backend and a UI sink."""

    def __init__(
        self,
        backend: BackendProtocol,
        sink: UiSinkProtocol,
        config: Config,
        *,
        id_factory: Callable[[], str] = new_message_id,
    ) -> None:
        self._backend = backend
        self._sink = sink
        self._config = config
        self._controller = LiveStreamController(
            sink, internal_tools=config.internal_tools, id_factory=id_factory
        )

    @property
    def controller(self) -> LiveStreamController:
        return self._controller

    @property
    def is_generating(self) -> bool:
        return self._controller.is_streaming

    def handle_raw(self, raw: Any) -> Event:
        """Classify one live backend event and apply it."""
        event = classify(raw)
        self._controller.handle(event)
        return event

    async def pump(self) -> int:
        """Apply backend events until the stream ends. Returns the event count."""
        count = 0
        async for raw in self._backend.events():
            self.handle_raw(raw)
            count += 1
        return count

    async def send(self, prompt: str, attachments: Sequence[str] = ()) -> Result[str, str]:
        """Open the assistant message and hand the prompt to the backend.

        Returns:
            Ok with the assistant message id, or Err if a generation is running
            or the backend rejected the prompt.
        """
        if self._controller.is_streaming:
            return Err("A response is still being generated")

        message_id = self._controller.begin_message()
        try:
            await self._backend.send(prompt, list(attachments))
        except Exception as exc:
            logger.warning("Failed to send message: %s", exc)
            self._controller.handle(Error(message=str(exc) or "Failed to send message"))
            return Err(f"Failed to send message: {exc}")
        return Ok(message_id)

    async def abort(self) -> Result[None, str]:
        """Ask the backend to stop; the terminal idle/error event arrives later."""
        try:
            await self._backend.abort()
        except Exception as exc:
            logger.warning("Failed to stop generation: %s", exc)
            return Err(f"Failed to stop generation: {exc}")
        return Ok(None)

    def new_session(self) -> None:
        self._controller.reset()

    async def resume(self, session_id: str, model_id: str | None = None) -> Result[Transcript, str]:
        """Replace live state with the reconstructed transcript of a stored session.

        Returns:
            Ok with the transcript, or Err if the log could not be fetched. Nothing
            is sent to the UI on failure.
        """
        self._controller.reset()
        try:
            raw_log = await self._backend.get_full_log(session_id)
        except SessionNotFoundError as exc:
            return Err(str(exc))
        except Exception as exc:
            logger.warning("Failed to load session %s: %s", session_id, exc)
            return Err(f"Failed to load session {session_id}: {exc}")

        transcript = reconstruct(
            classify_log(raw_log),
            session_id=session_id,
            default_model=model_id,
            internal_tools=self._config.internal_tools,
        )
        self._sink.transcript_ready(transcript.messages)
        if transcript.last_model:
            # Always resync: the selector may still show the caller's model.
            self._controller.sync_model(transcript.last_model, force=True)
        return Ok(transcript)

    async def select_model(self, model_id: str) -> Result[None, str]:
        """Start a fresh backend session on another model and show it in the UI."""
        selector = getattr(self._backend, "select_model", None)
        if selector is not None:
            try:
                await selector(model_id)
            except Exception as exc:
                logger.warning("Failed to switch to model %s: %s", model_id, exc)
                return Err(f"Failed to switch to model {model_id}: {exc}")
        self._controller.reset()
        self._controller.sync_model(model_id, force=True)
        return Ok(None)

    async def list_sessions(self, now: datetime | None = None) -> Result[SessionGroups, str]:
        """List stored sessions split into recent and older groups."""
        lister = getattr(self._backend, "list_sessions", None)
        if lister is None:
            return Err("Backend does not support listing sessions")
        try:
            sessions = await lister()
        except Exception as exc:
            return Err(f"Failed to list sessions: {exc}")
        return Ok(group_sessions(sessions, self._config.recent_session_days, now=now))


def group_sessions(
    sessions: Sequence[SessionMetadata],
    recent_days: int,
    *,
    now: datetime | None = None,
) -> SessionGroups:
    """Split sessions on modification time, newest first within each group."""
    cutoff = (now or datetime.now(UTC)) - timedelta(days=recent_days)
    ordered = sorted(sessions, key=lambda s: s.modified_time, reverse=True)
    return SessionGroups(
        recent=[s for s in ordered if s.modified_time >= cutoff],
        other=[s for s in ordered if s.modified_time < cutoff],
    )
