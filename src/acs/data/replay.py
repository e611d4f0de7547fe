"""Backend that replays recorded session logs as a live event stream."""

from __future__ import annotations

from collections import deque
from collections.abc import AsyncIterator, Sequence
from pathlib import Path
from typing import Any

from acs.data.event_log import read_event_log
from acs.data.store import SessionLogStore
from acs.models.sessions import SessionMetadata

_IDLE_EVENT: dict[str, Any] = {"type": "session.idle", "data": {}}
_TERMINAL_TYPES = frozenset({"session.idle", "session.error"})


class ReplayBackend:
    """Serves a recorded log one prompt at a time.

    Each ``send`` queues the events recorded after the next ``user.message``
    of the log; ``events()`` drains that queue. Full logs and session lists
    come from the local store.
    """

    def __init__(self, store: SessionLogStore, raw_log: Sequence[dict[str, Any]] = ()) -> None:
        self._store = store
        self._segments = deque(_split_by_prompt(raw_log))
        self._queue: deque[dict[str, Any]] = deque()
        self.sent: list[tuple[str, list[str]]] = []
        self.abort_requested = False
        self.selected_model: str | None = None

    @classmethod
    def from_file(cls, store: SessionLogStore, path: Path) -> ReplayBackend:
        return cls(store, read_event_log(path))

    @property
    def prompts(self) -> list[str]:
        """Prompts still waiting to be replayed, in log order."""
        return [prompt for prompt, _ in self._segments]

    async def send(self, prompt: str, attachments: Sequence[str] = ()) -> None:
        self.sent.append((prompt, list(attachments)))
        self.abort_requested = False
        if not self._segments:
            self._queue.append(
                {"type": "session.error", "data": {"message": "No recorded response left"}}
            )
            return
        _, events = self._segments.popleft()
        self._queue.extend(events)
        if not any(event.get("type") in _TERMINAL_TYPES for event in events):
            # Truncated recording: finish the generation the way a live backend would.
            self._queue.append(_IDLE_EVENT)

    async def select_model(self, model_id: str) -> None:
        self.selected_model = model_id
        self._queue.clear()

    async def abort(self) -> None:
        self.abort_requested = True
        self._queue.clear()
        self._queue.append(_IDLE_EVENT)

    async def events(self) -> AsyncIterator[dict[str, Any]]:
        while self._queue:
            yield self._queue.popleft()

    async def get_full_log(self, session_id: str) -> list[dict[str, Any]]:
        return await self._store.get_full_log(session_id)

    async def list_sessions(self) -> list[SessionMetadata]:
        return await self._store.list_sessions()


def _split_by_prompt(
    raw_log: Sequence[dict[str, Any]],
) -> list[tuple[str, list[dict[str, Any]]]]:
    """Group a log into (prompt, events answering it) pairs.

    Events recorded before the first prompt are replayed with the first one.
    """
    segments: list[tuple[str, list[dict[str, Any]]]] = []
    preamble: list[dict[str, Any]] = []
    for raw in raw_log:
        if raw.get("type") == "user.message":
            data = raw.get("data")
            content = data.get("content") if isinstance(data, dict) else None
            prompt = content if isinstance(content, str) else ""
            segments.append((prompt, preamble))
            preamble = []
        elif segments:
            segments[-1][1].append(raw)
        else:
            preamble.append(raw)
    return segments
