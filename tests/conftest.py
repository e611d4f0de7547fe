"""Shared fixtures for ACS tests."""

from __future__ import annotations

import itertools
import shutil
from collections.abc import AsyncIterator, Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from acs.config import Config
from acs.models.transcript import Message, ToolExecution

SAMPLE_EVENTS_PATH = Path(__file__).parent / "data" / "sample_events.jsonl"


class RecordingSink:
    """UI sink that records every call as a tuple, in order."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]

    def of(self, name: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == name]

    def open_message(self, message_id: str, role: str) -> None:
        self.calls.append(("open_message", message_id, role))

    def append_text(self, message_id: str, chunk: str) -> None:
        self.calls.append(("append_text", message_id, chunk))

    def set_full_text(self, message_id: str, text: str) -> None:
        self.calls.append(("set_full_text", message_id, text))

    def stream_end(self, message_id: str) -> None:
        self.calls.append(("stream_end", message_id))

    def set_tool_status(self, message_id: str, execution: ToolExecution) -> None:
        self.calls.append(("set_tool_status", message_id, execution))

    def set_reasoning(self, message_id: str, text: str, complete: bool) -> None:
        self.calls.append(("set_reasoning", message_id, text, complete))

    def usage_update(self, tokens: int) -> None:
        self.calls.append(("usage_update", tokens))

    def generation_complete(self) -> None:
        self.calls.append(("generation_complete",))

    def error(self, message: str) -> None:
        self.calls.append(("error", message))

    def model_changed(self, model_id: str) -> None:
        self.calls.append(("model_changed", model_id))

    def transcript_ready(self, messages: list[Message]) -> None:
        self.calls.append(("transcript_ready", messages))


class FakeBackend:
    """In-memory backend: queued live events plus stored full logs."""

    def __init__(self, logs: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self.logs = logs or {}
        self.live: list[dict[str, Any]] = []
        self.sent: list[tuple[str, list[str]]] = []
        self.abort_calls = 0
        self.send_error: Exception | None = None
        self.log_error: Exception | None = None

    def events(self) -> AsyncIterator[dict[str, Any]]:
        async def _iterate() -> AsyncIterator[dict[str, Any]]:
            while self.live:
                yield self.live.pop(0)

        return _iterate()

    async def send(self, prompt: str, attachments: Sequence[str] = ()) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((prompt, list(attachments)))

    async def abort(self) -> None:
        self.abort_calls += 1

    async def get_full_log(self, session_id: str) -> list[dict[str, Any]]:
        if self.log_error is not None:
            raise self.log_error
        return self.logs[session_id]


def raw(event_type: str, event_id: str = "", **data: Any) -> dict[str, Any]:
    """Build a raw backend event."""
    event: dict[str, Any] = {"type": event_type, "data": data}
    if event_id:
        event["id"] = event_id
    return event


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def id_factory() -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"msg-{next(counter)}"


@pytest.fixture
def sample_events_path() -> Path:
    """Path to the sample session event log."""
    return SAMPLE_EVENTS_PATH


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Config pointing at an empty temporary Copilot directory."""
    return Config(copilot_dir=tmp_path / ".copilot")


@pytest.fixture
def populated_config(test_config: Config) -> Config:
    """Config whose session-state directory holds the sample session twice."""
    state_dir = test_config.session_state_dir
    (state_dir / "sample-dir").mkdir(parents=True)
    shutil.copy(SAMPLE_EVENTS_PATH, state_dir / "sample-dir" / "events.jsonl")
    shutil.copy(SAMPLE_EVENTS_PATH, state_dir / "sample-flat.jsonl")
    return test_config
