"""Live stream controller.

Consumes classified events one at a time, in arrival order, and turns them
into UI updates for the single assistant message currently being generated.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable
from enum import Enum
from typing import TYPE_CHECKING

from acs.models.events import (
    Error,
    Event,
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
from acs.services.tool_pairing import ToolPairingTable

if TYPE_CHECKING:
    from acs.data.protocols import UiSinkProtocol

logger = logging.getLogger(__name__)


class StreamState(Enum):
    IDLE = "idle"
    STREAMING = "streaming"


def new_message_id() -> str:
    return f"msg_{uuid.uuid4().hex[:12]}"


class LiveStreamController:
    """Per-session state machine for one in-flight assistant message.

    ``begin_message`` moves IDLE -> STREAMING; an ``idle`` or ``error`` event
    moves back to IDLE. At most one message is open at any time, and text
    events that arrive while IDLE are dropped rather than reopening a closed
    message.
    """

    def __init__(
        self,
        sink: UiSinkProtocol,
        *,
        internal_tools: Iterable[str] = (),
        id_factory: Callable[[], str] = new_message_id,
    ) -> None:
        self._sink = sink
        self._internal_tools = frozenset(internal_tools)
        self._id_factory = id_factory
        self._tools = ToolPairingTable()
        self._state = StreamState.IDLE
        self._message_id: str | None = None
        self._text = ""
        self._reasoning = ""
        self._current_model: str | None = None
        self._displayed_model: str | None = None

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def is_streaming(self) -> bool:
        return self._state is StreamState.STREAMING

    @property
    def current_message_id(self) -> str | None:
        return self._message_id

    @property
    def current_model(self) -> str | None:
        return self._current_model

    @property
    def text(self) -> str:
        """Text of the open message as currently displayed."""
        return self._text

    @property
    def pending_tool_calls(self) -> int:
        return len(self._tools)

    def begin_message(self) -> str:
        """Open the assistant message for a new generation."""
        if self._message_id is not None:
            logger.warning(
                "Protocol violation: message %s is still streaming; not opening another",
                self._message_id,
            )
            return self._message_id

        self._message_id = self._id_factory()
        self._state = StreamState.STREAMING
        self._text = ""
        self._reasoning = ""
        self._sink.open_message(self._message_id, "assistant")
        return self._message_id

    def handle(self, event: Event) -> None:
        """Process one event to completion."""
        match event:
            case MessageDelta():
                self._on_delta(event)
            case MessageComplete():
                self._on_complete(event)
            case ReasoningDelta() | ReasoningComplete():
                self._on_reasoning(event)
            case ToolStart():
                self._on_tool_start(event)
            case ToolComplete():
                self._on_tool_complete(event)
            case Idle():
                self._on_idle()
            case Error():
                self._on_error(event)
            case ModelChanged():
                self.sync_model(event.new_model)
            case Usage():
                if event.model:
                    self.sync_model(event.model)
                if event.token_count is not None:
                    self._sink.usage_update(event.token_count)
            case SessionStart():
                if event.model:
                    self.sync_model(event.model)
            case UserMessage() | Unrecognized():
                pass

    def sync_model(self, model: str, *, force: bool = False) -> None:
        """Record the active model; notify the UI only when it changes unless forced."""
        self._current_model = model
        if force or model != self._displayed_model:
            self._displayed_model = model
            self._sink.model_changed(model)

    def reset(self) -> None:
        """Drop the open message and every cached tool start."""
        if self._message_id is not None:
            logger.debug("Discarding open message %s", self._message_id)
        self._tools.clear()
        self._message_id = None
        self._state = StreamState.IDLE
        self._text = ""
        self._reasoning = ""

    def _on_delta(self, event: MessageDelta) -> None:
        if self._message_id is None:
            logger.debug("Dropping delta received while idle")
            return
        if not event.text:
            return
        self._text += event.text
        self._sink.append_text(self._message_id, event.text)

    def _on_complete(self, event: MessageComplete) -> None:
        if self._message_id is None:
            logger.debug("Dropping message completion received while idle")
            return
        self._text = event.text
        self._sink.set_full_text(self._message_id, event.text)
        self._sink.stream_end(self._message_id)

    def _on_reasoning(self, event: ReasoningDelta | ReasoningComplete) -> None:
        if self._message_id is None:
            logger.debug("Dropping reasoning received while idle")
            return
        complete = isinstance(event, ReasoningComplete)
        if complete:
            self._reasoning = event.text or self._reasoning
        else:
            self._reasoning += event.text
        self._sink.set_reasoning(self._message_id, self._reasoning, complete)

    def _on_tool_start(self, event: ToolStart) -> None:
        if event.tool_name in self._internal_tools:
            return
        if self._message_id is None:
            logger.warning("Tool %s started while no message is open", event.call_id)
            return
        execution = self._tools.observe_start(event.call_id, event.tool_name, event.arguments)
        self._sink.set_tool_status(self._message_id, execution)

    def _on_tool_complete(self, event: ToolComplete) -> None:
        execution = self._tools.observe_complete(
            event.call_id, event.success, event.result, event.error
        )
        if execution is None:
            logger.debug("Dropping completion for unknown tool call %s", event.call_id)
            return
        if self._message_id is None:
            return
        self._sink.set_tool_status(self._message_id, execution)

    def _on_idle(self) -> None:
        if self._message_id is None:
            logger.debug("Ignoring idle while no generation is running")
            return
        self._sink.generation_complete()
        self.reset()

    def _on_error(self, event: Error) -> None:
        self._sink.error(event.message)
        self._sink.generation_complete()
        self.reset()
