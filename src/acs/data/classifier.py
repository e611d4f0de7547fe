"""Backend event classifier.

Maps raw backend payloads (``{"type": ..., "data": {...}}`` mappings) onto the
closed set of event models. Never raises: anything it cannot make sense of
becomes :class:`~acs.models.events.Unrecognized`.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

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

logger = logging.getLogger(__name__)


def classify(raw: object) -> Event:
    """Classify one raw backend event."""
    if not isinstance(raw, Mapping):
        logger.debug("Ignoring non-mapping event: %r", type(raw).__name__)
        return Unrecognized(raw_type="")

    raw_type = _as_str(raw.get("type"))
    event_id = _as_str(raw.get("id"))
    data = raw.get("data")
    if not isinstance(data, Mapping):
        data = {}

    match raw_type:
        case "session.start":
            return SessionStart(
                event_id=event_id,
                model=_first_str(data, "selectedModel", "model") or None,
            )
        case "user.message":
            return UserMessage(event_id=event_id, text=_first_str(data, "content", "text"))
        case "assistant.message_delta":
            return MessageDelta(
                event_id=event_id, text=_first_str(data, "deltaContent", "content", "text")
            )
        case "assistant.message":
            return MessageComplete(event_id=event_id, text=_first_str(data, "content", "text"))
        case "assistant.reasoning_delta":
            return ReasoningDelta(
                event_id=event_id,
                reasoning_id=_as_str(data.get("reasoningId")),
                text=_first_str(data, "deltaContent", "content"),
            )
        case "assistant.reasoning":
            return ReasoningComplete(
                event_id=event_id,
                reasoning_id=_as_str(data.get("reasoningId")),
                text=_first_str(data, "content", "text"),
            )
        case "tool.execution_start":
            call_id = _first_str(data, "toolCallId", "callId", "id")
            if not call_id:
                logger.debug("tool start without call id: %s", event_id)
                return Unrecognized(event_id=event_id, raw_type=raw_type)
            return ToolStart(
                event_id=event_id,
                call_id=call_id,
                tool_name=_first_str(data, "toolName", "name") or "tool",
                arguments=parse_arguments(data.get("arguments")),
            )
        case "tool.execution_complete":
            call_id = _first_str(data, "toolCallId", "callId", "id")
            if not call_id:
                logger.debug("tool completion without call id: %s", event_id)
                return Unrecognized(event_id=event_id, raw_type=raw_type)
            error = _extract_error(data.get("error"))
            success = data.get("success")
            return ToolComplete(
                event_id=event_id,
                call_id=call_id,
                success=success if isinstance(success, bool) else error is None,
                result=_extract_result(data.get("result")),
                error=error,
            )
        case "session.model_change":
            new_model = _first_str(data, "newModel", "model")
            if not new_model:
                return Unrecognized(event_id=event_id, raw_type=raw_type)
            return ModelChanged(event_id=event_id, new_model=new_model)
        case "assistant.usage":
            return Usage(
                event_id=event_id,
                model=_as_str(data.get("model")) or None,
                token_count=_token_count(data),
            )
        case "session.idle":
            return Idle(event_id=event_id)
        case "session.error":
            return Error(
                event_id=event_id,
                message=_first_str(data, "message", "error") or "Unknown error",
            )
        case _:
            logger.debug("Unrecognized event type: %s", raw_type or "<missing>")
            return Unrecognized(event_id=event_id, raw_type=raw_type)


def classify_log(raw_events: Iterable[object]) -> list[Event]:
    """Classify a whole historical log, preserving order."""
    return [classify(raw) for raw in raw_events]


def parse_arguments(value: object) -> dict[str, Any]:
    """Parse tool arguments given as an object or a JSON string."""
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, str) and value.strip():
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            return {}
        if isinstance(parsed, dict):
            return parsed
    return {}


def _extract_result(value: object) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        for key in ("content", "detailedContent", "text"):
            text = value.get(key)
            if isinstance(text, str):
                return text
        return json.dumps(value, ensure_ascii=False, default=str)
    if value is None:
        return ""
    return str(value)


def _extract_error(value: object) -> str | None:
    if isinstance(value, str):
        return value or None
    if isinstance(value, Mapping):
        message = _as_str(value.get("message"))
        return message or "Tool failed"
    return None


def _token_count(data: Mapping[str, Any]) -> int | None:
    for key in ("tokenCount", "totalTokens"):
        value = _int(data.get(key))
        if value is not None:
            return value
    parts = [_int(data.get(key)) for key in ("inputTokens", "outputTokens")]
    counted = [part for part in parts if part is not None]
    return sum(counted) if counted else None


def _first_str(data: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def _as_str(value: object) -> str:
    return value if isinstance(value, str) else ""


def _int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return None
