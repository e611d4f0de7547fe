"""Transcript reconstruction for resumed sessions.

Replays a complete historical event log in a single pass and regroups it into
conversation turns. Each turn gets its own tool pairing table, so a call id
reused by a later turn never merges with an earlier execution.

Model attribution: ``model_changed`` and ``usage`` both move the running
model forward in event order, and each assistant reply takes the running
model at the point it appears. A ``usage`` event additionally re-attributes
the replies of the current turn emitted since the previous ``usage`` event,
because usage is reported per reply, after the reply. A ``model_changed``
never rewrites earlier replies.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from acs.models.events import (
    Event,
    MessageComplete,
    MessageDelta,
    ModelChanged,
    ReasoningComplete,
    ReasoningDelta,
    SessionStart,
    ToolComplete,
    ToolStart,
    Usage,
    UserMessage,
)
from acs.models.transcript import Message, ToolExecution, Transcript, Turn
from acs.services.tool_pairing import ToolPairingTable

logger = logging.getLogger(__name__)

_ASSISTANT_EVENTS = (
    MessageDelta,
    MessageComplete,
    ReasoningDelta,
    ReasoningComplete,
    ToolStart,
    ToolComplete,
)


@dataclass
class _Reply:
    event_id: str
    text: str
    model: str | None
    reasoning: str | None = None


@dataclass
class _TurnState:
    user_event_id: str | None = None
    user_text: str | None = None
    replies: list[_Reply] = field(default_factory=list)
    tools: ToolPairingTable = field(default_factory=ToolPairingTable)
    executions: dict[str, ToolExecution] = field(default_factory=dict)
    unattributed: list[_Reply] = field(default_factory=list)
    streamed_text: str = ""
    streamed_model: str | None = None
    reasoning: str = ""


@dataclass
class _WalkState:
    session_id: str
    internal_tools: frozenset[str]
    model: str | None
    turn: _TurnState | None = None
    closed: list[tuple[_TurnState, str | None]] = field(default_factory=list)

    def open_turn(self, user: UserMessage | None = None) -> _TurnState:
        self.close_turn()
        self.turn = _TurnState(
            user_event_id=user.event_id if user else None,
            user_text=user.text if user else None,
        )
        return self.turn

    def current_turn(self) -> _TurnState:
        if self.turn is None:
            return self.open_turn()
        return self.turn

    def close_turn(self) -> None:
        turn = self.turn
        if turn is None:
            return
        if turn.streamed_text:
            # Deltas never followed by a complete message: the log was truncated.
            turn.replies.append(
                _Reply(
                    event_id="",
                    text=turn.streamed_text,
                    model=turn.streamed_model,
                    reasoning=turn.reasoning or None,
                )
            )
        unresolved = turn.tools.pending()
        if unresolved:
            logger.debug("%d tool call(s) never completed in turn", len(unresolved))
        turn.tools.clear()
        self.closed.append((turn, self.model))
        self.turn = None


def reconstruct(
    events: Sequence[Event],
    *,
    session_id: str = "",
    default_model: str | None = None,
    internal_tools: Iterable[str] = (),
) -> Transcript:
    """Rebuild a finished transcript from a complete event log.

    The result depends only on the arguments: reconstructing the same log
    twice yields equal transcripts.
    """
    state = _WalkState(
        session_id=session_id,
        internal_tools=frozenset(internal_tools),
        model=_seed_model(events, default_model),
    )

    for event in events:
        _apply(state, event)
    state.close_turn()

    return _flatten(state)


def _seed_model(events: Sequence[Event], default_model: str | None) -> str | None:
    if not events:
        return default_model
    match events[0]:
        case SessionStart(model=model) if model:
            return model
        case Usage(model=model) if model:
            return model
        case ModelChanged(new_model=model):
            return model
    return default_model


def _apply(state: _WalkState, event: Event) -> None:
    match event:
        case UserMessage():
            state.open_turn(event)
        case ModelChanged():
            state.model = event.new_model
        case Usage():
            if event.model:
                state.model = event.model
                if state.turn is not None:
                    for reply in state.turn.unattributed:
                        reply.model = event.model
                    state.turn.unattributed.clear()
        case _ if isinstance(event, _ASSISTANT_EVENTS):
            _apply_assistant(state, state.current_turn(), event)
        case _:
            pass


def _apply_assistant(state: _WalkState, turn: _TurnState, event: Event) -> None:
    match event:
        case MessageDelta():
            if not turn.streamed_text:
                turn.streamed_model = state.model
            turn.streamed_text += event.text
        case MessageComplete():
            reply = _Reply(
                event_id=event.event_id,
                text=event.text,
                model=state.model,
                reasoning=turn.reasoning or None,
            )
            turn.replies.append(reply)
            turn.unattributed.append(reply)
            turn.streamed_text = ""
            turn.streamed_model = None
            turn.reasoning = ""
        case ReasoningDelta():
            turn.reasoning += event.text
        case ReasoningComplete():
            turn.reasoning = event.text or turn.reasoning
        case ToolStart():
            if event.tool_name in state.internal_tools:
                return
            execution = turn.tools.observe_start(event.call_id, event.tool_name, event.arguments)
            turn.executions[event.call_id] = execution
        case ToolComplete():
            execution = turn.tools.observe_complete(
                event.call_id, event.success, event.result, event.error
            )
            if execution is None:
                logger.debug("Discarding completion for unknown tool call %s", event.call_id)
                return
            turn.executions[event.call_id] = execution


def _flatten(state: _WalkState) -> Transcript:
    turns: list[Turn] = []
    messages: list[Message] = []
    sequence = 0

    def next_id(event_id: str | None) -> str:
        nonlocal sequence
        message_id = event_id or f"{state.session_id}:msg:{sequence}"
        sequence += 1
        return message_id

    for turn_state, model_at_close in state.closed:
        executions = list(turn_state.executions.values())

        user_message: Message | None = None
        if turn_state.user_text is not None:
            user_message = Message(
                id=next_id(turn_state.user_event_id),
                role="user",
                text=turn_state.user_text,
            )

        assistant_messages = [
            Message(
                id=next_id(reply.event_id),
                role="assistant",
                text=reply.text,
                model=reply.model,
                tool_executions=list(executions),
                reasoning=reply.reasoning,
            )
            for reply in turn_state.replies
        ]

        visible_user = user_message if user_message and _has_text(user_message) else None
        visible_assistant = [message for message in assistant_messages if _has_text(message)]
        active_model = turn_state.replies[-1].model if turn_state.replies else model_at_close

        turns.append(
            Turn(
                user_message=visible_user,
                assistant_messages=visible_assistant,
                tool_executions=executions,
                active_model=active_model,
            )
        )
        if visible_user is not None:
            messages.append(visible_user)
        messages.extend(visible_assistant)

    last_model = next(
        (message.model for message in reversed(messages) if message.role == "assistant"),
        None,
    )
    return Transcript(
        session_id=state.session_id,
        turns=turns,
        messages=messages,
        last_model=last_model,
    )


def _has_text(message: Message) -> bool:
    return bool(message.text.strip())
