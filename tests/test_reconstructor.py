"""Tests for transcript reconstruction."""

from __future__ import annotations

from pathlib import Path

import pytest

from acs.data.classifier import classify_log
from acs.data.event_log import read_event_log
from acs.models.events import (
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
from acs.models.transcript import ToolStatus, Transcript
from acs.services.reconstructor import reconstruct


@pytest.fixture
def sample_transcript(sample_events_path: Path) -> Transcript:
    events = classify_log(read_event_log(sample_events_path))
    return reconstruct(events, session_id="sample", internal_tools={"report_intent"})


class TestSampleSession:
    def test_message_order(self, sample_transcript: Transcript) -> None:
        assert [(m.id, m.role) for m in sample_transcript.messages] == [
            ("ev-002", "user"),
            ("ev-007", "assistant"),
            ("ev-011", "user"),
            ("ev-014", "assistant"),
            ("ev-017", "assistant"),
        ]

    def test_models_follow_model_change(self, sample_transcript: Transcript) -> None:
        models = [m.model for m in sample_transcript.messages if m.role == "assistant"]
        assert models == ["gpt-4.1", "claude-sonnet-4.5", "claude-sonnet-4.5"]
        assert sample_transcript.last_model == "claude-sonnet-4.5"

    def test_complete_text_wins_over_deltas(self, sample_transcript: Transcript) -> None:
        assert sample_transcript.messages[3].text == "Running the test suite now."

    def test_internal_tools_are_hidden(self, sample_transcript: Transcript) -> None:
        first_reply = sample_transcript.messages[1]
        assert [e.call_id for e in first_reply.tool_executions] == ["call-1"]

    def test_read_tool_is_described(self, sample_transcript: Transcript) -> None:
        execution = sample_transcript.messages[1].tool_executions[0]
        assert execution.status == ToolStatus.SUCCEEDED
        assert execution.label == "Read utils.py"
        assert execution.detail == "3 lines read"

    def test_failed_tool_attached_to_every_reply_of_turn(
        self, sample_transcript: Transcript
    ) -> None:
        for message in sample_transcript.messages[3:]:
            assert len(message.tool_executions) == 1
            execution = message.tool_executions[0]
            assert execution.call_id == "call-2"
            assert execution.status == ToolStatus.FAILED
            assert execution.label == "Ran command"
            assert execution.detail == "exit code 1"
            assert execution.arguments == {"command": "pytest -q"}

    def test_turns(self, sample_transcript: Transcript) -> None:
        assert len(sample_transcript.turns) == 2
        first, second = sample_transcript.turns
        assert first.user_message is not None
        assert first.user_message.text == "What does utils.py do?"
        assert first.active_model == "gpt-4.1"
        assert len(second.assistant_messages) == 2
        assert second.active_model == "claude-sonnet-4.5"

    def test_reconstruction_is_idempotent(self, sample_events_path: Path) -> None:
        events = classify_log(read_event_log(sample_events_path))
        first = reconstruct(events, session_id="sample", internal_tools={"report_intent"})
        second = reconstruct(events, session_id="sample", internal_tools={"report_intent"})
        assert first == second


class TestModelAttribution:
    def test_model_changed_applies_to_later_replies(self) -> None:
        events = [
            UserMessage(text="one"),
            MessageComplete(text="first"),
            ModelChanged(new_model="m2"),
            UserMessage(text="two"),
            MessageComplete(text="second"),
        ]
        transcript = reconstruct(events, default_model="m1")
        models = [m.model for m in transcript.messages if m.role == "assistant"]
        assert models == ["m1", "m2"]
        assert transcript.last_model == "m2"

    def test_model_changed_never_rewrites_earlier_reply(self) -> None:
        events = [
            UserMessage(text="q"),
            MessageComplete(text="a"),
            ModelChanged(new_model="m2"),
        ]
        transcript = reconstruct(events, default_model="m1")
        assert transcript.messages[1].model == "m1"

    def test_usage_reattributes_replies_since_previous_usage(self) -> None:
        events = [
            UserMessage(text="q"),
            MessageComplete(text="a"),
            Usage(model="m1"),
            MessageComplete(text="b"),
            MessageComplete(text="c"),
            Usage(model="m2"),
        ]
        transcript = reconstruct(events, default_model="m0")
        assert [m.model for m in transcript.messages[1:]] == ["m1", "m2", "m2"]

    def test_usage_does_not_reach_into_previous_turn(self) -> None:
        events = [
            UserMessage(text="q1"),
            MessageComplete(text="a1"),
            UserMessage(text="q2"),
            Usage(model="m2"),
            MessageComplete(text="a2"),
        ]
        transcript = reconstruct(events, default_model="m1")
        assert [m.model for m in transcript.messages if m.role == "assistant"] == ["m1", "m2"]

    def test_usage_then_model_changed_in_same_turn(self) -> None:
        events = [
            UserMessage(text="q"),
            MessageComplete(text="a"),
            Usage(model="m1"),
            ModelChanged(new_model="m2"),
            MessageComplete(text="b"),
        ]
        transcript = reconstruct(events, default_model="m0")
        assert [m.model for m in transcript.messages[1:]] == ["m1", "m2"]
        assert transcript.turns[0].active_model == "m2"

    def test_model_changed_then_usage_in_same_turn(self) -> None:
        events = [
            UserMessage(text="q"),
            ModelChanged(new_model="m2"),
            MessageComplete(text="a"),
            Usage(model="m1"),
        ]
        transcript = reconstruct(events, default_model="m0")
        # Usage reports the model that actually produced the reply.
        assert transcript.messages[1].model == "m1"
        assert transcript.last_model == "m1"

    def test_seed_model_from_session_start(self) -> None:
        events = [SessionStart(model="s1"), UserMessage(text="q"), MessageComplete(text="a")]
        transcript = reconstruct(events, default_model="fallback")
        assert transcript.messages[1].model == "s1"

    def test_no_model_anywhere(self) -> None:
        transcript = reconstruct([UserMessage(text="q"), MessageComplete(text="a")])
        assert transcript.messages[1].model is None
        assert transcript.last_model is None

    def test_turn_without_replies_keeps_model_at_close(self) -> None:
        events = [UserMessage(text="q"), ModelChanged(new_model="m2"), Idle()]
        transcript = reconstruct(events, default_model="m1")
        assert transcript.turns[0].active_model == "m2"
        assert transcript.last_model is None


class TestTurnStructure:
    def test_user_messages_kept_in_order(self) -> None:
        events = [UserMessage(text=f"q{i}") for i in range(5)]
        transcript = reconstruct(events)
        assert [m.text for m in transcript.messages] == ["q0", "q1", "q2", "q3", "q4"]
        assert all(m.role == "user" for m in transcript.messages)

    def test_empty_messages_are_excluded(self) -> None:
        events = [
            UserMessage(text="q"),
            MessageComplete(text=""),
            MessageComplete(text="   "),
            MessageComplete(text="answer"),
            UserMessage(text=""),
        ]
        transcript = reconstruct(events)
        assert [m.text for m in transcript.messages] == ["q", "answer"]
        assert transcript.turns[1].user_message is None

    def test_tools_of_empty_reply_stay_on_turn(self) -> None:
        events = [
            UserMessage(text="q"),
            ToolStart(call_id="c1", tool_name="bash", arguments={"command": "ls"}),
            ToolComplete(call_id="c1", success=True),
            MessageComplete(text=""),
        ]
        transcript = reconstruct(events)
        assert [m.role for m in transcript.messages] == ["user"]
        assert [e.call_id for e in transcript.turns[0].tool_executions] == ["c1"]

    def test_fallback_ids_are_sequential(self) -> None:
        events = [UserMessage(text="q"), MessageComplete(text="a"), MessageComplete(text="b")]
        transcript = reconstruct(events, session_id="s")
        assert [m.id for m in transcript.messages] == ["s:msg:0", "s:msg:1", "s:msg:2"]

    def test_assistant_activity_before_first_prompt(self) -> None:
        transcript = reconstruct([MessageComplete(text="welcome")], session_id="s")
        assert len(transcript.turns) == 1
        assert transcript.turns[0].user_message is None
        assert transcript.messages[0].role == "assistant"

    def test_truncated_deltas_become_trailing_reply(self) -> None:
        events = [
            UserMessage(text="q"),
            MessageDelta(text="par"),
            MessageDelta(text="tial"),
        ]
        transcript = reconstruct(events, default_model="m1")
        assert transcript.messages[-1].text == "partial"
        assert transcript.messages[-1].model == "m1"

    def test_reasoning_attaches_to_next_reply(self) -> None:
        events = [
            UserMessage(text="q"),
            ReasoningDelta(reasoning_id="r", text="thinking"),
            ReasoningComplete(reasoning_id="r", text="thinking hard"),
            MessageComplete(text="a"),
            MessageComplete(text="b"),
        ]
        transcript = reconstruct(events)
        assert transcript.messages[1].reasoning == "thinking hard"
        assert transcript.messages[2].reasoning is None

    def test_unrecognized_and_idle_events_are_ignored(self) -> None:
        events = [
            UserMessage(text="q"),
            Unrecognized(raw_type="session.compaction_start"),
            MessageComplete(text="a"),
            Idle(),
        ]
        assert [m.text for m in reconstruct(events).messages] == ["q", "a"]


class TestToolPairing:
    def test_unresolved_tool_stays_pending(self) -> None:
        events = [
            UserMessage(text="q"),
            ToolStart(call_id="c1", tool_name="bash", arguments={"command": "sleep 100"}),
            MessageComplete(text="waiting"),
        ]
        transcript = reconstruct(events)
        execution = transcript.messages[1].tool_executions[0]
        assert execution.status == ToolStatus.PENDING
        assert execution.label == "Running command"

    def test_call_id_reuse_across_turns_does_not_merge(self) -> None:
        events = [
            UserMessage(text="q1"),
            ToolStart(call_id="c1", tool_name="view", arguments={"path": "a.py"}),
            MessageComplete(text="a1"),
            UserMessage(text="q2"),
            ToolComplete(call_id="c1", success=True, result="x"),
            MessageComplete(text="a2"),
        ]
        transcript = reconstruct(events)
        first, second = transcript.turns
        assert [e.status for e in first.tool_executions] == [ToolStatus.PENDING]
        assert second.tool_executions == []

    def test_call_id_reuse_within_turn_last_start_wins(self) -> None:
        events = [
            UserMessage(text="q"),
            ToolStart(call_id="c1", tool_name="view", arguments={"path": "a.py"}),
            ToolStart(call_id="c1", tool_name="bash", arguments={"command": "ls"}),
            ToolComplete(call_id="c1", success=True, result="out"),
            MessageComplete(text="done"),
        ]
        executions = reconstruct(events).messages[1].tool_executions
        assert len(executions) == 1
        assert executions[0].tool_name == "bash"
        assert executions[0].status == ToolStatus.SUCCEEDED

    def test_completion_without_start_is_discarded(self) -> None:
        events = [
            UserMessage(text="q"),
            ToolComplete(call_id="ghost", success=True),
            MessageComplete(text="a"),
        ]
        assert reconstruct(events).messages[1].tool_executions == []

    def test_executions_keep_start_order(self) -> None:
        events = [
            UserMessage(text="q"),
            ToolStart(call_id="c1", tool_name="view", arguments={"path": "a.py"}),
            ToolStart(call_id="c2", tool_name="view", arguments={"path": "b.py"}),
            ToolComplete(call_id="c2", success=True, result="x"),
            ToolComplete(call_id="c1", success=True, result="y"),
            MessageComplete(text="a"),
        ]
        executions = reconstruct(events).messages[1].tool_executions
        assert [e.call_id for e in executions] == ["c1", "c2"]
