"""Tool pairing table: matches tool starts with their completions by call id."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from acs.models.transcript import ToolExecution, ToolStatus
from acs.services.tool_formatter import describe


@dataclass(frozen=True)
class _PendingStart:
    tool_name: str
    arguments: dict[str, Any] = field(default_factory=dict)


class ToolPairingTable:
    """Cache of tool starts awaiting their completion.

    Entries are removed as soon as their completion is consumed. A start for
    an id already in the table replaces the earlier entry.
    """

    def __init__(self) -> None:
        self._starts: dict[str, _PendingStart] = {}

    def __len__(self) -> int:
        return len(self._starts)

    def __contains__(self, call_id: object) -> bool:
        return call_id in self._starts

    def observe_start(
        self, call_id: str, tool_name: str, arguments: dict[str, Any] | None = None
    ) -> ToolExecution:
        """Record a start and return it as a pending execution."""
        start = _PendingStart(tool_name=tool_name, arguments=dict(arguments or {}))
        self._starts[call_id] = start
        return _execution(call_id, start, ToolStatus.PENDING)

    def observe_complete(
        self,
        call_id: str,
        success: bool,
        result: str = "",
        error: str | None = None,
    ) -> ToolExecution | None:
        """Merge a completion with its cached start, or return None if unknown."""
        start = self._starts.pop(call_id, None)
        if start is None:
            return None
        status = ToolStatus.SUCCEEDED if success else ToolStatus.FAILED
        return _execution(call_id, start, status, result=result, error=error)

    def pending(self) -> list[ToolExecution]:
        """Unresolved starts as pending executions, oldest first."""
        return [
            _execution(call_id, start, ToolStatus.PENDING)
            for call_id, start in self._starts.items()
        ]

    def clear(self) -> None:
        self._starts.clear()


def _execution(
    call_id: str,
    start: _PendingStart,
    status: ToolStatus,
    *,
    result: str = "",
    error: str | None = None,
) -> ToolExecution:
    description = describe(start.tool_name, status, start.arguments, result, error=error)
    return ToolExecution(
        call_id=call_id,
        tool_name=start.tool_name,
        arguments=start.arguments,
        status=status,
        result=result,
        error=error,
        label=description.label,
        detail=description.detail,
    )
