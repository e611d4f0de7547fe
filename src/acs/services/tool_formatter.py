"""Human-readable labels for tool executions.

``describe`` turns a tool call into a one-line label plus an optional detail
string. It is total: unknown tools and malformed arguments fall back to the
humanized tool name.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from acs.models.transcript import ToolStatus

logger = logging.getLogger(__name__)

COMMAND_PREVIEW_CHARS = 40
QUERY_PREVIEW_CHARS = 30
ELLIPSIS = "..."

PATH_KEYS = ("path", "file_path", "filePath", "filename", "file")
COMMAND_KEYS = ("command", "cmd", "script")
QUERY_KEYS = ("query", "pattern", "q", "search")
CONTENT_KEYS = ("file_text", "content", "contents", "text")
OLD_TEXT_KEYS = ("old_str", "old_string", "oldText")
NEW_TEXT_KEYS = ("new_str", "new_string", "newText")


class ToolCategory(Enum):
    READ = "read"
    WRITE = "write"
    EDIT = "edit"
    SHELL = "shell"
    SEARCH = "search"
    LIST = "list"
    WEB_SEARCH = "web_search"


_CATEGORY_BY_NAME: dict[str, ToolCategory] = {
    "view": ToolCategory.READ,
    "read": ToolCategory.READ,
    "read_file": ToolCategory.READ,
    "create": ToolCategory.WRITE,
    "write": ToolCategory.WRITE,
    "write_file": ToolCategory.WRITE,
    "create_file": ToolCategory.WRITE,
    "edit": ToolCategory.EDIT,
    "edit_file": ToolCategory.EDIT,
    "multiedit": ToolCategory.EDIT,
    "str_replace": ToolCategory.EDIT,
    "str_replace_editor": ToolCategory.EDIT,
    "bash": ToolCategory.SHELL,
    "shell": ToolCategory.SHELL,
    "powershell": ToolCategory.SHELL,
    "run_command": ToolCategory.SHELL,
    "run_in_terminal": ToolCategory.SHELL,
    "grep": ToolCategory.SEARCH,
    "glob": ToolCategory.SEARCH,
    "search": ToolCategory.SEARCH,
    "file_search": ToolCategory.SEARCH,
    "search_files": ToolCategory.SEARCH,
    "ls": ToolCategory.LIST,
    "list_dir": ToolCategory.LIST,
    "list_directory": ToolCategory.LIST,
    "web_search": ToolCategory.WEB_SEARCH,
    "websearch": ToolCategory.WEB_SEARCH,
}


@dataclass(frozen=True)
class ToolDescription:
    """Display text for one tool execution."""

    label: str
    detail: str | None = None


def describe(
    tool_name: str,
    status: ToolStatus,
    arguments: object = None,
    result: str = "",
    *,
    error: str | None = None,
) -> ToolDescription:
    """Describe a tool execution for display."""
    name = tool_name if isinstance(tool_name, str) else ""
    pending = status == ToolStatus.PENDING
    params = _coerce_arguments(arguments)
    output = result if isinstance(result, str) else ""

    category = tool_category(name)
    if category is None:
        return _generic(name, pending)

    try:
        description = _describe_known(category, params, output, pending)
    except (TypeError, ValueError, AttributeError):
        logger.debug("Falling back to generic label for %s", name, exc_info=True)
        return _generic(name, pending)

    if status == ToolStatus.FAILED:
        detail = truncate(error or "Failed", COMMAND_PREVIEW_CHARS)
        return ToolDescription(description.label, detail)
    return description


def tool_category(tool_name: str) -> ToolCategory | None:
    return _CATEGORY_BY_NAME.get(tool_name.strip().lower())


def humanize(tool_name: str) -> str:
    """``read_file`` -> ``Read file``; ``webFetch`` -> ``Web fetch``."""
    spaced = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", tool_name)
    words = re.sub(r"[_\-\s.]+", " ", spaced).strip().lower()
    if not words:
        return "Tool"
    return words[0].upper() + words[1:]


def truncate(text: str, limit: int) -> str:
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + ELLIPSIS


def _describe_known(
    category: ToolCategory,
    params: dict[str, Any],
    output: str,
    pending: bool,
) -> ToolDescription:
    match category:
        case ToolCategory.READ:
            name = _file_name(_first(params, PATH_KEYS))
            if pending:
                return ToolDescription(f"Reading {name}")
            lines = _count_lines(output)
            detail = f"{_plural(lines, 'line')} read" if lines else None
            return ToolDescription(f"Read {name}", detail)

        case ToolCategory.WRITE:
            name = _file_name(_first(params, PATH_KEYS))
            lines = _count_lines(_first(params, CONTENT_KEYS))
            detail = _plural(lines, "line") if lines else None
            return ToolDescription(f"Creating {name}" if pending else f"Created {name}", detail)

        case ToolCategory.EDIT:
            name = _file_name(_first(params, PATH_KEYS))
            old_text = _first(params, OLD_TEXT_KEYS)
            new_text = _first(params, NEW_TEXT_KEYS)
            detail = None
            if old_text or new_text:
                detail = f"+{_count_lines(new_text)} -{_count_lines(old_text)} lines"
            return ToolDescription(f"Editing {name}" if pending else f"Edited {name}", detail)

        case ToolCategory.SHELL:
            command = _first(params, COMMAND_KEYS)
            detail = truncate(command, COMMAND_PREVIEW_CHARS) if command else None
            return ToolDescription("Running command" if pending else "Ran command", detail)

        case ToolCategory.SEARCH:
            query = _first(params, QUERY_KEYS)
            verb = "Searching" if pending else "Searched"
            label = f'{verb} for "{truncate(query, QUERY_PREVIEW_CHARS)}"' if query else verb
            matches = 0 if pending else _count_lines(output)
            return ToolDescription(label, _plural(matches, "match", "matches") if matches else None)

        case ToolCategory.LIST:
            path = _first(params, PATH_KEYS)
            name = _file_name(path) if path else "directory"
            if pending:
                return ToolDescription(f"Listing {name}")
            entries = _count_lines(output)
            detail = _plural(entries, "entry", "entries") if entries else None
            return ToolDescription(f"Listed {name}", detail)

        case ToolCategory.WEB_SEARCH:
            query = _first(params, QUERY_KEYS)
            detail = truncate(query, QUERY_PREVIEW_CHARS) if query else None
            return ToolDescription("Searching the web" if pending else "Searched the web", detail)


def _generic(name: str, pending: bool) -> ToolDescription:
    label = humanize(name)
    return ToolDescription(label + ELLIPSIS if pending else label)


def _coerce_arguments(arguments: object) -> dict[str, Any]:
    if isinstance(arguments, Mapping):
        return dict(arguments)
    if isinstance(arguments, str):
        try:
            parsed = json.loads(arguments)
        except json.JSONDecodeError:
            return {}
        if isinstance(parsed, dict):
            return parsed
    return {}


def _first(params: dict[str, Any], keys: tuple[str, ...]) -> str:
    """Return the first alias holding a non-empty scalar value, else ''."""
    for key in keys:
        value = params.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, str) and value:
            return value
        if isinstance(value, (int, float)):
            return str(value)
    return ""


def _file_name(path: str) -> str:
    parts = [part for part in re.split(r"[\\/]", path) if part]
    return parts[-1] if parts else "file"


def _count_lines(text: str) -> int:
    return len([line for line in text.splitlines() if line.strip()])


def _plural(count: int, singular: str, plural: str | None = None) -> str:
    word = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {word}"
