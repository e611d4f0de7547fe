"""Read-only access to locally stored session event logs."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from acs.config import Config
from acs.data.event_log import read_event_log
from acs.errors import SessionNotFoundError
from acs.models.sessions import SessionMetadata

logger = logging.getLogger(__name__)

EVENTS_FILE_NAME = "events.jsonl"
SUMMARY_MAX_CHARS = 80


@dataclass
class _LogMeta:
    started: str = ""
    summary: str = ""


class SessionLogStore:
    """Finds session logs under ``Config.session_state_dir``.

    A session is either a directory ``<id>/events.jsonl`` or a flat
    ``<id>.jsonl`` file.
    """

    def __init__(self, config: Config) -> None:
        self._root = config.session_state_dir

    def log_path(self, session_id: str) -> Path:
        """Return the event log path for a session, or raise if it is missing."""
        if session_id and "/" not in session_id and session_id not in {".", ".."}:
            nested = self._root / session_id / EVENTS_FILE_NAME
            if nested.is_file():
                return nested
            flat = self._root / f"{session_id}.jsonl"
            if flat.is_file():
                return flat
        raise SessionNotFoundError(session_id)

    async def get_full_log(self, session_id: str) -> list[dict[str, Any]]:
        """Return every raw event recorded for a session, in log order."""
        return read_event_log(self.log_path(session_id))

    async def list_sessions(self) -> list[SessionMetadata]:
        """List stored sessions, most recently modified first."""
        if not self._root.is_dir():
            logger.info("Session state directory not found: %s", self._root)
            return []

        sessions: list[SessionMetadata] = []
        for session_id, path in self._iter_logs():
            stat = path.stat()
            modified = datetime.fromtimestamp(stat.st_mtime, tz=UTC)
            meta = _scan_log_metadata(path)
            sessions.append(
                SessionMetadata(
                    session_id=session_id,
                    start_time=_parse_timestamp(meta.started) or modified,
                    modified_time=modified,
                    summary=meta.summary,
                )
            )

        sessions.sort(key=lambda s: s.modified_time, reverse=True)
        return sessions

    def _iter_logs(self) -> list[tuple[str, Path]]:
        logs: list[tuple[str, Path]] = []
        for entry in sorted(self._root.iterdir()):
            if entry.is_dir():
                events = entry / EVENTS_FILE_NAME
                if events.is_file():
                    logs.append((entry.name, events))
            elif entry.suffix == ".jsonl":
                logs.append((entry.stem, entry))
        return logs


def _scan_log_metadata(path: Path) -> _LogMeta:
    """Scan the start time and first prompt without reading the whole log."""
    meta = _LogMeta()
    max_lines = 120

    try:
        with open(path, encoding="utf-8") as file:
            for line_num, line in enumerate(file, start=1):
                if line_num > max_lines:
                    break
                line = line.strip()
                if not line:
                    continue
                try:
                    raw = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if not isinstance(raw, dict):
                    continue

                timestamp = raw.get("timestamp")
                if not meta.started and isinstance(timestamp, str):
                    meta.started = timestamp

                if raw.get("type") == "user.message":
                    data = raw.get("data")
                    content = data.get("content") if isinstance(data, dict) else None
                    if isinstance(content, str) and content.strip():
                        meta.summary = _summarize(content)
                        break
    except (OSError, UnicodeDecodeError):
        logger.warning("Failed to read session metadata from %s", path)

    return meta


def _summarize(text: str) -> str:
    first_line = text.strip().splitlines()[0]
    if len(first_line) > SUMMARY_MAX_CHARS:
        return first_line[:SUMMARY_MAX_CHARS] + "..."
    return first_line


def _parse_timestamp(value: str) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
