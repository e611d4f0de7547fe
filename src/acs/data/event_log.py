"""JSONL event log reader."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def iter_event_log(path: Path) -> Generator[dict[str, Any]]:
    """Stream raw events from a JSONL log, skipping blank and invalid lines."""
    with open(path, encoding="utf-8") as file:
        for line_num, line in enumerate(file, 1):
            line = line.strip()
            if not line:
                continue
            try:
                raw = json.loads(line)
            except json.JSONDecodeError:
                logger.warning("Invalid JSON at %s:%d", path, line_num)
                continue
            if not isinstance(raw, dict):
                logger.warning("Non-object event at %s:%d", path, line_num)
                continue
            yield raw


def read_event_log(path: Path) -> list[dict[str, Any]]:
    """Read a complete JSONL event log."""
    return list(iter_event_log(path))
