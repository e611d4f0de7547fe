"""Session-level models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SessionMetadata(BaseModel):
    """Summary of a backend session for the session picker."""

    session_id: str
    start_time: datetime
    modified_time: datetime
    summary: str = ""
    is_remote: bool = False


class SessionGroups(BaseModel):
    """Sessions split into recently modified and older ones, newest first."""

    recent: list[SessionMetadata] = Field(default_factory=list)
    other: list[SessionMetadata] = Field(default_factory=list)
