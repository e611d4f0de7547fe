"""Exception types raised by the data layer."""

from __future__ import annotations


class AcsError(Exception):
    """Base class for ACS errors."""


class SessionNotFoundError(AcsError):
    """Raised when a session log cannot be located."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id
