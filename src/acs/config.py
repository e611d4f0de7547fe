"""Configuration for ACS."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    copilot_dir: Path = field(default_factory=lambda: Path.home() / ".copilot")
    default_model: str = "gpt-4.1"
    internal_tools: frozenset[str] = frozenset({"report_intent"})
    recent_session_days: int = 7
    model_list_command: tuple[str, ...] = ("copilot", "--model", "list")

    @property
    def session_state_dir(self) -> Path:
        return self.copilot_dir / "session-state"
