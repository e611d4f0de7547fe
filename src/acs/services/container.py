"""Service container with DI wiring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from acs.data.store import SessionLogStore
from acs.services.chat_service import ChatSessionService

if TYPE_CHECKING:
    from acs.config import Config
    from acs.data.protocols import BackendProtocol, UiSinkProtocol


@dataclass
class ServiceContainer:
    """Holds all application services. Built once at startup, immutable."""

    config: Config
    store: SessionLogStore
    chat_service: ChatSessionService

    @classmethod
    def create(
        cls,
        config: Config,
        sink: UiSinkProtocol,
        backend: BackendProtocol | None = None,
    ) -> ServiceContainer:
        """Wire services; without a backend, stored logs are replayed instead."""
        store = SessionLogStore(config)
        if backend is None:
            from acs.data.replay import ReplayBackend

            backend = ReplayBackend(store)
        return cls(
            config=config,
            store=store,
            chat_service=ChatSessionService(backend, sink, config),
        )
