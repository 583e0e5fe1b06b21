"""Application state and controller wiring.

One :class:`AppState` is built per session and handed to every controller,
so no component reaches for ambient globals.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Optional

import httpx

from dirdeck.config.models import DirdeckConfig
from dirdeck.controllers import BatchOperationController, ConfirmGate, DirectoryController
from dirdeck.notifications import NotificationSink
from dirdeck.preview import PreviewResolver
from dirdeck.remote import RemoteFileService, build_http_client
from dirdeck.state import BusyIndicator, PathModel, SelectionModel


@dataclass(slots=True)
class AppState:
    """Shared state for one client session.

    Attributes:
        config: Effective configuration.
        service: Backend adapter; the only component doing network I/O.
        notifications: Sink receiving workflow outcomes.
        path: Owner of the current directory path.
        selection: Owner of the multi-select set.
        busy: Tracker for controls with in-flight requests.
    """

    config: DirdeckConfig
    service: RemoteFileService
    notifications: NotificationSink
    path: PathModel = field(default_factory=PathModel)
    selection: SelectionModel = field(default_factory=SelectionModel)
    busy: BusyIndicator = field(default_factory=BusyIndicator)


@dataclass(slots=True)
class Session:
    """An :class:`AppState` together with the controllers bound to it."""

    state: AppState
    directory: DirectoryController
    batch: BatchOperationController
    preview: PreviewResolver

    @classmethod
    def build(cls, state: AppState, *, confirm: Optional[ConfirmGate] = None) -> "Session":
        directory = DirectoryController(state)
        return cls(
            state=state,
            directory=directory,
            batch=BatchOperationController(state, directory, confirm=confirm),
            preview=PreviewResolver(state),
        )


@asynccontextmanager
async def open_session(
    config: DirdeckConfig,
    *,
    notifications: NotificationSink,
    client: Optional[httpx.AsyncClient] = None,
    confirm: Optional[ConfirmGate] = None,
) -> AsyncIterator[Session]:
    """Create a session and close its HTTP client on exit."""
    http_client = client if client is not None else build_http_client(config.server)
    service = RemoteFileService(config.server, client=http_client)
    state = AppState(config=config, service=service, notifications=notifications)
    try:
        yield Session.build(state, confirm=confirm)
    finally:
        if client is None:
            await http_client.aclose()


__all__ = ["AppState", "Session", "open_session"]
