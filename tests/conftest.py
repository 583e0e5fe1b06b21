"""Shared fixtures wiring a session to the in-memory backend."""

from __future__ import annotations

from typing import AsyncIterator

import pytest
import pytest_asyncio
from fakes import BASE_URL, FakeBackend

from dirdeck.app import Session, open_session
from dirdeck.config.models import DirdeckConfig, ServerSettings
from dirdeck.notifications import RecordingSink


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def config() -> DirdeckConfig:
    return DirdeckConfig(server=ServerSettings(base_url=BASE_URL))


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest_asyncio.fixture
async def session(
    backend: FakeBackend, config: DirdeckConfig, sink: RecordingSink
) -> AsyncIterator[Session]:
    async with backend.client() as client:
        async with open_session(config, notifications=sink, client=client) as opened:
            yield opened
