"""Shared fixtures for API tests."""
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from api.dependencies import set_board_services
from api.main import app
from services.kv_store import InMemoryKeyValueStore
from services.note_service import NoteLifecycleService
from services.preferences_service import PreferencesService


@pytest.fixture
async def client(
    note_service: NoteLifecycleService,
    store: InMemoryKeyValueStore,
) -> AsyncGenerator[AsyncClient]:
    """
    Create a test client wired to an in-memory board.

    ASGITransport does not run the lifespan, so the services are installed
    directly and cleared afterwards.
    """
    set_board_services(note_service, PreferencesService(store))

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    set_board_services(None, None)
