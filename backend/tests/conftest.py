"""Pytest fixtures for testing."""
import random
from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy import Engine

from db.session import create_store_engine, get_session_factory
from services.gateway import SimulatedNoteGateway
from services.kv_store import InMemoryKeyValueStore, SqlKeyValueStore
from services.layout_service import LayoutService
from services.note_service import NoteLifecycleService

NOTES_KEY = "sticky-notes"
LAYOUTS_KEY = "sticky-notes-layout"


class FakeClock:
    """Deterministic clock that advances one second on every reading."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        now = self.current
        self.current = now + timedelta(seconds=1)
        return now


@pytest.fixture
def clock() -> FakeClock:
    """A clock whose every reading is one second after the previous one."""
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    """Seeded randomness source for colour assignment."""
    return random.Random(1234)


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    """Empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def gateway() -> SimulatedNoteGateway:
    """Gateway with no latency and no random failures."""
    return SimulatedNoteGateway(
        save_latency=0, update_latency=0, delete_latency=0, restore_latency=0,
    )


@pytest.fixture
def make_service(
    store: InMemoryKeyValueStore,
    gateway: SimulatedNoteGateway,
    rng: random.Random,
    clock: FakeClock,
):
    """
    Factory building a lifecycle engine over the shared store and gateway.

    Calling it again simulates a process restart: the new engine reloads
    whatever the previous one wrote.
    """

    def _make(id_prefix: str = "n") -> NoteLifecycleService:
        layouts = LayoutService(store, LAYOUTS_KEY, grid_cols=12)
        return NoteLifecycleService(
            store,
            gateway,
            layouts,
            notes_key=NOTES_KEY,
            id_prefix=id_prefix,
            rng=rng,
            clock=clock,
        )

    return _make


@pytest.fixture
def note_service(make_service) -> NoteLifecycleService:
    """Lifecycle engine over an empty store."""
    return make_service()


@pytest.fixture
def sqlite_engine(tmp_path: Path) -> Generator[Engine]:
    """SQLite file engine with the key-value table created."""
    engine = create_store_engine(f"sqlite:///{tmp_path / 'board.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(sqlite_engine: Engine) -> SqlKeyValueStore:
    """Key-value store on a temporary SQLite file."""
    return SqlKeyValueStore(get_session_factory(sqlite_engine))


def assert_layouts_match_active_notes(service: NoteLifecycleService) -> None:
    """Check the lockstep invariant between active notes and stored layouts."""
    active_ids = [note.id for note in service.active_notes]
    layout_ids = [entry.note_id for entry in service.layout_service.layouts]
    assert sorted(layout_ids) == sorted(active_ids)
    assert len(layout_ids) == len(set(layout_ids))
