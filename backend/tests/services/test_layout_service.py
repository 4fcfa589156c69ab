"""Tests for the layout reconciliation engine."""
import pytest

from schemas.layout import LayoutEntry
from schemas.note import Note
from services.kv_store import InMemoryKeyValueStore
from services.layout_service import LayoutService
from services.exceptions import PersistenceError
from tests.conftest import LAYOUTS_KEY


def _entry(note_id: str, x: int = 0, y: int = 0, w: int = 3, h: int = 4) -> LayoutEntry:
    return LayoutEntry(note_id=note_id, x=x, y=y, w=w, h=h)


@pytest.fixture
def layout_service(store: InMemoryKeyValueStore) -> LayoutService:
    """Layout engine over an empty store."""
    return LayoutService(store, LAYOUTS_KEY, grid_cols=12)


@pytest.mark.parametrize(
    ("active_count", "expected_x"),
    [(0, 0), (1, 3), (2, 6), (3, 9), (4, 0), (7, 9)],
)
def test__default_placement__spreads_across_grid(
    layout_service: LayoutService,
    active_count: int,
    expected_x: int,
) -> None:
    """x steps by three columns and wraps at the grid width."""
    entry = layout_service.default_placement("n1", active_count)

    assert entry.x == expected_x
    assert entry.y == 0
    assert (entry.w, entry.h) == (3, 4)
    assert (entry.min_w, entry.min_h, entry.max_w, entry.max_h) == (2, 3, 8, 12)


def test__default_placement__narrow_grid(store: InMemoryKeyValueStore) -> None:
    """Placement wraps on whatever column count is configured."""
    service = LayoutService(store, LAYOUTS_KEY, grid_cols=6)

    assert [service.default_placement("n", i).x for i in range(3)] == [0, 3, 0]


def test__apply_user_layout__new_entries_first_then_untouched(
    layout_service: LayoutService,
) -> None:
    """User geometry wins; entries missing from the update are retained after it."""
    layout_service.save([_entry("n1"), _entry("n2", x=3), _entry("n3", x=6)])

    result = layout_service.apply_user_layout([_entry("n3", x=0, y=4), _entry("n1", x=9)])

    assert [(e.note_id, e.x, e.y) for e in result] == [("n3", 0, 4), ("n1", 9, 0), ("n2", 3, 0)]
    assert layout_service.layouts == result


def test__apply_user_layout__persists(
    layout_service: LayoutService,
    store: InMemoryKeyValueStore,
) -> None:
    """The merged collection is written through to the store."""
    layout_service.apply_user_layout([_entry("n1", x=6, w=5)])

    stored = store.load(LAYOUTS_KEY, [])
    assert stored == [_entry("n1", x=6, w=5).model_dump(mode="json")]


def test__apply_user_layout__duplicate_ids_keep_last_entry(
    layout_service: LayoutService,
) -> None:
    """An id repeated in the update is stored once, with its last geometry."""
    layout_service.save([_entry("n1"), _entry("n2", x=3)])

    result = layout_service.apply_user_layout([_entry("n1", x=0), _entry("n1", x=6, y=2)])

    assert [(e.note_id, e.x, e.y) for e in result] == [("n1", 6, 2), ("n2", 3, 0)]


def test__remove__drops_entry_and_is_idempotent(
    layout_service: LayoutService,
    store: InMemoryKeyValueStore,
) -> None:
    """Remove drops the entry once; a second call changes nothing."""
    layout_service.save([_entry("n1"), _entry("n2", x=3)])

    layout_service.remove("n1")
    layout_service.remove("n1")
    layout_service.remove("never-there")

    assert [e.note_id for e in layout_service.layouts] == ["n2"]
    assert len(store.load(LAYOUTS_KEY, [])) == 1


def test__active_layouts__filters_by_active_ids(
    layout_service: LayoutService,
) -> None:
    """Only entries of the given notes are projected, in persisted order."""
    layout_service.save([_entry("n2", x=3), _entry("n1"), _entry("n3", x=6)])
    notes = [
        Note(id=note_id, color="#FFE066", z_index=1, created_at="2025-01-01T00:00:00Z")
        for note_id in ("n1", "n2")
    ]

    assert [e.note_id for e in layout_service.active_layouts(notes)] == ["n2", "n1"]


def test__placed__replaces_existing_entry(layout_service: LayoutService) -> None:
    """Placing a note that already has an entry leaves exactly one entry for it."""
    layout_service.save([_entry("n1", x=9), _entry("n2", x=3)])

    snapshot = layout_service.placed("n1", 1)

    assert [(e.note_id, e.x) for e in snapshot] == [("n2", 3), ("n1", 3)]
    # Builders do not persist
    assert [e.note_id for e in layout_service.layouts] == ["n1", "n2"]


def test__reconciled__drops_duplicates(layout_service: LayoutService) -> None:
    """Only the first entry per active note survives reconciliation."""
    layout_service.save([_entry("n1", x=6), _entry("n1", x=0)])
    note = Note(id="n1", color="#FFE066", z_index=1, created_at="2025-01-01T00:00:00Z")

    assert [(e.note_id, e.x) for e in layout_service.reconciled([note])] == [("n1", 6)]


def test__load__invalid_entries_raise_persistence_error(store: InMemoryKeyValueStore) -> None:
    """An entry whose size exceeds its bounds cannot be loaded."""
    store.store(LAYOUTS_KEY, [{"note_id": "n1", "x": 0, "y": 0, "w": 20, "h": 4}])

    with pytest.raises(PersistenceError):
        LayoutService(store, LAYOUTS_KEY)
