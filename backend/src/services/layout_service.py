"""
Layout reconciliation engine.

Owns the grid-position collection persisted under its own key, separate from
the note collection. The lifecycle engine keeps the two in lockstep: exactly
one entry per active note, none for trashed or purged notes.

Snapshot builders (placed, without, merged, reconciled) are pure and return
the next collection; save() persists a snapshot and swaps it in. Public
operations combine the two.
"""
import logging
from collections.abc import Iterable, Sequence

from pydantic import ValidationError

from schemas.layout import LayoutEntry
from schemas.note import Note
from services.exceptions import PersistenceError
from services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_W = 3
DEFAULT_H = 4
MIN_W = 2
MIN_H = 3
MAX_W = 8
MAX_H = 12


class LayoutService:
    """Grid layout collection kept consistent with the active notes."""

    def __init__(
        self,
        store: KeyValueStore,
        layouts_key: str,
        grid_cols: int = 12,
    ) -> None:
        self._store = store
        self._key = layouts_key
        self.grid_cols = grid_cols
        raw = store.load(layouts_key, [])
        try:
            self._layouts = tuple(LayoutEntry.model_validate(entry) for entry in raw)
        except ValidationError as e:
            raise PersistenceError(
                f"Stored layouts under {layouts_key!r} are invalid: {e}", operation="load",
            ) from e

    @property
    def layouts(self) -> tuple[LayoutEntry, ...]:
        """Every persisted entry, in persisted order."""
        return self._layouts

    def default_placement(self, note_id: str, active_count: int) -> LayoutEntry:
        """
        Place a newly active note.

        Notes are spread across the row three columns apart before wrapping;
        y is always 0 because the rendering grid compacts entries upward.
        """
        return LayoutEntry(
            note_id=note_id,
            x=(active_count * DEFAULT_W) % self.grid_cols,
            y=0,
            w=DEFAULT_W,
            h=DEFAULT_H,
            min_w=MIN_W,
            min_h=MIN_H,
            max_w=MAX_W,
            max_h=MAX_H,
        )

    def active_layouts(self, active_notes: Iterable[Note]) -> list[LayoutEntry]:
        """Entries whose id matches an active note, in persisted order."""
        active_ids = {note.id for note in active_notes}
        return [entry for entry in self._layouts if entry.note_id in active_ids]

    # --- Snapshot builders ---

    def placed(self, note_id: str, active_count: int) -> tuple[LayoutEntry, ...]:
        """Snapshot with a fresh default entry for note_id appended (any old one dropped)."""
        kept = tuple(entry for entry in self._layouts if entry.note_id != note_id)
        return (*kept, self.default_placement(note_id, active_count))

    def without(self, note_ids: Iterable[str]) -> tuple[LayoutEntry, ...]:
        """Snapshot with the entries for note_ids dropped."""
        dropped = set(note_ids)
        return tuple(entry for entry in self._layouts if entry.note_id not in dropped)

    def merged(self, new_entries: Sequence[LayoutEntry]) -> tuple[LayoutEntry, ...]:
        """
        Snapshot favouring user-driven geometry.

        The new entries come first; previously known entries whose id is not
        in the update are appended so their geometry is never silently lost.
        An id listed more than once in the update keeps its last entry.
        """
        latest = {entry.note_id: entry for entry in new_entries}
        untouched = tuple(entry for entry in self._layouts if entry.note_id not in latest)
        return (*latest.values(), *untouched)

    def reconciled(self, active_notes: Sequence[Note]) -> tuple[LayoutEntry, ...]:
        """
        Snapshot restoring the one-entry-per-active-note invariant.

        Entries for unknown or trashed ids and duplicate entries are dropped;
        active notes without an entry get a default placement.
        """
        active_ids = {note.id for note in active_notes}
        seen: set[str] = set()
        kept: list[LayoutEntry] = []
        for entry in self._layouts:
            if entry.note_id in active_ids and entry.note_id not in seen:
                seen.add(entry.note_id)
                kept.append(entry)
        for note in active_notes:
            if note.id not in seen:
                kept.append(self.default_placement(note.id, len(kept)))
                seen.add(note.id)
        return tuple(kept)

    def save(self, layouts: Sequence[LayoutEntry]) -> None:
        """Persist a snapshot, then make it current."""
        snapshot = tuple(layouts)
        self._store.store(self._key, [entry.model_dump(mode="json") for entry in snapshot])
        self._layouts = snapshot

    # --- Operations ---

    def apply_user_layout(self, new_entries: Sequence[LayoutEntry]) -> tuple[LayoutEntry, ...]:
        """Merge the geometry produced by a user drag/resize and persist it."""
        snapshot = self.merged(new_entries)
        self.save(snapshot)
        return snapshot

    def remove(self, note_id: str) -> None:
        """Drop the entry for note_id. No-op if there is none."""
        if not any(entry.note_id == note_id for entry in self._layouts):
            return
        self.save(self.without([note_id]))
        logger.debug("Removed layout for note %s", note_id)
