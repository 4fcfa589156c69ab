"""
Note lifecycle engine.

Owns the canonical note collection (active and trashed) and fronts every
mutation with a gateway round-trip. Layout changes are coordinated with the
LayoutService so that, at every quiescent point, the active layouts cover
exactly the active notes.

Update policy per operation:

- create, update, soft_delete, restore, purge: confirm-then-apply. Local
  state changes only after the gateway call resolves; a failure leaves the
  collections untouched and propagates.
- clear_all, clear_trash: optimistic. Local state changes first, then all
  gateway calls are awaited; a failure propagates but is not rolled back.

Collections are immutable tuples replaced wholesale. Each replacement is
computed from the collection as it is after the gateway await, so concurrent
operations on different notes do not lose each other's writes. Two
concurrent operations on the same note are not ordered: the last one to
resolve wins.
"""
import asyncio
import logging
import random
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from pydantic import ValidationError

from core.config import Settings
from core.palette import PALETTE, random_color
from schemas.board import BoardState
from schemas.layout import LayoutEntry
from schemas.note import Note
from services.exceptions import PersistenceError
from services.gateway import NoteGateway
from services.kv_store import KeyValueStore
from services.layout_service import LayoutService
from services.utils import max_z_index, next_note_id, replace_by_id

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _dump_notes(notes: Sequence[Note]) -> list[dict]:
    return [note.model_dump(mode="json") for note in notes]


class NoteLifecycleService:
    """
    Canonical note collection and its state transitions.

    Args:
        store: Key-value store the note collection is written through to.
        gateway: Remote mutation gateway every single-note change goes through.
        layouts: Layout engine sharing the same store.
        notes_key: Store key for the note collection.
        id_prefix: Prefix of allocated ids ("n" gives n1, n2, ...).
        rng: Randomness source for colour assignment.
        clock: Returns the current time for created_at/deleted_at.
    """

    def __init__(
        self,
        store: KeyValueStore,
        gateway: NoteGateway,
        layouts: LayoutService,
        notes_key: str = "sticky-notes",
        id_prefix: str = "n",
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._layouts = layouts
        self._notes_key = notes_key
        self.id_prefix = id_prefix
        self._rng = rng or random.Random()
        self._now = clock or _utcnow
        # Notes whose create/restore is awaiting the gateway; their ids and
        # z-indexes are reserved until the call settles.
        self._pending: dict[str, Note] = {}

        raw = store.load(notes_key, [])
        try:
            self._notes = tuple(Note.model_validate(record) for record in raw)
        except ValidationError as e:
            raise PersistenceError(
                f"Stored notes under {notes_key!r} are invalid: {e}", operation="load",
            ) from e

        reconciled = layouts.reconciled(self.active_notes)
        if reconciled != layouts.layouts:
            logger.info(
                "Reconciled stored layouts: %d entries -> %d",
                len(layouts.layouts),
                len(reconciled),
            )
            layouts.save(reconciled)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: KeyValueStore,
        gateway: NoteGateway,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> "NoteLifecycleService":
        """Build the engine and its layout engine from configuration."""
        layouts = LayoutService(store, settings.layouts_key, grid_cols=settings.grid_cols)
        return cls(
            store,
            gateway,
            layouts,
            notes_key=settings.notes_key,
            id_prefix=settings.note_id_prefix,
            rng=rng,
            clock=clock,
        )

    # --- Projections ---

    @property
    def notes(self) -> tuple[Note, ...]:
        """Every note, active and trashed, in collection order."""
        return self._notes

    @property
    def active_notes(self) -> list[Note]:
        """Notes on the board, in collection order."""
        return [note for note in self._notes if not note.is_deleted]

    @property
    def trashed_notes(self) -> list[Note]:
        """Notes in the trash, in collection order."""
        return [note for note in self._notes if note.is_deleted]

    @property
    def active_layouts(self) -> list[LayoutEntry]:
        """Layout entries of active notes, in persisted order."""
        return self._layouts.active_layouts(self.active_notes)

    @property
    def layout_service(self) -> LayoutService:
        """The layout engine kept in lockstep with this collection."""
        return self._layouts

    def board(self) -> BoardState:
        """Snapshot of everything the presentation layer renders."""
        active = self.active_notes
        trashed = self.trashed_notes
        return BoardState(
            notes=active,
            trashed_notes=trashed,
            layouts=self._layouts.active_layouts(active),
            palette=list(PALETTE),
            note_count=len(active),
            trashed_count=len(trashed),
        )

    def check_store(self) -> None:
        """Read the note collection back from the store; raises PersistenceError if it cannot."""
        self._store.load(self._notes_key, [])

    # --- Single-note operations (confirm-then-apply) ---

    async def create(self) -> Note:
        """
        Create an empty note at the front of the board.

        Returns:
            The created note.

        Raises:
            PersistenceError: If the gateway or store rejects the write. The
                collection is left unchanged.
        """
        note = Note(
            id=self._next_id(),
            text="",
            color=random_color(self._rng),
            z_index=self._next_z_index(),
            created_at=self._now(),
        )
        self._pending[note.id] = note
        try:
            saved = await self._gateway.save_note(note)
            self._commit(
                (*self._notes, saved),
                self._layouts.placed(saved.id, len(self.active_layouts)),
            )
        except PersistenceError as e:
            logger.warning("Failed to create note %s: %s", note.id, e)
            raise
        finally:
            self._pending.pop(note.id, None)
        logger.info("Created note %s", saved.id)
        return saved

    async def update(self, note: Note) -> Note:
        """
        Replace a note with an amended copy.

        This is a full replace, not a patch: callers merge unchanged fields
        themselves (e.g. note.model_copy(update={"text": ...})).

        Returns:
            The note as echoed by the gateway.

        Raises:
            ValueError: If the amended note is not a valid note (for example a
                colour outside the palette).
            PersistenceError: If the gateway or store rejects the write.
        """
        # model_copy skips validation, so amended copies are checked here
        note = Note.model_validate(note.model_dump())
        try:
            saved = await self._gateway.update_note(note)
            notes = replace_by_id(self._notes, saved)
            active = [n for n in notes if not n.is_deleted]
            self._commit(notes, self._layouts.reconciled(active))
        except PersistenceError as e:
            logger.warning("Failed to update note %s: %s", note.id, e)
            raise
        return saved

    async def soft_delete(self, note_id: str) -> Note | None:
        """
        Move an active note to the trash and drop its layout entry.

        Returns:
            The trashed note, or None if no active note has this id.
        """
        note = self._find(note_id)
        if note is None or note.is_deleted:
            return None
        trashed = note.model_copy(update={"is_deleted": True, "deleted_at": self._now()})
        try:
            saved = await self._gateway.update_note(trashed)
            self._commit(
                replace_by_id(self._notes, saved),
                self._layouts.without([note_id]),
            )
        except PersistenceError as e:
            logger.warning("Failed to delete note %s: %s", note_id, e)
            raise
        logger.info("Moved note %s to trash", note_id)
        return saved

    async def restore(self, note_id: str) -> Note | None:
        """
        Bring a trashed note back to the front of the board.

        The note keeps its id, text and colour, gets a z_index above every
        other note and a fresh default layout entry.

        Returns:
            The restored note, or None if no trashed note has this id (or a
            restore of it is already in flight).
        """
        note = self._find(note_id)
        if note is None or not note.is_deleted or note_id in self._pending:
            return None
        restored = note.model_copy(
            update={"is_deleted": False, "deleted_at": None, "z_index": self._next_z_index()},
        )
        self._pending[note_id] = restored
        try:
            await self._gateway.restore_note(note_id)
            if self._find(note_id) is None:
                logger.info("Note %s was purged while its restore was in flight", note_id)
                return None
            self._commit(
                replace_by_id(self._notes, restored),
                self._layouts.placed(note_id, len(self.active_layouts)),
            )
        except PersistenceError as e:
            logger.warning("Failed to restore note %s: %s", note_id, e)
            raise
        finally:
            self._pending.pop(note_id, None)
        logger.info("Restored note %s", note_id)
        return restored

    async def purge(self, note_id: str) -> bool:
        """
        Permanently remove a note and its layout entry.

        Returns:
            True if the note was purged, False if it does not exist.
        """
        if self._find(note_id) is None:
            return False
        try:
            await self._gateway.delete_note(note_id)
            self._commit(
                tuple(note for note in self._notes if note.id != note_id),
                self._layouts.without([note_id]),
            )
        except PersistenceError as e:
            logger.warning("Failed to purge note %s: %s", note_id, e)
            raise
        logger.info("Purged note %s", note_id)
        return True

    async def recolor(self, note_id: str, color: str) -> Note | None:
        """
        Change the colour of an active note.

        Returns:
            The updated note, or None if no active note has this id.
        """
        note = self._find(note_id)
        if note is None or note.is_deleted:
            return None
        return await self.update(note.model_copy(update={"color": color}))

    # --- Batch operations (optimistic) ---

    async def clear_all(self) -> list[Note]:
        """
        Move every active note to the trash.

        Each note is stamped with its own deleted_at. Local state is applied
        in one replace before the gateway confirmations are awaited.

        Returns:
            The trashed notes.

        Raises:
            PersistenceError: If any confirmation fails. The local transition
                is kept.
        """
        trashed = [
            note.model_copy(update={"is_deleted": True, "deleted_at": self._now()})
            for note in self.active_notes
        ]
        if not trashed:
            return []
        by_id = {note.id: note for note in trashed}
        self._commit(
            tuple(by_id.get(note.id, note) for note in self._notes),
            self._layouts.without(by_id),
        )
        logger.info("Moved %d notes to trash", len(trashed))
        await self._confirm_all(
            "clear all", [self._gateway.update_note(note) for note in trashed],
        )
        return trashed

    async def clear_trash(self) -> list[str]:
        """
        Permanently remove every trashed note and its layout entry.

        Returns:
            Ids of the purged notes.

        Raises:
            PersistenceError: If any gateway purge fails. The local removal
                is kept.
        """
        purged = [note.id for note in self.trashed_notes]
        if not purged:
            return []
        purged_ids = set(purged)
        self._commit(
            tuple(note for note in self._notes if note.id not in purged_ids),
            self._layouts.without(purged_ids),
        )
        logger.info("Purged %d notes from trash", len(purged))
        await self._confirm_all(
            "clear trash", [self._gateway.delete_note(note_id) for note_id in purged],
        )
        return purged

    # --- Layout ---

    def apply_user_layout(self, entries: Sequence[LayoutEntry]) -> list[LayoutEntry]:
        """
        Persist geometry produced by a user drag/resize.

        Entries for ids that are not active notes are ignored.

        Returns:
            The active layouts after the merge.
        """
        active_ids = {note.id for note in self.active_notes}
        accepted = [entry for entry in entries if entry.note_id in active_ids]
        if len(accepted) != len(entries):
            logger.debug("Ignored %d layout entries for inactive notes", len(entries) - len(accepted))
        self._layouts.apply_user_layout(accepted)
        return self.active_layouts

    # --- Private Helper Methods ---

    def _find(self, note_id: str) -> Note | None:
        return next((note for note in self._notes if note.id == note_id), None)

    def _next_id(self) -> str:
        known = [note.id for note in self._notes]
        known.extend(self._pending)
        return next_note_id(known, self.id_prefix)

    def _next_z_index(self) -> int:
        return max_z_index([*self._notes, *self._pending.values()]) + 1

    def _commit(
        self,
        notes: Sequence[Note],
        layouts: Sequence[LayoutEntry],
    ) -> None:
        """Write the next snapshots through to the store, then make them current."""
        snapshot = tuple(notes)
        self._store.store(self._notes_key, _dump_notes(snapshot))
        if tuple(layouts) != self._layouts.layouts:
            try:
                self._layouts.save(layouts)
            except PersistenceError:
                # Put the previous notes back so the store matches memory
                self._store.store(self._notes_key, _dump_notes(self._notes))
                raise
        self._notes = snapshot

    async def _confirm_all(self, label: str, calls: list) -> None:
        """Await every gateway call, then re-raise the first failure."""
        results = await asyncio.gather(*calls, return_exceptions=True)
        failures = [r for r in results if isinstance(r, BaseException)]
        if not failures:
            return
        logger.error(
            "%d of %d gateway confirmations failed for %s; local state kept",
            len(failures),
            len(results),
            label,
            exc_info=failures[0],
        )
        raise failures[0]
