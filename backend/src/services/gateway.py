"""
Remote mutation gateway.

Every mutating note operation round-trips through the gateway before it is
considered durable. The simulated gateway models network latency with
asyncio.sleep and can reject calls, either at random or for selected
operations.
"""
import asyncio
import logging
import random
from collections.abc import Collection
from typing import Protocol

from core.config import Settings
from schemas.note import Note
from services.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class NoteGateway(Protocol):
    """Contract the lifecycle engine depends on for remote persistence."""

    async def save_note(self, note: Note) -> Note:
        """Persist a new note, echoing it back on success."""
        ...

    async def update_note(self, note: Note) -> Note:
        """Persist an amended note, echoing it back on success."""
        ...

    async def delete_note(self, note_id: str) -> None:
        """Permanently remove a note."""
        ...

    async def restore_note(self, note_id: str) -> None:
        """Notify the backend that a trashed note is active again."""
        ...


class SimulatedNoteGateway:
    """
    In-process stand-in for a network-backed notes API.

    Args:
        save_latency: Seconds a save_note round-trip takes.
        update_latency: Seconds an update_note round-trip takes.
        delete_latency: Seconds a delete_note round-trip takes.
        restore_latency: Seconds a restore_note round-trip takes.
        failure_rate: Probability in [0, 1] that any call is rejected.
        fail_on: Operation names that are always rejected.
        rng: Randomness source for failure injection.
    """

    def __init__(
        self,
        save_latency: float = 0.2,
        update_latency: float = 0.1,
        delete_latency: float = 0.15,
        restore_latency: float = 0.1,
        failure_rate: float = 0.0,
        fail_on: Collection[str] = (),
        rng: random.Random | None = None,
    ) -> None:
        if not 0 <= failure_rate <= 1:
            raise ValueError(f"failure_rate must be within [0, 1], got {failure_rate}")
        self._latencies = {
            "save_note": save_latency,
            "update_note": update_latency,
            "delete_note": delete_latency,
            "restore_note": restore_latency,
        }
        self.failure_rate = failure_rate
        self.fail_on = set(fail_on)
        self._rng = rng or random.Random()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SimulatedNoteGateway":
        """Build a gateway using the configured latencies and failure rate."""
        return cls(
            save_latency=settings.gateway_save_latency,
            update_latency=settings.gateway_update_latency,
            delete_latency=settings.gateway_delete_latency,
            restore_latency=settings.gateway_restore_latency,
            failure_rate=settings.gateway_failure_rate,
        )

    async def _round_trip(self, operation: str, note_id: str) -> None:
        logger.debug("Gateway %s(%s)", operation, note_id)
        await asyncio.sleep(self._latencies[operation])
        if operation in self.fail_on or (
            self.failure_rate and self._rng.random() < self.failure_rate
        ):
            raise PersistenceError(
                f"Gateway rejected {operation} for note {note_id}",
                operation=operation,
                note_id=note_id,
            )

    async def save_note(self, note: Note) -> Note:
        """Persist a new note, echoing it back on success."""
        await self._round_trip("save_note", note.id)
        return note

    async def update_note(self, note: Note) -> Note:
        """Persist an amended note, echoing it back on success."""
        await self._round_trip("update_note", note.id)
        return note

    async def delete_note(self, note_id: str) -> None:
        """Permanently remove a note."""
        await self._round_trip("delete_note", note_id)

    async def restore_note(self, note_id: str) -> None:
        """Notify the backend that a trashed note is active again."""
        await self._round_trip("restore_note", note_id)
