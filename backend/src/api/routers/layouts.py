"""Grid layout endpoints."""
from fastapi import APIRouter, Depends

from api.dependencies import get_note_service
from schemas.layout import LayoutEntry
from services.note_service import NoteLifecycleService

router = APIRouter(prefix="/layouts", tags=["layouts"])


@router.get("/", response_model=list[LayoutEntry])
async def list_layouts(
    notes: NoteLifecycleService = Depends(get_note_service),
) -> list[LayoutEntry]:
    """Layout entries of active notes."""
    return notes.active_layouts


@router.put("/", response_model=list[LayoutEntry])
async def apply_layout(
    entries: list[LayoutEntry],
    notes: NoteLifecycleService = Depends(get_note_service),
) -> list[LayoutEntry]:
    """
    Save geometry after a user drag or resize.

    Send the entries of the visible notes; entries for other notes are kept,
    entries for notes that are not active are ignored.
    """
    return notes.apply_user_layout(entries)
