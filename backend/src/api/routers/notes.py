"""Sticky note lifecycle endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_note_service
from schemas.board import BoardState
from schemas.note import ColorUpdate, Note
from services.note_service import NoteLifecycleService

router = APIRouter(tags=["notes"])


@router.get("/board", response_model=BoardState)
async def get_board(
    notes: NoteLifecycleService = Depends(get_note_service),
) -> BoardState:
    """Active notes, trashed notes, active layouts, palette and counts."""
    return notes.board()


@router.post("/notes/", response_model=Note, status_code=201)
async def create_note(
    notes: NoteLifecycleService = Depends(get_note_service),
) -> Note:
    """Create an empty note with a random palette colour."""
    return await notes.create()


@router.post("/notes/clear", status_code=204)
async def clear_all_notes(
    notes: NoteLifecycleService = Depends(get_note_service),
) -> None:
    """
    Move every active note to the trash.

    Local state is applied before the gateway confirms; a gateway failure
    returns 502 but the notes stay in the trash.
    """
    await notes.clear_all()


@router.put("/notes/{note_id}", response_model=Note)
async def update_note(
    note_id: str,
    data: Note,
    notes: NoteLifecycleService = Depends(get_note_service),
) -> Note:
    """
    Replace a note with the full record in the body.

    This is not a patch: every field must be sent, unchanged ones included.
    """
    if data.id != note_id:
        raise HTTPException(status_code=422, detail="Note id in body does not match path")
    return await notes.update(data)


@router.patch("/notes/{note_id}/color", response_model=Note)
async def recolor_note(
    note_id: str,
    data: ColorUpdate,
    notes: NoteLifecycleService = Depends(get_note_service),
) -> Note:
    """Change the colour of an active note."""
    note = await notes.recolor(note_id, data.color)
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found")
    return note


@router.delete("/notes/{note_id}", status_code=204)
async def delete_note(
    note_id: str,
    permanent: bool = Query(default=False, description="Permanently delete if true"),
    notes: NoteLifecycleService = Depends(get_note_service),
) -> None:
    """
    Delete a note.

    By default moves it to the trash. Use ?permanent=true from the trash view
    to purge it. Deleting an already-trashed note is a no-op.
    """
    if permanent:
        await notes.purge(note_id)
    else:
        await notes.soft_delete(note_id)


@router.post("/notes/{note_id}/restore", status_code=204)
async def restore_note(
    note_id: str,
    notes: NoteLifecycleService = Depends(get_note_service),
) -> None:
    """Bring a trashed note back to the front of the board. No-op if not trashed."""
    await notes.restore(note_id)


@router.delete("/trash", status_code=204)
async def clear_trash(
    notes: NoteLifecycleService = Depends(get_note_service),
) -> None:
    """Permanently remove every trashed note."""
    await notes.clear_trash()
