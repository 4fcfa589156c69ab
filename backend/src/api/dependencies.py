"""FastAPI dependencies for injection."""
from fastapi import HTTPException

from core.config import get_settings
from services.note_service import NoteLifecycleService
from services.preferences_service import PreferencesService


# Global board state using a container to avoid global statement
class _BoardState:
    """Container for the services wired up at startup."""

    notes: NoteLifecycleService | None = None
    preferences: PreferencesService | None = None


_state = _BoardState()


def set_board_services(
    notes: NoteLifecycleService | None,
    preferences: PreferencesService | None,
) -> None:
    """Install (or clear, with None) the board services used by the routers."""
    _state.notes = notes
    _state.preferences = preferences


def get_note_service() -> NoteLifecycleService:
    """Get the note lifecycle engine; 503 before startup completes."""
    if _state.notes is None:
        raise HTTPException(status_code=503, detail="Board is not initialized")
    return _state.notes


def get_preferences_service() -> PreferencesService:
    """Get the preferences service; 503 before startup completes."""
    if _state.preferences is None:
        raise HTTPException(status_code=503, detail="Board is not initialized")
    return _state.preferences


__all__ = [
    "get_note_service",
    "get_preferences_service",
    "get_settings",
    "set_board_services",
]
