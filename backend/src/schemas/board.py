"""Pydantic schemas for the board view handed to the presentation layer."""
from pydantic import BaseModel

from schemas.layout import LayoutEntry
from schemas.note import Note


class BoardState(BaseModel):
    """Everything needed to render the board and its trash panel."""

    notes: list[Note]
    trashed_notes: list[Note]
    layouts: list[LayoutEntry]
    palette: list[str]
    note_count: int
    trashed_count: int


class ThemePreference(BaseModel):
    """Persisted light/dark theme choice."""

    is_dark_mode: bool
