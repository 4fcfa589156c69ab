"""Pydantic schemas for sticky notes."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.palette import is_palette_color


class Note(BaseModel):
    """
    A sticky note on the board, active or in the trash.

    Notes are immutable snapshots: every mutation produces a new record via
    model_copy() and replaces the old one in the collection by id.

    deleted_at is set if and only if is_deleted is True.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    text: str = ""
    color: str
    z_index: int = Field(ge=0)
    created_at: datetime
    is_deleted: bool = False
    deleted_at: datetime | None = None

    @field_validator("color")
    @classmethod
    def check_palette_color(cls, v: str) -> str:
        """Colours are drawn from the palette; stored upper-case."""
        if not is_palette_color(v):
            raise ValueError(f"Color {v!r} is not in the palette")
        return v.upper()

    @model_validator(mode="after")
    def check_deleted_at_matches_flag(self) -> "Note":
        """Enforce that deleted_at is present exactly when the note is trashed."""
        if self.is_deleted and self.deleted_at is None:
            raise ValueError("deleted_at is required when is_deleted is true")
        if not self.is_deleted and self.deleted_at is not None:
            raise ValueError("deleted_at must be empty when is_deleted is false")
        return self


class ColorUpdate(BaseModel):
    """Schema for recolouring a note."""

    color: str

    @field_validator("color")
    @classmethod
    def check_palette_color(cls, v: str) -> str:
        """Only palette colours may be picked."""
        if not is_palette_color(v):
            raise ValueError(f"Color {v!r} is not in the palette")
        return v.upper()
