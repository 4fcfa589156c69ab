"""Pydantic schemas for grid layout entries."""
from pydantic import BaseModel, ConfigDict, Field, model_validator


class LayoutEntry(BaseModel):
    """
    Grid position and size of one active note.

    Coordinates are in grid units on a fixed-column grid. Vertical position is
    left to the rendering grid, which packs entries upward.
    """

    model_config = ConfigDict(frozen=True)

    note_id: str = Field(min_length=1)
    x: int = Field(ge=0)
    y: int = Field(ge=0)
    w: int = Field(ge=1)
    h: int = Field(ge=1)
    min_w: int = Field(default=2, ge=1)
    min_h: int = Field(default=3, ge=1)
    max_w: int = Field(default=8, ge=1)
    max_h: int = Field(default=12, ge=1)

    @model_validator(mode="after")
    def check_size_within_bounds(self) -> "LayoutEntry":
        """Validate that the size bounds are ordered and contain the size."""
        if not self.min_w <= self.w <= self.max_w:
            raise ValueError(f"w={self.w} is outside [{self.min_w}, {self.max_w}]")
        if not self.min_h <= self.h <= self.max_h:
            raise ValueError(f"h={self.h} is outside [{self.min_h}, {self.max_h}]")
        return self
