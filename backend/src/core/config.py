"""Application configuration using pydantic-settings."""
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_NOTE_WIDTH = 3


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Key-value store
    database_url: str = Field(
        default="sqlite:///sticky_board.db", validation_alias="DATABASE_URL",
    )
    notes_key: str = Field(default="sticky-notes", validation_alias="NOTES_KEY")
    layouts_key: str = Field(default="sticky-notes-layout", validation_alias="LAYOUTS_KEY")
    theme_key: str = Field(default="theme-dark-mode", validation_alias="THEME_KEY")

    # Board
    note_id_prefix: str = Field(default="n", validation_alias="NOTE_ID_PREFIX")
    grid_cols: int = Field(default=12, validation_alias="GRID_COLS")

    # Simulated gateway round-trip times, in seconds
    gateway_save_latency: float = Field(
        default=0.2, ge=0, validation_alias="GATEWAY_SAVE_LATENCY",
    )
    gateway_update_latency: float = Field(
        default=0.1, ge=0, validation_alias="GATEWAY_UPDATE_LATENCY",
    )
    gateway_delete_latency: float = Field(
        default=0.15, ge=0, validation_alias="GATEWAY_DELETE_LATENCY",
    )
    gateway_restore_latency: float = Field(
        default=0.1, ge=0, validation_alias="GATEWAY_RESTORE_LATENCY",
    )
    gateway_failure_rate: float = Field(
        default=0.0, ge=0, le=1, validation_alias="GATEWAY_FAILURE_RATE",
    )

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:5173",
        validation_alias="CORS_ORIGINS",
    )

    @field_validator("note_id_prefix")
    @classmethod
    def check_prefix(cls, v: str) -> str:
        """
        Validate the note id prefix.

        A prefix ending in a digit would make the numeric suffix ambiguous
        (e.g. prefix "n1" and id "n12").
        """
        if not v:
            raise ValueError("NOTE_ID_PREFIX cannot be empty")
        if v[-1].isdigit():
            raise ValueError("NOTE_ID_PREFIX cannot end with a digit")
        return v

    @model_validator(mode="after")
    def check_grid_fits_note(self) -> "Settings":
        """Ensure a default-sized note fits on the grid."""
        if self.grid_cols < DEFAULT_NOTE_WIDTH:
            raise ValueError(
                f"GRID_COLS must be at least {DEFAULT_NOTE_WIDTH}, got {self.grid_cols}",
            )
        return self

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
