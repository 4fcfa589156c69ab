"""Key-value entry model backing the persistent store."""
from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin


class KeyValueEntry(Base, TimestampMixin):
    """
    One persisted key and its JSON-serializable value.

    The board keeps each of its collections (notes, layouts) and the theme
    preference under its own key, so every write replaces one whole value.
    """

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
