"""SQLAlchemy models."""
from models.base import Base, TimestampMixin
from models.kv_entry import KeyValueEntry

__all__ = [
    "Base",
    "KeyValueEntry",
    "TimestampMixin",
]
