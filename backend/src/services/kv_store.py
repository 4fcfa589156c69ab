"""
Persistent key-value store adapters.

The board engines need only two calls: a synchronous `load(key, default)` at
startup and a write-through `store(key, value)` on every state change. Values
are JSON-serializable (lists and dicts of primitives).
"""
import copy
import logging
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from models.kv_entry import KeyValueEntry
from services.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Contract the board engines depend on for durable state."""

    def load(self, key: str, default: Any) -> Any:
        """Return the value stored under key, or default if absent."""
        ...

    def store(self, key: str, value: Any) -> None:
        """Durably replace the value stored under key."""
        ...


class SqlKeyValueStore:
    """Key-value store backed by a single SQLAlchemy table."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def load(self, key: str, default: Any) -> Any:
        """Return the value stored under key, or default if absent."""
        try:
            with self._session_factory() as session:
                entry = session.execute(
                    select(KeyValueEntry).where(KeyValueEntry.key == key),
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load key {key!r}: {e}", operation="load") from e
        if entry is None:
            return default
        return entry.value

    def store(self, key: str, value: Any) -> None:
        """Insert or replace the value under key in its own transaction."""
        try:
            with self._session_factory.begin() as session:
                entry = session.get(KeyValueEntry, key)
                if entry is None:
                    session.add(KeyValueEntry(key=key, value=value))
                else:
                    entry.value = value
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to store key {key!r}: {e}", operation="store") from e
        logger.debug("Stored key %s", key)


class InMemoryKeyValueStore:
    """
    Process-local store; nothing survives a restart.

    Values are deep-copied on the way in and out so callers can never mutate
    what is stored.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def load(self, key: str, default: Any) -> Any:
        """Return the value stored under key, or default if absent."""
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def store(self, key: str, value: Any) -> None:
        """Replace the value stored under key."""
        self._data[key] = copy.deepcopy(value)
