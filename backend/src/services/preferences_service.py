"""Service layer for persisted board preferences."""
import logging

from services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)


class PreferencesService:
    """Light/dark theme choice, written through to the key-value store."""

    def __init__(self, store: KeyValueStore, theme_key: str = "theme-dark-mode") -> None:
        self._store = store
        self._theme_key = theme_key

    @property
    def is_dark_mode(self) -> bool:
        """Current theme choice; light until the user picks otherwise."""
        return bool(self._store.load(self._theme_key, False))

    def set_dark_mode(self, enabled: bool) -> bool:
        """Persist the theme choice and return it."""
        self._store.store(self._theme_key, enabled)
        logger.debug("Dark mode set to %s", enabled)
        return enabled

    def toggle_theme(self) -> bool:
        """Flip between light and dark, returning the new choice."""
        return self.set_dark_mode(not self.is_dark_mode)
