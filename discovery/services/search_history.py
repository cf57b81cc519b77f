"""
Recent-search log persisted through a key-value store.

The log holds at most a few raw query strings, most recent first, without
duplicates. Persistence problems never reach the caller: a failed load yields
an empty history and a failed save keeps the history in memory only.
"""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Protocol

from discovery.config import get_settings

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_KEY = "searchHistory"
DEFAULT_MAX_LENGTH = 3


class KeyValueStore(Protocol):
    """String key-value persistence used for the history log."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryKeyValueStore:
    """
    Key-value store kept in process memory.

    Used when no database path is configured. Data is lost when the
    process restarts.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class SQLiteKeyValueStore:
    """SQLite-backed key-value store."""

    def __init__(self, db_path: str | Path):
        """Initialize the store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the database schema."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.commit()

    def get(self, key: str) -> str | None:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)",
                (key, value),
            )
            conn.commit()


def push_history(
    history: list[str],
    query: str,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> list[str]:
    """
    Return a new history with `query` moved to the front.

    Empty or whitespace-only queries leave the history unchanged. An
    existing identical entry is moved rather than duplicated, and the
    oldest entries beyond `max_length` are dropped.
    """
    term = query.strip() if query else ""
    if not term:
        return list(history)

    updated = [term] + [entry for entry in history if entry != term]
    return updated[:max_length]


class SearchHistoryStore:
    """
    Bounded, deduplicated recent-search log.

    Usage:
        store = SearchHistoryStore(InMemoryKeyValueStore())
        store.record("concert")
        store.suggestions("")  # ["concert"]
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = DEFAULT_HISTORY_KEY,
        max_length: int = DEFAULT_MAX_LENGTH,
    ):
        self._store = store
        self.key = key
        self.max_length = max_length
        self._history: list[str] = self.load()

    @property
    def history(self) -> list[str]:
        """Current history, most recent first."""
        return list(self._history)

    def load(self) -> list[str]:
        """Read the history from the store, falling back to an empty list."""
        try:
            raw = self._store.get(self.key)
        except Exception as e:
            logger.warning("Failed to load search history: %s", e)
            return []

        if not raw:
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding malformed search history payload")
            return []

        if not isinstance(data, list):
            logger.warning("Discarding search history of type %s", type(data).__name__)
            return []

        return [entry for entry in data if isinstance(entry, str)][: self.max_length]

    def persist(self, history: list[str]) -> None:
        """Write the history to the store. Failures are logged, not raised."""
        try:
            self._store.set(self.key, json.dumps(history))
        except Exception as e:
            logger.warning("Failed to persist search history: %s", e)

    def record(self, query: str) -> list[str]:
        """
        Record a confirmed search term.

        Args:
            query: Raw text from the search field on blur/submit

        Returns:
            The updated history
        """
        updated = push_history(self._history, query, self.max_length)
        if updated != self._history:
            self._history = updated
            self.persist(updated)
        return self.history

    def suggestions(self, current_query: str | None) -> list[str]:
        """History entries to display; only offered while the search field is empty."""
        if current_query and current_query.strip():
            return []
        return self.history

    def clear(self) -> None:
        """Forget every recorded term."""
        self._history = []
        self.persist([])


def create_history_store(db_path: str | Path | None = None) -> SearchHistoryStore:
    """
    Create a history store from settings.

    Uses SQLite persistence when a path is given or configured via
    DISCOVERY_HISTORY_DB_PATH, otherwise an in-memory store.
    """
    settings = get_settings()
    path = db_path or settings.history_db_path

    store: KeyValueStore
    if path:
        try:
            store = SQLiteKeyValueStore(path)
            logger.info("Search history persisted to %s", path)
        except (sqlite3.Error, OSError) as e:
            logger.warning("Search history database unavailable (%s), using memory", e)
            store = InMemoryKeyValueStore()
    else:
        store = InMemoryKeyValueStore()

    return SearchHistoryStore(
        store,
        key=settings.history_key,
        max_length=settings.history_max_length,
    )
