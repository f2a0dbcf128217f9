"""Durable local cache used as the fallback store for payment configuration.

The cache is a string-keyed, string-valued store. ``SqliteKeyValueStore``
keeps it in a single SQLite file next to the terminal; ``InMemoryKeyValueStore``
is used where nothing needs to survive a restart. Repositories follow the same
pattern as the rest of the client: expected failures are logged and reported
as None/False rather than raised.
"""

import json
import logging
import sqlite3
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from pydantic import TypeAdapter

from pos_ordering_client.models.payment_models import PaymentMethodConfig

logger = logging.getLogger(__name__)

PAYMENT_METHODS_CACHE_KEY = "payment_methods_config"

_payment_methods_adapter = TypeAdapter(list[PaymentMethodConfig])


class KeyValueStore(Protocol):
    """Minimal durable key-value store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Key-value store backed by a dict."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SqliteKeyValueStore:
    """Key-value store persisted in a SQLite file.

    Raises ``sqlite3.Error`` on storage failures; repositories decide how to
    degrade.
    """

    def __init__(self, db_path: str | Path) -> None:
        """Initialize the store and create its schema if needed.

        Args:
            db_path: Path of the SQLite file; parent directories are created
        """
        self.db_path = Path(db_path).expanduser()
        self._bootstrap_schema()

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.db_path)

    def _bootstrap_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_cache (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

    def get(self, key: str) -> str | None:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv_cache WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO kv_cache (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM kv_cache WHERE key = ?", (key,))


class PaymentMethodCacheRepository:
    """Repository for the cached payment method list.

    The full list is stored as one JSON document under a single well-known
    key.
    """

    def __init__(self, store: KeyValueStore, key: str = PAYMENT_METHODS_CACHE_KEY) -> None:
        """Initialize repository.

        Args:
            store: Durable key-value store
            key: Key holding the serialized method list
        """
        self.store = store
        self.key = key

    def save_methods(self, methods: Sequence[PaymentMethodConfig]) -> bool:
        """Replace the cached method list.

        Args:
            methods: Full method list to cache

        Returns:
            bool: True if the write succeeded, False otherwise
        """
        try:
            payload = _payment_methods_adapter.dump_json(list(methods), by_alias=True).decode()
            self.store.set(self.key, payload)
            return True

        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to cache payment methods: {e}")
            return False

    def load_entries(self) -> list[dict[str, Any]] | None:
        """Read the cached method list as raw entries.

        Entries are returned unvalidated so they can be overlaid on the
        default table; older caches may hold partial entries.

        Returns:
            list: Cached entries, or None if nothing is cached or the cache is unreadable
        """
        try:
            raw = self.store.get(self.key)
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to read payment method cache: {e}")
            return None

        if raw is None:
            return None

        try:
            entries = json.loads(raw)
        except ValueError as e:
            logger.error(f"Payment method cache is corrupt: {e}")
            return None

        if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
            logger.error("Payment method cache has unexpected shape")
            return None

        return entries

    def clear(self) -> bool:
        """Remove the cached method list.

        Returns:
            bool: True if delete succeeded, False otherwise
        """
        try:
            self.store.delete(self.key)
            return True

        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to clear payment method cache: {e}")
            return False
