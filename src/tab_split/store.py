"""Tab persistence: the in-memory tab list and its key-value blob stores."""

import logging
import sqlite3
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from typing import Protocol
from uuid import UUID

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from .exceptions import DuplicateTabError, PersistenceError
from .models import Tab

logger = logging.getLogger(__name__)

_TAB_LIST = TypeAdapter(list[Tab])


# ============================================================================
# Blob stores
# ============================================================================


class BlobStore(Protocol):
    """A durable key-value store holding opaque byte blobs."""

    def read(self, key: str) -> bytes | None: ...

    def write(self, key: str, data: bytes) -> None: ...


class MemoryBlobStore:
    """Dict-backed blob store for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, bytes] | None = None):
        self.blobs: dict[str, bytes] = dict(initial or {})

    def read(self, key: str) -> bytes | None:
        return self.blobs.get(key)

    def write(self, key: str, data: bytes) -> None:
        self.blobs[key] = data


class SqliteBlobStore:
    """SQLite-backed blob store."""

    def __init__(self, db_path: Path):
        """Initialize database connection."""
        self.db_path = db_path
        try:
            self.conn = sqlite3.connect(str(db_path))
            self._init_schema()
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open blob store {db_path}: {e}") from e

    def _init_schema(self):
        """Initialize database schema."""
        self.conn.execute(
            """
            CREATE TABLE IF NOT EXISTS blobs (
                key TEXT PRIMARY KEY,
                value BLOB NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """
        )
        self.conn.commit()

    def close(self):
        """Close database connection."""
        self.conn.close()

    def read(self, key: str) -> bytes | None:
        """Get a blob by key."""
        try:
            row = self.conn.execute(
                "SELECT value FROM blobs WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read {key!r}: {e}") from e
        return bytes(row[0]) if row else None

    def write(self, key: str, data: bytes) -> None:
        """Insert or replace a blob."""
        try:
            self.conn.execute(
                """
                INSERT INTO blobs (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, data, datetime.now().isoformat()),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to write {key!r}: {e}") from e


# ============================================================================
# Tab store
# ============================================================================


class TabStore:
    """Authoritative list of tabs, written through to a blob store.

    Every mutation serializes the whole list and writes it under one key.
    Tabs go in validated and come out as copies, so the list only changes
    through these methods. Operations on an unknown tab id are no-ops and
    return False.
    """

    def __init__(self, blob_store: BlobStore, key: str = "saved_tabs"):
        """Initialize the store and load any persisted tabs."""
        self.blob_store = blob_store
        self.key = key
        self._tabs: list[Tab] = self._load()

    @property
    def tabs(self) -> list[Tab]:
        """Snapshot of the tabs in insertion order."""
        return [tab.model_copy(deep=True) for tab in self._tabs]

    def __len__(self) -> int:
        return len(self._tabs)

    def __iter__(self) -> Iterator[Tab]:
        return iter(self.tabs)

    def __contains__(self, tab_id: object) -> bool:
        return any(tab.id == tab_id for tab in self._tabs)

    def get(self, tab_id: UUID) -> Tab | None:
        """Get a copy of a tab by id."""
        index = self._index_of(tab_id)
        return self._tabs[index].model_copy(deep=True) if index is not None else None

    # ========================================================================
    # Mutations
    # ========================================================================

    def append(self, tab: Tab) -> bool:
        """Add a newly created tab; invalid tabs are rejected."""
        if tab.id in self:
            raise DuplicateTabError(tab.id)

        stored = _revalidate(tab)
        if stored is None:
            return False

        self._tabs.append(stored)
        logger.info(f"Added tab {tab.id} ({tab.restaurant_name})")
        self._save()
        return True

    def update(self, tab: Tab) -> bool:
        """Replace the stored tab with the same id, recomputing its total."""
        index = self._index_of(tab.id)
        if index is None:
            logger.debug(f"Update skipped, tab {tab.id} not found")
            return False

        updated = _revalidate(tab)
        if updated is None:
            return False

        updated.recalc_total()
        self._tabs[index] = updated
        logger.info(f"Updated tab {tab.id}, total: ${updated.total_amount:.2f}")
        self._save()
        return True

    def mark_reminded(self, tab_id: UUID, friend_id: UUID) -> bool:
        """Record that a friend was reminded about a tab."""
        index = self._index_of(tab_id)
        if index is None:
            return False
        tab = self._tabs[index]
        if not tab.has_reminded(friend_id):
            tab.mark_reminded(friend_id)
            self._save()
        return True

    def mark_settled(self, tab_id: UUID) -> bool:
        return self._set_settled(tab_id, True)

    def mark_active(self, tab_id: UUID) -> bool:
        return self._set_settled(tab_id, False)

    def delete(self, tab_id: UUID) -> bool:
        """Remove a tab."""
        index = self._index_of(tab_id)
        if index is None:
            logger.debug(f"Delete skipped, tab {tab_id} not found")
            return False
        del self._tabs[index]
        logger.info(f"Deleted tab {tab_id}")
        self._save()
        return True

    # ========================================================================
    # Internals
    # ========================================================================

    def _index_of(self, tab_id: UUID) -> int | None:
        for index, tab in enumerate(self._tabs):
            if tab.id == tab_id:
                return index
        return None

    def _set_settled(self, tab_id: UUID, settled: bool) -> bool:
        index = self._index_of(tab_id)
        if index is None:
            return False
        self._tabs[index].is_settled = settled
        logger.info(f"Tab {tab_id} marked {'settled' if settled else 'active'}")
        self._save()
        return True

    def _load(self) -> list[Tab]:
        try:
            data = self.blob_store.read(self.key)
            if data is None:
                return []
            tabs = _TAB_LIST.validate_json(data)
        except (PersistenceError, ValidationError):
            logger.exception(f"Failed to load tabs from {self.key!r}, starting empty")
            return []

        logger.info(f"Loaded {len(tabs)} tabs")
        return tabs

    def _save(self):
        try:
            self.blob_store.write(self.key, _TAB_LIST.dump_json(self._tabs))
        except (PersistenceError, PydanticSerializationError):
            logger.exception(f"Failed to save {len(self._tabs)} tabs")


def _revalidate(tab: Tab) -> Tab | None:
    """Fresh, fully validated copy of a tab, or None if it would not reload."""
    try:
        return Tab.model_validate(tab.model_dump())
    except ValidationError:
        logger.exception(f"Rejected invalid tab {tab.id}")
        return None
