# -*- coding: utf-8 -*-
"""SQLite-backed journal entry store.

Schema history (``PRAGMA user_version``):
    1: journal_entries(id, title, content, date)
    2: adds ``isFavorite INTEGER DEFAULT 0``
"""
from __future__ import annotations

from dataclasses import replace
from typing import List, Optional
import logging

import aiosqlite

from .db import SqliteStore, column_exists, get_user_version, set_user_version
from .models import Entry

logger = logging.getLogger("quotejournal")

SCHEMA_VERSION = 2

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS journal_entries (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    title       TEXT NOT NULL,
    content     TEXT NOT NULL,
    date        TEXT NOT NULL,
    isFavorite  INTEGER DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_entries_date ON journal_entries(date);
"""

ORDER_BY = "ORDER BY date DESC, id DESC"


def _contains_ci(haystack: Optional[str], needle: Optional[str]) -> int:
    """SQL function: 1 if *needle* occurs in *haystack*, ignoring case."""
    if haystack is None or needle is None:
        return 0
    return 1 if needle.casefold() in haystack.casefold() else 0


class EntryStore(SqliteStore):
    """CRUD, favorites and text search over ``journal_entries``."""

    async def _setup(self, db: aiosqlite.Connection) -> None:
        await db.create_function("contains_ci", 2, _contains_ci, deterministic=True)
        version = await get_user_version(db)
        await db.executescript(SCHEMA_SQL)
        # Files created before favorites existed keep their rows.
        if not await column_exists(db, "journal_entries", "isFavorite"):
            logger.info("Upgrading %s from schema v%d: adding isFavorite", self.path, version)
            await db.execute("ALTER TABLE journal_entries ADD COLUMN isFavorite INTEGER DEFAULT 0")
        if version < SCHEMA_VERSION:
            await set_user_version(db, SCHEMA_VERSION)

    async def _query(self, sql: str, params=()) -> List[Entry]:
        db = await self._connection()
        cur = await db.execute(sql, params)
        rows = await cur.fetchall()
        await cur.close()
        return [Entry.from_row(r) for r in rows]

    # -----------------------------------------------------------------
    # Create / read
    # -----------------------------------------------------------------

    async def insert(self, entry: Entry) -> int:
        """Insert *entry* and return the new id. ``entry.id`` is ignored."""
        db = await self._connection()
        cur = await db.execute(
            "INSERT INTO journal_entries (title, content, date, isFavorite) VALUES (?, ?, ?, ?)",
            (entry.title, entry.content, entry.date, 1 if entry.is_favorite else 0),
        )
        await db.commit()
        logger.debug("Inserted entry %s", cur.lastrowid)
        return cur.lastrowid

    async def get_all(self) -> List[Entry]:
        return await self._query(f"SELECT * FROM journal_entries {ORDER_BY}")

    async def get_by_id(self, entry_id: int) -> Optional[Entry]:
        rows = await self._query("SELECT * FROM journal_entries WHERE id = ?", (entry_id,))
        return rows[0] if rows else None

    async def search(self, query: str) -> List[Entry]:
        """Entries whose title or content contains *query*, ignoring case.

        Callers show ``get_all()`` for an empty query instead of calling this.
        """
        return await self._query(
            f"""
            SELECT * FROM journal_entries
             WHERE contains_ci(title, ?) OR contains_ci(content, ?)
             {ORDER_BY}
            """,
            (query, query),
        )

    async def get_favorites(self) -> List[Entry]:
        return await self._query(f"SELECT * FROM journal_entries WHERE isFavorite = 1 {ORDER_BY}")

    async def count(self) -> int:
        db = await self._connection()
        cur = await db.execute("SELECT COUNT(*) FROM journal_entries")
        row = await cur.fetchone()
        await cur.close()
        return int(row[0])

    # -----------------------------------------------------------------
    # Update / delete
    # -----------------------------------------------------------------

    async def update(self, entry: Entry) -> int:
        """Replace every field of the row ``entry.id``; return rows affected."""
        if entry.id is None:
            raise ValueError("Entry id is required for update")
        db = await self._connection()
        cur = await db.execute(
            """
            UPDATE journal_entries
               SET title = ?, content = ?, date = ?, isFavorite = ?
             WHERE id = ?
            """,
            (entry.title, entry.content, entry.date, 1 if entry.is_favorite else 0, entry.id),
        )
        await db.commit()
        return cur.rowcount

    async def toggle_favorite(self, entry: Entry) -> Entry:
        """Flip ``is_favorite`` on *entry*, persist it and return the new record."""
        updated = replace(entry, is_favorite=not entry.is_favorite)
        await self.update(updated)
        return updated

    async def delete(self, entry_id: int) -> int:
        db = await self._connection()
        cur = await db.execute("DELETE FROM journal_entries WHERE id = ?", (entry_id,))
        await db.commit()
        return cur.rowcount

    async def delete_all(self) -> int:
        db = await self._connection()
        cur = await db.execute("DELETE FROM journal_entries")
        await db.commit()
        logger.info("Deleted all %d journal entries", cur.rowcount)
        return cur.rowcount
