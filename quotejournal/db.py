#! /usr/bin/python3
# -*- coding: utf-8 -*-
"""Shared aiosqlite handle for the QuoteJournal stores.

Each store owns exactly one connection. It is opened on first use, kept for
the lifetime of the store and released by ``close()``.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union
import asyncio
import logging

import aiosqlite

logger = logging.getLogger("quotejournal")

PathLike = Union[str, Path]


# ---------------------------------------------------------------------
# Schema helpers
# ---------------------------------------------------------------------

async def column_exists(db: aiosqlite.Connection, table: str, column: str) -> bool:
    """Return True if `column` is present in `table`."""
    cur = await db.execute(f"PRAGMA table_info({table})")
    rows = await cur.fetchall()
    await cur.close()
    for r in rows:
        # PRAGMA table_info columns: cid, name, type, notnull, default_value, pk
        if len(r) >= 2 and r[1] == column:
            return True
    return False


async def get_user_version(db: aiosqlite.Connection) -> int:
    cur = await db.execute("PRAGMA user_version")
    row = await cur.fetchone()
    await cur.close()
    return int(row[0]) if row else 0


async def set_user_version(db: aiosqlite.Connection, version: int) -> None:
    # PRAGMA does not accept bound parameters.
    await db.execute(f"PRAGMA user_version = {int(version)}")


# ---------------------------------------------------------------------
# Connection / initialization
# ---------------------------------------------------------------------

class SqliteStore:
    """Base class: lazy connection plus a one-time ``_setup`` hook.

    Subclasses implement ``_setup(db)`` to create tables and run migrations.
    """

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)
        self._db: Optional[aiosqlite.Connection] = None
        self._open_lock = asyncio.Lock()

    async def _connection(self) -> aiosqlite.Connection:
        """Open the connection on first use, return the cached one afterwards."""
        if self._db is not None:
            return self._db
        async with self._open_lock:
            # Concurrent first calls wait here and reuse the winner's handle.
            if self._db is not None:
                return self._db
            if str(self.path) != ":memory:":
                self.path.parent.mkdir(parents=True, exist_ok=True)
            db = await aiosqlite.connect(str(self.path))
            db.row_factory = aiosqlite.Row
            try:
                await self._setup(db)
                await db.commit()
            except BaseException:
                await db.close()
                raise
            logger.debug("Opened %s at %s", type(self).__name__, self.path)
            self._db = db
            return db

    async def _setup(self, db: aiosqlite.Connection) -> None:
        raise NotImplementedError

    async def open(self) -> None:
        """Open eagerly (normally the first call does this)."""
        await self._connection()

    async def close(self) -> None:
        db = self._db
        if db is None:
            return
        self._db = None
        await db.close()

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
