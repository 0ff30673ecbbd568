# -*- coding: utf-8 -*-
"""Credential store: local user records with hashed passwords.

Emails are normalized (trimmed, lowercased) before every comparison and
write. Authentication never says whether the email or the password was
wrong; both come back as ``None``.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional
import logging

import aiosqlite

from .crypto import hash_password, normalize_email
from .db import SqliteStore, get_user_version, set_user_version
from .models import User

logger = logging.getLogger("quotejournal")

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    email       TEXT UNIQUE NOT NULL,
    password    TEXT NOT NULL,
    name        TEXT NOT NULL,
    createdAt   TEXT NOT NULL
);
"""


class CredentialStore(SqliteStore):
    """Registration, authentication and profile lookups over ``users``."""

    async def _setup(self, db: aiosqlite.Connection) -> None:
        await db.executescript(SCHEMA_SQL)
        if await get_user_version(db) < SCHEMA_VERSION:
            await set_user_version(db, SCHEMA_VERSION)

    async def _fetch_one(self, sql: str, params=()) -> Optional[User]:
        db = await self._connection()
        cur = await db.execute(sql, params)
        row = await cur.fetchone()
        await cur.close()
        return User.from_row(row) if row else None

    async def register(
        self,
        email: str,
        password: str,
        name: str,
        created_at: Optional[str] = None,
    ) -> Optional[int]:
        """Create a user and return its id, or None if the email is taken."""
        email = normalize_email(email)
        if await self.get_by_email(email) is not None:
            logger.info("Registration refused: email already registered")
            return None

        created_at = created_at or datetime.now(timezone.utc).isoformat()
        db = await self._connection()
        cur = await db.execute(
            "INSERT INTO users (email, password, name, createdAt) VALUES (?, ?, ?, ?)",
            (email, hash_password(password), name, created_at),
        )
        await db.commit()
        logger.info("Registered user %s", cur.lastrowid)
        return cur.lastrowid

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user matching *email* and *password*, else None."""
        return await self._fetch_one(
            "SELECT * FROM users WHERE email = ? AND password = ?",
            (normalize_email(email), hash_password(password)),
        )

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self._fetch_one(
            "SELECT * FROM users WHERE email = ?", (normalize_email(email),)
        )

    async def get_by_id(self, user_id: int) -> Optional[User]:
        return await self._fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))

    async def list_all(self) -> List[User]:
        """All users, newest first."""
        db = await self._connection()
        cur = await db.execute("SELECT * FROM users ORDER BY createdAt DESC, id DESC")
        rows = await cur.fetchall()
        await cur.close()
        return [User.from_row(r) for r in rows]

    async def update(self, user: User) -> int:
        """Write every field of *user* to row ``user.id``; return rows affected.

        ``user.password`` is stored as given, so pass a digest (e.g. the value
        read back from this store, or ``hash_password(new_secret)``).
        """
        db = await self._connection()
        cur = await db.execute(
            """
            UPDATE users
               SET email = ?, password = ?, name = ?, createdAt = ?
             WHERE id = ?
            """,
            (normalize_email(user.email), user.password, user.name, user.created_at, user.id),
        )
        await db.commit()
        return cur.rowcount

    async def delete(self, user_id: int) -> int:
        db = await self._connection()
        cur = await db.execute("DELETE FROM users WHERE id = ?", (user_id,))
        await db.commit()
        return cur.rowcount
