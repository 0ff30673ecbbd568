# -*- coding: utf-8 -*-
"""Quote cache: quote of the day, rolling 7-day window and favorite quotes.

Storage is a single ``kv(namespace, key, value)`` table; values are JSON.

Namespace ``quotes``:
    lastQuote       {"text", "author", "isFavorite"}
    lastQuoteDate   "YYYY-MM-DD"
    weeklyQuotes    [{"quote": {...}, "date": "YYYY-MM-DD"}, ...]  (oldest first, <= 7)
    favoriteQuotes  [{"id": [text, author], "quote": {...}}, ...]
    favoriteQuote   legacy single favorite, folded into favoriteQuotes on upgrade
    schemaVersion   2 once the legacy favorite has been handled

Namespace ``settings``:
    lastOpenDate    "YYYY-MM-DD"

Records that fail to decode are logged and treated as absent.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple
import json
import logging
import random

import aiosqlite

from .db import SqliteStore, PathLike
from .models import Quote, WeeklyQuote

logger = logging.getLogger("quotejournal")

QUOTES_NS = "quotes"
SETTINGS_NS = "settings"

KEY_LAST_QUOTE = "lastQuote"
KEY_LAST_QUOTE_DATE = "lastQuoteDate"
KEY_WEEKLY_QUOTES = "weeklyQuotes"
KEY_FAVORITE_QUOTES = "favoriteQuotes"
KEY_LEGACY_FAVORITE = "favoriteQuote"
KEY_SCHEMA_VERSION = "schemaVersion"
KEY_LAST_OPEN_DATE = "lastOpenDate"

CACHE_VERSION = 2
WEEKLY_LIMIT = 7

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS kv (
    namespace   TEXT NOT NULL,
    key         TEXT NOT NULL,
    value       TEXT NOT NULL,
    PRIMARY KEY (namespace, key)
);
"""

Identity = Tuple[str, str]


# ---------------------------------------------------------------------
# Record decoding
# ---------------------------------------------------------------------

def decode_quote(value: Any) -> Optional[Quote]:
    """Decode a stored quote object; None if *value* is not one."""
    if not isinstance(value, dict):
        return None
    return Quote.from_stored(value)


def decode_weekly(value: Any) -> List[WeeklyQuote]:
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning("Ignoring malformed %s record", KEY_WEEKLY_QUOTES)
        return []
    out: List[WeeklyQuote] = []
    for item in value:
        quote = decode_quote(item.get("quote")) if isinstance(item, dict) else None
        if quote is None:
            logger.warning("Skipping malformed weekly quote item: %r", item)
            continue
        out.append(WeeklyQuote(quote=quote, date=str(item.get("date") or "")))
    return out


def decode_favorites(value: Any) -> List[Tuple[Identity, Quote]]:
    """Decode the favorite set into ``(identity, quote)`` pairs."""
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning("Ignoring malformed %s record", KEY_FAVORITE_QUOTES)
        return []
    out: List[Tuple[Identity, Quote]] = []
    for item in value:
        quote = decode_quote(item.get("quote")) if isinstance(item, dict) else None
        if quote is None:
            logger.warning("Skipping malformed favorite quote item: %r", item)
            continue
        key = item.get("id")
        if isinstance(key, list) and len(key) == 2 and all(isinstance(k, str) for k in key):
            identity = (key[0], key[1])
        else:
            identity = quote.identity
        out.append((identity, quote.with_favorite(True)))
    return out


def encode_favorite(quote: Quote) -> Dict[str, Any]:
    return {"id": list(quote.identity), "quote": quote.with_favorite(True).to_json()}


# ---------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------

class QuoteCache(SqliteStore):
    """Key-value quote cache. ``rng`` drives the offline fallback pick."""

    def __init__(self, path: PathLike, rng: Optional[random.Random] = None) -> None:
        super().__init__(path)
        self._rng = rng or random.Random()

    async def _setup(self, db: aiosqlite.Connection) -> None:
        await db.executescript(SCHEMA_SQL)
        version = await self._get(db, QUOTES_NS, KEY_SCHEMA_VERSION)
        if not isinstance(version, int) or version < CACHE_VERSION:
            await self._upgrade(db)

    async def _upgrade(self, db: aiosqlite.Connection) -> None:
        """Fold the legacy single favorite into the favorite set, once."""
        favorites = decode_favorites(await self._get(db, QUOTES_NS, KEY_FAVORITE_QUOTES))
        legacy = await self._get(db, QUOTES_NS, KEY_LEGACY_FAVORITE)
        if not favorites and legacy is not None:
            quote = decode_quote(legacy)
            if quote is None:
                logger.warning("Dropping malformed legacy favorite quote: %r", legacy)
            else:
                await self._put(db, QUOTES_NS, KEY_FAVORITE_QUOTES, [encode_favorite(quote)])
                logger.info("Migrated legacy favorite quote into the favorites set")
            await self._delete(db, QUOTES_NS, KEY_LEGACY_FAVORITE)
        await self._put(db, QUOTES_NS, KEY_SCHEMA_VERSION, CACHE_VERSION)

    # -----------------------------------------------------------------
    # Raw key-value access
    # -----------------------------------------------------------------

    @staticmethod
    async def _get(db: aiosqlite.Connection, namespace: str, key: str) -> Any:
        cur = await db.execute(
            "SELECT value FROM kv WHERE namespace = ? AND key = ?", (namespace, key)
        )
        row = await cur.fetchone()
        await cur.close()
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError:
            logger.warning("Ignoring undecodable cache value %s/%s", namespace, key)
            return None

    @staticmethod
    async def _put(db: aiosqlite.Connection, namespace: str, key: str, value: Any) -> None:
        await db.execute(
            "INSERT OR REPLACE INTO kv (namespace, key, value) VALUES (?, ?, ?)",
            (namespace, key, json.dumps(value, ensure_ascii=False)),
        )

    @staticmethod
    async def _delete(db: aiosqlite.Connection, namespace: str, key: str) -> None:
        await db.execute("DELETE FROM kv WHERE namespace = ? AND key = ?", (namespace, key))

    async def _read(self, key: str, namespace: str = QUOTES_NS) -> Any:
        return await self._get(await self._connection(), namespace, key)

    # -----------------------------------------------------------------
    # Quote of the day + rolling window
    # -----------------------------------------------------------------

    async def save_quote(self, quote: Quote, date: str) -> None:
        """Store *quote* as the last quote for *date* and push it on the window."""
        db = await self._connection()
        stored = quote.with_favorite(False)
        window = decode_weekly(await self._get(db, QUOTES_NS, KEY_WEEKLY_QUOTES))
        window.append(WeeklyQuote(quote=stored, date=date))
        window = window[-WEEKLY_LIMIT:]

        await self._put(db, QUOTES_NS, KEY_LAST_QUOTE, stored.to_json())
        await self._put(db, QUOTES_NS, KEY_LAST_QUOTE_DATE, date)
        await self._put(db, QUOTES_NS, KEY_WEEKLY_QUOTES, [w.to_json() for w in window])
        await db.commit()
        logger.debug("Cached quote for %s (window size %d)", date, len(window))

    async def get_last_quote(self) -> Optional[Quote]:
        return decode_quote(await self._read(KEY_LAST_QUOTE))

    async def get_last_quote_date(self) -> str:
        value = await self._read(KEY_LAST_QUOTE_DATE)
        return value if isinstance(value, str) else ""

    async def is_from_today(self, current_date: str) -> bool:
        return await self.get_last_quote_date() == current_date

    async def get_weekly_window(self) -> List[WeeklyQuote]:
        """The window as ``(quote, date)`` records, oldest first."""
        return decode_weekly(await self._read(KEY_WEEKLY_QUOTES))

    async def get_weekly_quotes(self) -> List[Quote]:
        return [w.quote for w in await self.get_weekly_window()]

    async def get_weekly_quotes_with_favorites(self) -> List[Quote]:
        """Window quotes, each flagged against the favorite set."""
        favorites = {identity for identity, _ in await self._favorites()}
        return [q.with_favorite(q.identity in favorites) for q in await self.get_weekly_quotes()]

    async def get_random_cached_quote(self) -> Optional[Quote]:
        quotes = await self.get_weekly_quotes()
        if not quotes:
            return None
        return self._rng.choice(quotes)

    # -----------------------------------------------------------------
    # Favorites
    # -----------------------------------------------------------------

    async def _favorites(self) -> List[Tuple[Identity, Quote]]:
        return decode_favorites(await self._read(KEY_FAVORITE_QUOTES))

    async def get_favorite_quotes(self) -> List[Quote]:
        return [quote for _, quote in await self._favorites()]

    async def is_favorited(self, quote: Quote) -> bool:
        return any(identity == quote.identity for identity, _ in await self._favorites())

    async def add_favorite(self, quote: Quote) -> None:
        """Add *quote* to the favorite set; no-op if already there."""
        favorites = await self._favorites()
        if any(identity == quote.identity for identity, _ in favorites):
            return
        favorites.append((quote.identity, quote.with_favorite(True)))
        await self._write_favorites([q for _, q in favorites])

    async def remove_favorite(self, quote: Quote) -> None:
        favorites = await self._favorites()
        kept = [q for identity, q in favorites if identity != quote.identity]
        if len(kept) == len(favorites):
            return
        await self._write_favorites(kept)

    async def toggle_favorite(self, quote: Quote) -> bool:
        """Flip membership of *quote*; return the new state."""
        if await self.is_favorited(quote):
            await self.remove_favorite(quote)
            return False
        await self.add_favorite(quote)
        return True

    async def _write_favorites(self, quotes: List[Quote]) -> None:
        db = await self._connection()
        await self._put(db, QUOTES_NS, KEY_FAVORITE_QUOTES, [encode_favorite(q) for q in quotes])
        await db.commit()

    # -----------------------------------------------------------------
    # Housekeeping
    # -----------------------------------------------------------------

    async def clear_cache(self) -> None:
        """Wipe the whole quote namespace: last quote, window and favorites."""
        db = await self._connection()
        await db.execute("DELETE FROM kv WHERE namespace = ?", (QUOTES_NS,))
        await self._put(db, QUOTES_NS, KEY_SCHEMA_VERSION, CACHE_VERSION)
        await db.commit()
        logger.info("Quote cache cleared")

    async def save_last_open_date(self, date: str) -> None:
        db = await self._connection()
        await self._put(db, SETTINGS_NS, KEY_LAST_OPEN_DATE, date)
        await db.commit()

    async def get_last_open_date(self) -> str:
        value = await self._read(KEY_LAST_OPEN_DATE, namespace=SETTINGS_NS)
        return value if isinstance(value, str) else ""
