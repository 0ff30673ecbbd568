# -*- coding: utf-8 -*-
"""Plain records shared by the stores.

Row mapping uses the persisted column names (``isFavorite``, ``createdAt``);
the Python attributes are snake_case.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

DEFAULT_QUOTE_TEXT = "Stay motivated!"
DEFAULT_QUOTE_AUTHOR = "Unknown"


# ---------------------------------------------------------------------
# Journal entries
# ---------------------------------------------------------------------

@dataclass
class Entry:
    """A journal entry. ``id`` is None until the store assigns one."""

    title: str
    content: str
    date: str
    is_favorite: bool = False
    id: Optional[int] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Entry":
        return cls(
            id=row["id"],
            title=row["title"],
            content=row["content"],
            date=row["date"],
            is_favorite=row["isFavorite"] == 1,
        )


# ---------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------

@dataclass
class User:
    """A registered user; ``password`` always holds the hex digest once stored."""

    email: str
    password: str
    name: str
    created_at: str
    id: Optional[int] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "User":
        return cls(
            id=row["id"],
            email=row["email"],
            password=row["password"],
            name=row["name"],
            created_at=row["createdAt"],
        )


# ---------------------------------------------------------------------
# Quotes
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Quote:
    """A quote. Equality and hashing cover only ``(text, author)``."""

    text: str
    author: str
    is_favorite: bool = field(default=False, compare=False)

    @property
    def identity(self) -> Tuple[str, str]:
        return (self.text, self.author)

    def with_favorite(self, value: bool) -> "Quote":
        return Quote(self.text, self.author, is_favorite=value)

    def to_json(self) -> Dict[str, Any]:
        return {"text": self.text, "author": self.author, "isFavorite": self.is_favorite}

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "Quote":
        """Build from a provider payload (``q``/``a`` or ``text``/``author``)."""
        return cls(
            text=_first_text(payload, "q", "text") or DEFAULT_QUOTE_TEXT,
            author=_first_text(payload, "a", "author") or DEFAULT_QUOTE_AUTHOR,
        )

    @classmethod
    def from_stored(cls, payload: Mapping[str, Any]) -> "Quote":
        return cls(
            text=_first_text(payload, "text") or DEFAULT_QUOTE_TEXT,
            author=_first_text(payload, "author") or DEFAULT_QUOTE_AUTHOR,
            is_favorite=payload.get("isFavorite") is True,
        )


@dataclass(frozen=True)
class WeeklyQuote:
    """One slot of the rolling 7-day window."""

    quote: Quote
    date: str

    def to_json(self) -> Dict[str, Any]:
        return {"quote": self.quote.to_json(), "date": self.date}


def _first_text(payload: Mapping[str, Any], *keys: str) -> Optional[str]:
    # Missing and null both fall through to the next key.
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return str(value)
    return None
