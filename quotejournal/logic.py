# -*- coding: utf-8 -*-
"""Application logic that composes the stores.

This module provides the public API used by a front end. It contains no UI
code. ``Journal`` owns one instance of every store and is the only place
where they are wired together; callers pass it around instead of reaching
for module-level singletons.
"""
from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional
import json
import logging
import os
import re

from .cache import QuoteCache
from .entries import EntryStore
from .models import Entry, Quote, User
from .quotes import DEFAULT_API_URL, DEFAULT_TIMEOUT, QuoteService, ZenQuotesClient
from .settings import SettingsStore
from .users import CredentialStore

logger = logging.getLogger("quotejournal")

# ---------------------------------------------------------------------
# Config management (JSON on disk)
# ---------------------------------------------------------------------

APP_NAME = "quotejournal"
HOME_ENV = "QUOTEJOURNAL_HOME"

ENTRIES_DB = "journal_entries.sqlite3"
USERS_DB = "users.sqlite3"
QUOTES_DB = "quotes.sqlite3"
SETTINGS_FILE = "settings.json"

DEFAULT_CONFIG: Dict[str, object] = {
    # Empty means "next to config.json".
    "data_dir": "",
    "quote_api_url": DEFAULT_API_URL,
    "quote_timeout": DEFAULT_TIMEOUT,
    "log_level": "WARNING",
}

def _config_dir() -> Path:
    """Return the config directory path for this platform."""
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override).expanduser()
    if os.name == "nt":
        base = os.environ.get("APPDATA", os.path.expanduser("~\\AppData\\Roaming"))
        return Path(base) / APP_NAME
    base = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(base) / APP_NAME

def _config_path() -> Path:
    return _config_dir() / "config.json"

def load_config() -> Dict[str, object]:
    """Load the merged configuration (defaults + file)."""
    path = _config_path()
    if not path.exists():
        save_config(DEFAULT_CONFIG)
        return json.loads(json.dumps(DEFAULT_CONFIG))
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    merged = json.loads(json.dumps(DEFAULT_CONFIG))
    merged.update(data)
    return merged

def save_config(cfg: Dict[str, object]) -> None:
    """Persist *cfg* to the JSON config file."""
    _config_dir().mkdir(parents=True, exist_ok=True)
    with _config_path().open("w", encoding="utf-8") as f:
        json.dump(cfg, f, indent=2)

def data_dir(cfg: Dict[str, object]) -> Path:
    configured = str(cfg.get("data_dir") or "")
    return Path(configured).expanduser() if configured else _config_dir()


# ---------------------------------------------------------------------
# Caller-side validation
# ---------------------------------------------------------------------

MIN_PASSWORD_LEN = 6
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

def validate_entry(entry: Entry) -> None:
    if not entry.title.strip():
        raise ValueError("Title is required")
    if not entry.content.strip():
        raise ValueError("Content is required")

def validate_credentials(email: str, password: str) -> None:
    if not EMAIL_RE.match(email.strip()):
        raise ValueError("Invalid email address")
    if len(password) < MIN_PASSWORD_LEN:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LEN} characters")


# ---------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------

class Journal:
    """All stores of one installation plus the flows that span them."""

    def __init__(
        self,
        entries: EntryStore,
        users: CredentialStore,
        quote_cache: QuoteCache,
        settings: SettingsStore,
        quote_service: Optional[QuoteService] = None,
    ) -> None:
        self.entries = entries
        self.users = users
        self.quote_cache = quote_cache
        self.settings = settings
        self.quotes = quote_service or QuoteService(quote_cache)

    @classmethod
    def from_config(cls, cfg: Optional[Dict[str, object]] = None) -> "Journal":
        """Build a Journal whose files live in the configured data directory."""
        cfg = cfg if cfg is not None else load_config()
        base = data_dir(cfg)
        timeout = float(cfg.get("quote_timeout") or DEFAULT_TIMEOUT)
        cache = QuoteCache(base / QUOTES_DB)
        client = ZenQuotesClient(url=str(cfg.get("quote_api_url") or DEFAULT_API_URL), timeout=timeout)
        return cls(
            entries=EntryStore(base / ENTRIES_DB),
            users=CredentialStore(base / USERS_DB),
            quote_cache=cache,
            settings=SettingsStore(base / SETTINGS_FILE),
            quote_service=QuoteService(cache, fetcher=client.fetch, timeout=timeout),
        )

    async def close(self) -> None:
        """Close every store handle. Safe to call more than once."""
        await self.entries.close()
        await self.users.close()
        await self.quote_cache.close()
        await self.settings.close()

    async def __aenter__(self) -> "Journal":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # -----------------------------------------------------------------
    # Auth
    # -----------------------------------------------------------------

    async def _remember(self, user: User) -> None:
        await self.settings.set_user_email(user.email)
        await self.settings.set_logged_in(True)

    async def register_user(self, email: str, password: str, name: str) -> Optional[User]:
        """Register and log in; None if the email is already taken."""
        validate_credentials(email, password)
        if not name.strip():
            raise ValueError("Name is required")
        user_id = await self.users.register(email, password, name.strip())
        if user_id is None:
            return None
        user = await self.users.get_by_id(user_id)
        if user is not None:
            await self._remember(user)
        return user

    async def login(self, email: str, password: str) -> Optional[User]:
        user = await self.users.authenticate(email, password)
        if user is None:
            logger.info("Login failed")
            return None
        await self._remember(user)
        return user

    async def logout(self) -> None:
        await self.settings.clear_user_data()

    # -----------------------------------------------------------------
    # Entries
    # -----------------------------------------------------------------

    async def save_entry(self, entry: Entry) -> Entry:
        """Insert a new entry or fully replace an existing one."""
        validate_entry(entry)
        if entry.id is None:
            return replace(entry, id=await self.entries.insert(entry))
        await self.entries.update(entry)
        return entry

    async def list_entries(self, query: str = "") -> List[Entry]:
        """All entries, or those matching *query* when it is not blank."""
        query = query.strip()
        if not query:
            return await self.entries.get_all()
        return await self.entries.search(query)

    # -----------------------------------------------------------------
    # Quotes
    # -----------------------------------------------------------------

    async def toggle_quote_favorite(self, quote: Quote) -> Quote:
        state = await self.quote_cache.toggle_favorite(quote)
        return quote.with_favorite(state)

    # -----------------------------------------------------------------
    # Reset
    # -----------------------------------------------------------------

    async def reset_app(self) -> None:
        """Delete all entries, clear the quote cache and every setting."""
        await self.entries.delete_all()
        await self.quote_cache.clear_cache()
        await self.settings.clear_all()
        logger.info("Application data reset")
