# -*- coding: utf-8 -*-
"""App settings persisted as a flat JSON object.

Keys: ``isDarkMode`` (bool), ``isLoggedIn`` (bool), ``userEmail`` (str).
Every setter writes the file immediately.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional
import json
import logging

from .db import PathLike

logger = logging.getLogger("quotejournal")

KEY_DARK_MODE = "isDarkMode"
KEY_LOGGED_IN = "isLoggedIn"
KEY_USER_EMAIL = "userEmail"


class SettingsStore:
    """Dark mode, login flag and remembered email."""

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)
        self._data: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        if self._data is not None:
            return self._data
        data: Dict[str, Any] = {}
        if self.path.exists():
            try:
                with self.path.open("r", encoding="utf-8") as f:
                    loaded = json.load(f)
                if isinstance(loaded, dict):
                    data = loaded
                else:
                    logger.warning("Ignoring settings file %s: not a JSON object", self.path)
            except json.JSONDecodeError:
                logger.warning("Ignoring unreadable settings file %s", self.path)
        self._data = data
        return data

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(self._load(), f, indent=2)

    def _get(self, key: str, expected: type, default: Any) -> Any:
        value = self._load().get(key)
        return value if isinstance(value, expected) else default

    def _set(self, key: str, value: Any) -> None:
        self._load()[key] = value
        self._save()

    async def set_dark_mode(self, value: bool) -> None:
        self._set(KEY_DARK_MODE, bool(value))

    async def get_dark_mode(self) -> bool:
        return self._get(KEY_DARK_MODE, bool, False)

    async def set_logged_in(self, value: bool) -> None:
        self._set(KEY_LOGGED_IN, bool(value))

    async def get_logged_in(self) -> bool:
        return self._get(KEY_LOGGED_IN, bool, False)

    async def set_user_email(self, email: str) -> None:
        self._set(KEY_USER_EMAIL, email)

    async def get_user_email(self) -> str:
        return self._get(KEY_USER_EMAIL, str, "")

    async def clear_user_data(self) -> None:
        """Log out: forget the login flag and email, keep everything else."""
        data = self._load()
        data.pop(KEY_LOGGED_IN, None)
        data.pop(KEY_USER_EMAIL, None)
        self._save()

    async def clear_all(self) -> None:
        self._data = {}
        self._save()
        logger.info("All settings cleared")

    async def close(self) -> None:
        self._data = None
