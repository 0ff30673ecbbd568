# -*- coding: utf-8 -*-
"""QuoteJournal package.

Modules:
    models:   Entry, User and Quote records.
    crypto:   Password hashing and email normalization.
    db:       Shared aiosqlite handle (lazy open, schema version helpers).
    entries:  Journal entry store.
    users:    Credential store.
    cache:    Quote cache (last quote, 7-day window, favorites).
    settings: App settings persisted as JSON.
    quotes:   Remote quote client and the cache/fetch orchestrator.
    logic:    Config plus the Journal object that composes the stores.
    app:      Console entrypoint.
"""

__all__ = [
    "app",
    "cache",
    "crypto",
    "db",
    "entries",
    "logic",
    "models",
    "quotes",
    "settings",
    "users",
]
