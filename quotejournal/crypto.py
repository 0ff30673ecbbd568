# -*- coding: utf-8 -*-
"""Credential helpers for QuoteJournal.

This module encapsulates *stateless* helpers used by the credential store.
It does **not** perform any database I/O.

Password hashing is a plain deterministic SHA-256 digest: the credential
store authenticates by looking up ``(email, digest)`` directly, so a salted
hash cannot be used here.
"""
from __future__ import annotations

from cryptography.hazmat.primitives import hashes


def hash_password(password: str) -> str:
    """Return the lowercase hex SHA-256 digest of *password* (UTF-8)."""
    digest = hashes.Hash(hashes.SHA256())
    digest.update(password.encode("utf-8"))
    return digest.finalize().hex()


def normalize_email(email: str) -> str:
    """Trim surrounding whitespace and lowercase."""
    return email.strip().lower()
