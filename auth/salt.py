"""
auth/salt.py -- Deterministic per-username salt derivation.

derive_salt() lets the server answer /api/get-salt identically for registered
and unregistered usernames without storing anything, so a client follows the
same hashing flow whether it is about to register or to log in.
"""

from __future__ import annotations

from auth.hashing import sha256_hex
from core.config import get_settings

SALT_LENGTH = 16  # hex characters


def derive_salt(username: str, pepper: str | None = None) -> str:
    """Return the first SALT_LENGTH hex chars of SHA-256(username + pepper).

    pepper defaults to Settings.salt_pepper. Pure function: same username,
    same pepper, same salt, before and after registration.
    """
    if pepper is None:
        pepper = get_settings().salt_pepper
    return sha256_hex(username + pepper)[:SALT_LENGTH]
