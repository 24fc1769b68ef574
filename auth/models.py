"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and services do
the work; routes map these onto the pydantic transport models in api/models.py.

Layer rule: no imports from api/ or client/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered identity.

    password_hash is the client-computed SHA-256(password + salt), stored
    verbatim. It is NOT a plaintext password and NOT an adaptive hash, and it
    must never be serialized into a response.

    salt is always equal to derive_salt(username); it is stored so the record
    is self-describing if the pepper is ever audited.
    """

    username: str
    password_hash: str
    salt: str
    id: int | None = None
    email: str | None = None
    is_active: bool = True
    created_at: str | None = None
    last_login: str | None = None  # ISO 8601 timestamp of last successful login


@dataclass(frozen=True)
class TokenClaims:
    """Verified contents of a session token. Timestamps are Unix seconds."""

    user_id: int
    username: str
    issued_at: int
    expires_at: int
