"""
auth/service.py -- Salt lookup, registration, and challenge-verify login.

AuthService holds the protocol logic and nothing else: it receives a UserStore
at construction and raises core.errors types. It knows nothing about HTTP.

Login verification [enumeration-safe]:
  The stored value is h1 = SHA-256(password + salt). The client sends
  h2 = SHA-256(h1 + nonce) and the nonce. The server recomputes h2 from the
  stored h1 and compares in constant time.

  Unknown username, wrong hash, and inactive account all raise the same
  InvalidCredentials. For an unknown username the proof is still computed
  against _DUMMY_PASSWORD_HASH so both paths do the same work.

Known gap:
  The nonce is taken from the request as-is. Nothing issues it, remembers it,
  or expires it, so a captured (h2, nonce) pair can be replayed. Replay
  protection needs a server-issued, single-use challenge, which this service
  does not implement.

Layer rule: no imports from api/ or client/.
"""

from __future__ import annotations

import logging

from auth.hashing import hashes_match, login_proof, sha256_hex
from auth.models import User
from auth.salt import derive_salt
from auth.store import UserStore
from auth.tokens import create_access_token
from core.errors import InvalidCredentials, TransientStoreError, ValidationError

logger = logging.getLogger("saltgate.auth")

MAX_USERNAME_LENGTH = 255

# Same shape as a real stored hash (64 hex chars); matches no real client hash.
_DUMMY_PASSWORD_HASH = sha256_hex("saltgate_timing_dummy")


def _present(value: str | None) -> bool:
    return value is not None and value != ""


class AuthService:
    """The three public operations of the credential protocol."""

    def __init__(self, store: UserStore, pepper: str | None = None) -> None:
        self.store = store
        self.pepper = pepper

    def get_salt(self, username: str | None) -> tuple[str, bool]:
        """Return (salt, is_new_user) for a username, registered or not."""
        if not _present(username):
            raise ValidationError("Username required")
        user = self.store.get_by_username(username)
        if user is not None:
            return user.salt, False
        return derive_salt(username, self.pepper), True

    def register(self, username: str | None, email: str | None, client_hash: str | None) -> int:
        """Create a user whose password record is client_hash, verbatim.

        client_hash is expected to be SHA-256(password + derive_salt(username))
        but the server has no way to check that.
        """
        if not _present(username) or not _present(client_hash):
            raise ValidationError("Username and password hash are required")
        if len(username) > MAX_USERNAME_LENGTH:
            raise ValidationError(f"Username must be at most {MAX_USERNAME_LENGTH} characters")

        user = User(
            username=username,
            email=email or None,
            password_hash=client_hash,
            salt=derive_salt(username, self.pepper),
        )
        user_id = self.store.create_user(user)
        logger.info("Registered user id=%d", user_id)
        return user_id

    def login(self, username: str | None, client_hash: str | None, nonce: str | None) -> tuple[str, User]:
        """Verify a nonce-bound proof and return (token, user)."""
        if not (_present(username) and _present(client_hash) and _present(nonce)):
            raise ValidationError("Invalid login request")

        user = self.store.get_by_username(username)
        stored_hash = user.password_hash if user is not None else _DUMMY_PASSWORD_HASH
        matched = hashes_match(client_hash, login_proof(stored_hash, nonce))
        if user is None or not matched or not user.is_active:
            logger.info("Login rejected")
            raise InvalidCredentials()

        try:
            self.store.update_last_login(user.id)
        except TransientStoreError:
            logger.warning("Could not record last_login for user id=%d", user.id)

        token = create_access_token(user.id, user.username)
        logger.info("Login succeeded for user id=%d", user.id)
        return token, user
