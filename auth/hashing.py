"""
auth/hashing.py -- SHA-256 composition used by both ends of the protocol.

Protocol:
  salt          = derive_salt(username)                      (server, auth/salt.py)
  password_hash = sha256_hex(password + salt)                (client, sent on register)
  proof         = sha256_hex(password_hash + nonce)          (client, sent on login)

The server stores password_hash and recomputes proof from it, so the raw
password never leaves the client. All digests are lowercase hex.

Layer rule: stdlib only. client/ imports this module too.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets


def sha256_hex(value: str) -> str:
    """Return the lowercase hex SHA-256 digest of value's UTF-8 bytes."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def client_password_hash(password: str, salt: str) -> str:
    """First round: the value a client registers with."""
    return sha256_hex(password + salt)


def login_proof(password_hash: str, nonce: str) -> str:
    """Second round: the value a client logs in with for a given nonce."""
    return sha256_hex(password_hash + nonce)


def generate_nonce() -> str:
    """Return 256 random bits as 64 hex characters."""
    return secrets.token_hex(32)


def hashes_match(supplied: str, expected: str) -> bool:
    """Constant-time comparison of two hex digests.

    hmac.compare_digest only accepts ASCII str, so compare the UTF-8 bytes;
    a client may send arbitrary text in the hash field.
    """
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))
