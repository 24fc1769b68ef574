"""
auth/tokens.py -- Session token issue and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       user_id, username, iat and exp. Lifetime is fixed at 24 hours from
       issuance and is not configurable per user.

  Verification raises InvalidToken on every failure -- bad signature,
       malformed structure, missing claims, or expiry. The caller cannot tell
       which check failed, and neither can the client.

  Expiry is checked here rather than by jose. jose treats a token as valid
       while now <= exp; this service treats it as expired once now >= exp,
       so a token issued at T is rejected at exactly T + 24h.

  There is no revocation list. A token outlives logout, deactivation and
       account deletion until it expires.

Layer rule: no imports from api/ or client/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from jose import JWTError, jwt

from auth.models import TokenClaims
from core.config import get_settings
from core.errors import InvalidToken

logger = logging.getLogger("saltgate.auth")

_ALGORITHM = "HS256"

TOKEN_LIFETIME_SECONDS = 24 * 60 * 60


def _timestamp(now: datetime | None) -> int:
    return int((now or datetime.now(timezone.utc)).timestamp())


def create_access_token(user_id: int, username: str, now: datetime | None = None) -> str:
    """Encode a signed JWT for a freshly authenticated user.

    Args:
        user_id:  Numeric user ID stored in the DB.
        username: Stored both as the subject claim and as "username".
        now:      Issuance time. Defaults to the current UTC time; tests pass
                  a fixed value to exercise the expiry boundary.
    """
    issued_at = _timestamp(now)
    payload = {
        "sub": username,
        "user_id": user_id,
        "username": username,
        "iat": issued_at,
        "exp": issued_at + TOKEN_LIFETIME_SECONDS,
    }
    return jwt.encode(payload, get_settings().secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str, now: datetime | None = None) -> TokenClaims:
    """Verify a JWT and return its claims. Raises InvalidToken on any failure."""
    try:
        payload = jwt.decode(
            token,
            get_settings().secret_key,
            algorithms=[_ALGORITHM],
            options={"verify_exp": False},
        )
        claims = TokenClaims(
            user_id=int(payload["user_id"]),
            username=str(payload["username"]),
            issued_at=int(payload["iat"]),
            expires_at=int(payload["exp"]),
        )
    except (JWTError, KeyError, TypeError, ValueError) as exc:
        logger.debug("Token rejected: %s", type(exc).__name__)
        raise InvalidToken() from exc

    if _timestamp(now) >= claims.expires_at:
        logger.debug("Token rejected: expired")
        raise InvalidToken()
    return claims
