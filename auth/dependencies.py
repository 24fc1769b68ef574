"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

The gate accepts exactly one credential: an "Authorization: Bearer <token>"
header carrying a session JWT. It performs no storage lookup -- a valid
signature and unexpired timestamp are the whole check, so a token keeps
working until expiry even if its user record changes.

  No header, a non-Bearer scheme, or an empty token -> MissingToken (401)
  Any verification failure                       -> InvalidToken (403)

get_auth_service() hands route handlers the service built in the lifespan.

Layer rule: may import from fastapi (for Request) because this module is part
of the FastAPI dependency injection system. No imports from api/.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import TokenClaims
from auth.service import AuthService
from auth.tokens import decode_access_token
from core.errors import MissingToken


def bearer_token(request: Request) -> str | None:
    """Return the token from an Authorization: Bearer header, or None."""
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def get_token_claims(request: Request) -> TokenClaims:
    """Require a valid bearer token and attach its claims to request.state.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(claims: TokenClaims = Depends(get_token_claims)): ...
    """
    token = bearer_token(request)
    if token is None:
        raise MissingToken()
    claims = decode_access_token(token)
    request.state.claims = claims
    return claims


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service
