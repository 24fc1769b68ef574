"""
api/routes/auth.py -- Salt, registration, login, and profile endpoints.

Routes:
  POST /api/get-salt   -- salt for a username (registered or not)
  POST /api/register   -- store a client-computed password hash; 201
  POST /api/login      -- verify a nonce-bound proof; returns a session JWT
  GET  /api/profile    -- decoded token claims (requires bearer token)

Handlers translate between pydantic transport models and AuthService calls.
They never build error responses: AuthService and the auth gate raise
core.errors types, and api/main.py maps those to status codes in one place.

Security:
  POST /login is rate-limited per client IP (Settings.login_rate_limit).
  Unknown username and wrong hash return the identical 401 body.
  Cache-Control: no-store on login responses.
  No response carries password_hash. salt is only returned by /get-salt.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import (
    LoginRequest,
    LoginResponse,
    ProfileResponse,
    ProfileUser,
    PublicUser,
    RegisterRequest,
    RegisterResponse,
    SaltRequest,
    SaltResponse,
)
from auth.dependencies import get_auth_service, get_token_claims
from auth.models import TokenClaims
from auth.service import AuthService
from core.config import get_settings

# Auth policy:
# - POST /api/get-salt:  public
# - POST /api/register:  public -- self-registration is the only way to create users
# - POST /api/login:     public, rate-limited
# - GET  /api/profile:   requires bearer token (get_token_claims)
router = APIRouter()


@router.post("/get-salt", response_model=SaltResponse)
def get_salt(body: SaltRequest, service: AuthService = Depends(get_auth_service)) -> SaltResponse:
    """Return the salt the client must mix into its password hash.

    The same username always yields the same salt, before and after
    registration, so clients run one hashing flow for both cases.
    """
    salt, is_new_user = service.get_salt(body.username)
    return SaltResponse(salt=salt, is_new_user=is_new_user)


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(body: RegisterRequest, service: AuthService = Depends(get_auth_service)) -> RegisterResponse:
    """Create an account from a client-computed password hash."""
    user_id = service.register(body.username, body.email, body.client_hash)
    return RegisterResponse(user_id=user_id)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(lambda: get_settings().login_rate_limit)  # evaluated per request
def login(request: Request, body: LoginRequest, service: AuthService = Depends(get_auth_service)) -> JSONResponse:
    """Verify SHA-256(storedHash + nonce) and issue a 24-hour token.

    The nonce is accepted from the request body without server-side issuance
    or single-use tracking. See auth/service.py.
    """
    token, user = service.login(body.username, body.client_hash, body.nonce)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(token=token, user=PublicUser.from_user(user)).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/profile", response_model=ProfileResponse)
def profile(claims: TokenClaims = Depends(get_token_claims)) -> ProfileResponse:
    """Return the identity embedded in the caller's token."""
    return ProfileResponse(user=ProfileUser.from_claims(claims))
