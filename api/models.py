"""
API request and response models for SaltGate REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py, which own the
internal domain representation. Route handlers map between the two.

Wire names are camelCase (clientHash, isNewUser, userId) for compatibility
with existing browser clients; Python attributes stay snake_case via aliases.
FastAPI serializes response_model output by alias.

Request fields are all Optional: a missing field is a protocol-level
ValidationError raised by AuthService with the message clients expect, not a
pydantic error.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import TokenClaims, User

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class SaltRequest(BaseModel):
    """Request body for POST /api/get-salt."""

    username: Optional[str] = None


class RegisterRequest(BaseModel):
    """Request body for POST /api/register.

    clientHash = SHA-256(password + salt), computed by the client.
    """

    model_config = ConfigDict(populate_by_name=True)

    username: Optional[str] = None
    email: Optional[str] = Field(default=None, max_length=255)
    client_hash: Optional[str] = Field(default=None, alias="clientHash", max_length=512)


class LoginRequest(BaseModel):
    """Request body for POST /api/login.

    clientHash = SHA-256(storedHash + nonce), computed by the client.
    """

    model_config = ConfigDict(populate_by_name=True)

    username: Optional[str] = None
    client_hash: Optional[str] = Field(default=None, alias="clientHash", max_length=512)
    nonce: Optional[str] = Field(default=None, max_length=512)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class SaltResponse(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    success: bool = True
    salt: str
    is_new_user: bool = Field(alias="isNewUser")


class RegisterResponse(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    success: bool = True
    message: str = "User registered successfully"
    user_id: int = Field(alias="userId")


class PublicUser(BaseModel):
    """The only user fields ever returned by /api/login. No hash, no salt."""

    model_config = ConfigDict(frozen=True)

    id: int
    username: str

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls(id=user.id, username=user.username)


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    message: str = "Login successful"
    token: str
    user: PublicUser


class ProfileUser(BaseModel):
    """Decoded token claims as returned by /api/profile."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_id: int = Field(alias="userId")
    username: str
    iat: int
    exp: int

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> "ProfileUser":
        return cls(
            user_id=claims.user_id,
            username=claims.username,
            iat=claims.issued_at,
            exp=claims.expires_at,
        )


class ProfileResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    user: ProfileUser


class ErrorResponse(BaseModel):
    """Envelope returned on every 4xx/5xx response."""

    model_config = ConfigDict(frozen=True)

    success: bool = False
    message: str
    code: str


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = {}
