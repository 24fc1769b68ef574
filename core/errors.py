"""
core/errors.py -- Typed error taxonomy for SaltGate.

Every failure the service reports to a client is one of these classes. Each
carries its HTTP status, a machine-readable code, and the client-facing
message. api/main.py translates them into responses in a single exception
handler; route handlers never build error responses themselves.

InvalidCredentials covers both "unknown username" and "wrong hash". The two
cases must be indistinguishable to the caller, so there is deliberately no
subclass or attribute that tells them apart.

Layer rule: core/ is the kernel. No imports from api/, auth/, or client/.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for every error surfaced at the HTTP boundary."""

    status_code: int = 500
    code: str = "server_error"
    default_message: str = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid request"


class ConflictError(AuthError):
    status_code = 409
    code = "conflict"
    default_message = "Username already exists"


class InvalidCredentials(AuthError):
    status_code = 401
    code = "invalid_credentials"
    default_message = "Invalid credentials"


class MissingToken(AuthError):
    status_code = 401
    code = "missing_token"
    default_message = "Access token required"


class InvalidToken(AuthError):
    status_code = 403
    code = "invalid_token"
    default_message = "Invalid token"


class TransientStoreError(AuthError):
    """Storage was unreachable or failed mid-operation.

    The message is always the generic one; the underlying driver error is
    chained (raise ... from exc) for the server log, never sent to clients.
    """

    status_code = 500
    code = "server_error"
    default_message = "Server error"
