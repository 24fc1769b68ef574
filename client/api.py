"""
client/api.py -- Python client for the SaltGate protocol.

Does the client half of the scheme so the password never leaves this process:

  salt  = POST /api/get-salt
  h1    = SHA-256(password + salt)        -> POST /api/register
  h2    = SHA-256(h1 + nonce)             -> POST /api/login

login() makes up its own nonce when none is given. The server does not issue
or track nonces, so this gives no replay protection on its own.

Any object with requests.Session's post()/get() signature can be passed as
session (tests pass a FastAPI TestClient).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from auth.hashing import client_password_hash, generate_nonce, login_proof

logger = logging.getLogger("saltgate.client")

DEFAULT_BASE_URL = "http://localhost:3000"
_TIMEOUT = 10


class ClientError(Exception):
    """Non-2xx response from the server, or no usable response at all."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class AuthClient:
    """Thin wrapper over the four SaltGate endpoints."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, session: Optional[Any] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _handle(self, resp) -> dict[str, Any]:
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not 200 <= resp.status_code < 300:
            raise ClientError(resp.status_code, data.get("message", "Unexpected response"))
        return data

    def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = self.session.post(self._url(path), json=body, timeout=_TIMEOUT)
        except requests.RequestException as e:
            logger.warning("POST %s failed: %s", path, e)
            raise ClientError(0, str(e)) from e
        return self._handle(resp)

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def get_salt(self, username: str) -> str:
        return self._post("/api/get-salt", {"username": username})["salt"]

    def register(self, username: str, password: str, email: Optional[str] = None) -> int:
        """Hash the password locally and register it. Returns the new user id."""
        salt = self.get_salt(username)
        body: dict[str, Any] = {"username": username, "clientHash": client_password_hash(password, salt)}
        if email:
            body["email"] = email
        return self._post("/api/register", body)["userId"]

    def login(self, username: str, password: str, nonce: Optional[str] = None) -> dict[str, Any]:
        """Prove knowledge of the password for a nonce. Returns the login response body."""
        salt = self.get_salt(username)
        nonce = nonce or generate_nonce()
        proof = login_proof(client_password_hash(password, salt), nonce)
        return self._post("/api/login", {"username": username, "clientHash": proof, "nonce": nonce})

    def profile(self, token: str) -> dict[str, Any]:
        try:
            resp = self.session.get(
                self._url("/api/profile"),
                headers={"Authorization": f"Bearer {token}"},
                timeout=_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.warning("GET /api/profile failed: %s", e)
            raise ClientError(0, str(e)) from e
        return self._handle(resp)["user"]
