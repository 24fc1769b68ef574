"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for SaltGate happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. salt_pepper -> SALT_PEPPER).

  @model_validator(mode="after"): DEBUG-conditional SECRET_KEY logic. Dev mode
      generates a key with a warning, production mode refuses to start without one.

Security notes:
  SECRET_KEY shorter than 32 chars is rejected outright. JWT signing relies on
  key entropy.

  SALT_PEPPER is mixed into every derived salt. Changing it changes every
  user's salt, which invalidates all stored client hashes. Treat it as fixed
  for the lifetime of a database.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or client/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("saltgate.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'auth' / 'saltgate_auth.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured". JWT_SECRET is accepted
    # as an alias for deployments migrated from the Node service.
    secret_key: str = Field(default="", validation_alias=AliasChoices("SECRET_KEY", "JWT_SECRET"))

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    salt_pepper: str = "server-pepper-secret"

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    # "memory://" selects InMemoryUserStore; anything else is a SQLAlchemy URL.
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    host: str = "127.0.0.1"
    port: int = 3000
    login_rate_limit: str = "10/minute"
    cors_origins: str = "http://localhost,http://localhost:3000,http://127.0.0.1"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Tokens will not survive restart -- acceptable for local dev.

        Production mode (DEBUG=false or not set): refuse to start if
            SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("WARNING: Using auto-generated SECRET_KEY. Tokens will not persist across restarts.")
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        if not self.salt_pepper:
            raise ValueError("SALT_PEPPER must not be empty.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
