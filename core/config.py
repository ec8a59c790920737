"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the CV registry happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. jwt_secret -> JWT_SECRET). Type coercion and validation are built in.

Mandatory settings:
  JWT_SECRET and DATABASE_URL have no defaults. A missing or blank value is a
  hard startup failure (pydantic ValidationError raised by get_settings()),
  so the service can never run with an embedded signing key or a baked-in
  connection string.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or records/.
"""

import logging
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("cvregistry.config")

# SQLAlchemy 2.x no longer accepts the bare "postgres://" scheme that hosted
# Postgres providers hand out; it is rewritten to "postgresql://".
_POSTGRES_ALIAS = "postgres://"
_SUPPORTED_SCHEMES = ("postgresql", "sqlite")

_RECOMMENDED_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Environment variable name mapping: field names are uppercased automatically.
    E.g. `jwt_secret` reads from JWT_SECRET, `database_url` from DATABASE_URL.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Required
    # ------------------------------------------------------------------

    jwt_secret: str
    database_url: str

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    # 24 hours. Tokens are stateless; expiry is the only revocation.
    token_expire_seconds: int = 86400

    # ------------------------------------------------------------------
    # Store
    # ------------------------------------------------------------------

    store_timeout_seconds: float = 10.0
    # When true, 500 responses carry the driver error text in an "error" field.
    expose_store_errors: bool = True

    # ------------------------------------------------------------------
    # Runtime
    # ------------------------------------------------------------------

    debug: bool = False
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_SECRET must be set and non-empty.")
        if len(v) < _RECOMMENDED_SECRET_LENGTH:
            logger.warning(
                "JWT_SECRET is shorter than %d characters; use a longer random key.",
                _RECOMMENDED_SECRET_LENGTH,
            )
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("DATABASE_URL must be set and non-empty.")
        if v.startswith(_POSTGRES_ALIAS):
            v = "postgresql://" + v[len(_POSTGRES_ALIAS) :]
        scheme = v.split(":", 1)[0].split("+", 1)[0]
        if scheme not in _SUPPORTED_SCHEMES:
            raise ValueError("DATABASE_URL must be a PostgreSQL or SQLite URL (e.g. postgresql://user:pw@host/db).")
        return v

    @field_validator("token_expire_seconds")
    @classmethod
    def validate_token_expire_seconds(cls, v: int) -> int:
        if v < 1:
            raise ValueError("TOKEN_EXPIRE_SECONDS must be a positive number of seconds.")
        return v

    @field_validator("store_timeout_seconds")
    @classmethod
    def validate_store_timeout(cls, v: float) -> float:
        if v <= 0 or v > 300:
            raise ValueError("STORE_TIMEOUT_SECONDS must be greater than 0 and at most 300.")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL.")
        return level


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    Uses lru_cache so Settings() is instantiated exactly once -- at first call.
    All modules should call get_settings() rather than constructing Settings() directly.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
