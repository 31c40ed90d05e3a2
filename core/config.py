"""
core/config.py -- Jobly settings, read once from the environment.

Every tunable lives on Settings. Modules call get_settings() rather than
reading os.environ themselves, so tests can override a value by setting the
matching env var (SECRET_KEY, DATABASE_URL, BCRYPT_ROUNDS, ...) before the
first call, or by calling get_settings.cache_clear().

Values come from, in order of precedence: process environment, a .env file
in the working directory, the defaults below.

Signing key policy:
  DEBUG=true without SECRET_KEY -> a random key is generated per process
  (tokens die with the process) and a warning is logged.
  DEBUG=false without SECRET_KEY -> startup fails.
  Any SECRET_KEY under 32 characters -> startup fails.

Layer rule: core/ imports from no other Jobly package.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("jobly.config")

_DEFAULT_DB_URL = f"sqlite+aiosqlite:///{Path(__file__).parent.parent / 'jobly.db'}"
_MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Runtime configuration for the API process.

    Every field has a default, so the suite only needs DEBUG=true to build one.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    debug: bool = False
    # "" means unset; resolved by require_secret_key below.
    secret_key: str = ""

    # Any SQLAlchemy async URL: sqlite+aiosqlite:///... or
    # postgresql+asyncpg://user:pw@host/db
    database_url: str = _DEFAULT_DB_URL

    # Tokens
    token_expire_seconds: int = 8 * 3600

    # bcrypt cost factor; the suite runs at 4.
    bcrypt_rounds: int = 12

    # HTTP surface
    login_rate_limit: str = "10/minute"
    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost", "testserver"]
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    @field_validator("bcrypt_rounds")
    @classmethod
    def check_bcrypt_rounds(cls, value: int) -> int:
        if not 4 <= value <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31.")
        return value

    @field_validator("token_expire_seconds")
    @classmethod
    def check_token_lifetime(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("TOKEN_EXPIRE_SECONDS must be positive.")
        return value

    @model_validator(mode="after")
    def require_secret_key(self) -> "Settings":
        """Fill in or reject SECRET_KEY according to the module's key policy."""
        if not self.secret_key and self.debug:
            self.secret_key = secrets.token_hex(_MIN_SECRET_LENGTH)
            logger.warning("SECRET_KEY not set; generated a throwaway key for this DEBUG process.")
        elif not self.secret_key:
            raise ValueError("SECRET_KEY must be set when DEBUG is off.")

        if len(self.secret_key) < _MIN_SECRET_LENGTH:
            raise ValueError(f"SECRET_KEY must be at least {_MIN_SECRET_LENGTH} characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Build Settings on first call and return the same instance afterwards."""
    return Settings()
