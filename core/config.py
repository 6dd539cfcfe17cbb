"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the service happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY, password_min_length -> PASSWORD_MIN_LENGTH).

  Frozen value objects: components never receive Settings itself. They get
      PasswordPolicyConfig / TokenConfig built once at startup by
      Settings.password_policy() and Settings.token_config(). Both are frozen
      dataclasses, so concurrent readers need no locking.

Security notes:
  SECRET_KEY shorter than 32 chars is rejected outright. It is the HS256
  signing key for every issued token.

  In production mode (DEBUG not set or false), a missing SECRET_KEY is a hard
  startup failure.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
import secrets
from dataclasses import dataclass
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("employeeauth.config")

# Token lifetime of the reference behaviour: 8 hours.
DEFAULT_TOKEN_EXPIRE_SECONDS = 8 * 60 * 60


@dataclass(frozen=True)
class PasswordPolicyConfig:
    """Rules a password must satisfy. Loaded once, never mutated."""

    min_length: int = 12
    min_special_chars: int = 2
    allowed_special_chars: str = "@#!%&"


@dataclass(frozen=True)
class TokenConfig:
    """Signing material and claims fixed for every issued token."""

    key: str
    issuer: str
    audience: str
    expire_seconds: int = DEFAULT_TOKEN_EXPIRE_SECONDS


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file. The model_validator enforces
    production-safety rules at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""
    # Empty means the default SQLite file next to auth/store.py.
    database_url: str = ""
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    jwt_issuer: str = "EmployeeAuth"
    jwt_audience: str = "EmployeeAuth.Clients"
    token_expire_seconds: int = DEFAULT_TOKEN_EXPIRE_SECONDS

    # ------------------------------------------------------------------
    # Password policy
    # ------------------------------------------------------------------

    password_min_length: int = 12
    password_min_special_chars: int = 2
    password_allowed_special_chars: str = "@#!%&"
    # bcrypt cost factor. Tests lower this to keep the suite fast.
    bcrypt_rounds: int = 12

    # ------------------------------------------------------------------
    # Email
    # ------------------------------------------------------------------

    email_provider: str = "console"  # "console" or "smtp"
    email_from: str = "no-reply@employeeauth.local"
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_use_starttls: bool = True
    smtp_timeout: float = 10.0

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
        return self

    @model_validator(mode="after")
    def validate_email_provider(self) -> "Settings":
        provider = self.email_provider.strip().lower()
        if provider not in ("console", "smtp"):
            raise ValueError(f"EMAIL_PROVIDER must be 'console' or 'smtp', got {self.email_provider!r}.")
        self.email_provider = provider
        return self

    # ------------------------------------------------------------------
    # Derived immutable config
    # ------------------------------------------------------------------

    def password_policy(self) -> PasswordPolicyConfig:
        return PasswordPolicyConfig(
            min_length=self.password_min_length,
            min_special_chars=self.password_min_special_chars,
            allowed_special_chars=self.password_allowed_special_chars,
        )

    def token_config(self) -> TokenConfig:
        return TokenConfig(
            key=self.secret_key,
            issuer=self.jwt_issuer,
            audience=self.jwt_audience,
            expire_seconds=self.token_expire_seconds,
        )

    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    Uses lru_cache so Settings() is instantiated exactly once -- at first call.
    All modules should call get_settings() rather than constructing Settings()
    directly.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
