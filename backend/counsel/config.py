"""Counsel settings, read from the environment (and `.env`) by pydantic-settings."""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Scheme prefixes rewritten per driver; anything else passes through untouched
_ASYNC_SCHEMES = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
}
_SYNC_SCHEMES = {
    "postgres://": "postgresql://",
    "postgresql+asyncpg://": "postgresql://",
    "sqlite+aiosqlite://": "sqlite://",
}


def _swap_scheme(url: str, schemes: dict[str, str]) -> str:
    for prefix, replacement in schemes.items():
        if url.startswith(prefix):
            return replacement + url[len(prefix):]
    return url


class Settings(BaseSettings):
    """
    Runtime configuration.

    JWT_SECRET_KEY and RECOVERY_KEY_SECRET have no defaults; the app refuses
    to start without them.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Counsel"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database: either a full URL override or the Postgres parts
    database_url_override: str | None = None
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "counsel"
    postgres_password: str = ""
    postgres_db: str = "counsel"

    # Sessions
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24

    # Credentials and the downloadable recovery file
    bcrypt_rounds: int = 10
    recovery_key_secret: str
    allow_admin_registration: bool = False

    cors_origins: list[str] = ["http://localhost:3000"]

    def _postgres_url(self, scheme: str) -> str:
        return (
            f"{scheme}://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @computed_field
    @property
    def database_url(self) -> str:
        """URL for the async engine (asyncpg, or aiosqlite when overridden)."""
        if not self.database_url_override:
            return self._postgres_url("postgresql+asyncpg")
        # asyncpg rejects libpq query parameters such as sslmode
        url = self.database_url_override.split("?", 1)[0]
        return _swap_scheme(url, _ASYNC_SCHEMES)

    @computed_field
    @property
    def database_url_sync(self) -> str:
        """URL for Alembic (psycopg2 or pysqlite)."""
        if not self.database_url_override:
            return self._postgres_url("postgresql")
        return _swap_scheme(self.database_url_override, _SYNC_SCHEMES)


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging() -> None:
    """Apply the configured log level to the root logger."""
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def sanitize_error(error: Exception, *, generic_message: str = "An internal error occurred.") -> str:
    """Full error text in development, a generic message everywhere else."""
    if get_settings().environment == "development":
        return str(error)
    return generic_message
