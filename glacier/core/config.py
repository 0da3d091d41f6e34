# glacier/core/config.py
from __future__ import annotations

"""
# Glacier • Centralized Configuration (Pydantic v2)

Single `settings` object with strongly-typed, environment-driven config.

## Goals
- Safe defaults for local/dev; the download secret and storage root are
  explicit and the glacier routes stay disabled (503) until both are set.
- Database DSNs derived from the `POSTGRES_*` parts (sync + asyncpg).
- Components never read `settings` themselves; the router threads values
  into `ResourceStreamer` so the core stays testable without env setup.

## Usage
    from glacier.core.config import settings
"""

from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()  # harmless in prod; convenient in dev


# ─────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────
class Settings(BaseSettings):
    """
    Global application settings sourced from environment.

    Security:
        - `GLACIER_DOWNLOAD_SECRET` signs/verifies export capability tokens.
        - Only HMAC algorithms are accepted for those tokens.

    Storage:
        - `GLACIER_PATH` is the root holding `exports/` and `thumbs/`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # don't crash on unknown keys
    )

    # ── App meta ──────────────────────────────────────────────
    PROJECT_NAME: str = "Glacier API"
    VERSION: str = "1.0.0"
    API_PREFIX: str = ""
    ENV: Literal["development", "staging", "production"] = "development"
    ENABLE_DOCS: bool = True

    # ── Glacier storage & download tokens ─────────────────────
    GLACIER_PATH: Optional[Path] = None
    GLACIER_DOWNLOAD_SECRET: Optional[SecretStr] = None
    GLACIER_TOKEN_ALGORITHM: Literal["HS256", "HS384", "HS512"] = "HS256"
    GLACIER_TOKEN_EXPIRE_MINUTES: int = Field(60, ge=1, le=7 * 24 * 60)
    GLACIER_STREAM_CHUNK_SIZE: int = Field(64 * 1024, ge=1024, le=8 * 1024 * 1024)

    # ── Database (PostgreSQL) ─────────────────────────────────
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: SecretStr = SecretStr("postgres")
    POSTGRES_DB: str = "glacier"

    # ── Validators / normalizers ──────────────────────────────
    @field_validator("API_PREFIX", mode="before")
    @classmethod
    def _normalize_prefix(cls, v: str | None) -> str:
        """`''`, `'/'` and `'/glacier/'` become `''` and `'/glacier'`."""
        s = (v or "").strip().rstrip("/")
        if s and not s.startswith("/"):
            s = "/" + s
        return s

    @field_validator("GLACIER_DOWNLOAD_SECRET", mode="before")
    @classmethod
    def _blank_secret_is_unset(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    # ── Derived / convenience properties ─────────────────────
    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    @property
    def DATABASE_URL(self) -> str:
        """Sync DSN."""
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD.get_secret_value()}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def ASYNC_DATABASE_URL(self) -> str:
        """Async SQLAlchemy DSN."""
        return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")

    @property
    def download_secret(self) -> Optional[str]:
        """Plain download secret, or None when unset."""
        if self.GLACIER_DOWNLOAD_SECRET is None:
            return None
        return self.GLACIER_DOWNLOAD_SECRET.get_secret_value()


# Singleton instance
settings = Settings()
