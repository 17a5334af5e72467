# Settings — environment-driven configuration for the playdeck server.
# Created: 2026-10-19
#
# Variable names match the hosted deployment (SPOTIFY_CLIENT_ID, FRONTEND_ORIGIN, ...)
# so an existing .env keeps working.

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_REQUIRED = ("spotify_client_id", "spotify_client_secret", "session_secret")


class Settings(BaseSettings):
    """Server configuration loaded from the environment and an optional ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Spotify app registration
    spotify_client_id: str = ""
    spotify_client_secret: str = ""
    spotify_redirect_uri: str = "http://127.0.0.1:10000/callback"

    # Browser side
    frontend_origin: str = "http://localhost:5173"
    session_secret: str = ""
    session_ttl_hours: int = Field(default=168, ge=1)
    cookie_secure: bool = True
    cookie_samesite: Literal["lax", "strict", "none"] = "none"

    # Storage
    config_dir: Path = Field(
        default_factory=lambda: Path.home() / ".playdeck",
        validation_alias="PLAYDECK_HOME",
    )
    tokens_path: Path | None = None

    # Token lifecycle
    used_code_ttl_seconds: float = Field(default=300.0, gt=0)
    token_refresh_margin_seconds: float = Field(default=5.0, ge=5.0)
    strict_oauth_state: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 10000
    log_level: str = "INFO"

    @field_validator("frontend_origin", "spotify_redirect_uri")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def load(cls) -> Settings:
        """Build settings from the current environment."""
        return cls()

    def missing_required(self) -> list[str]:
        """Names of required variables that are unset."""
        return [name.upper() for name in _REQUIRED if not getattr(self, name)]


def get_config_dir(settings: Settings | None = None) -> Path:
    """Get/create the playdeck home directory."""
    d = (settings or get_settings()).config_dir
    d.mkdir(parents=True, exist_ok=True)
    return d


def get_oauth_dir(settings: Settings | None = None) -> Path:
    """Directory holding persisted credential records (TOKENS_PATH overrides)."""
    settings = settings or get_settings()
    return settings.tokens_path or (get_config_dir(settings) / "oauth")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings instance."""
    return Settings.load()
