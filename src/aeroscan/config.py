# Aeroscan configuration: pydantic-settings model loaded from env / .env.
# Created: 2026-10-02

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

LOG_LEVEL = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_HEADER_STRATEGIES = ["partner_raw", "partner_bearer", "authorization_bearer"]


def get_config_dir() -> Path:
    """Get/create the Aeroscan config directory (~/.aeroscan)."""
    d = Path.home() / ".aeroscan"
    d.mkdir(parents=True, exist_ok=True)
    return d


class Settings(BaseSettings):
    """Aeroscan settings.

    Every field can be set through an ``AEROSCAN_``-prefixed environment
    variable or a ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="AEROSCAN_",
        env_file=".env",
        extra="ignore",
    )

    # Server
    host: str = "127.0.0.1"
    port: int = 3001
    log_level: LOG_LEVEL = "INFO"
    cors_allowed_origins: list[str] = Field(default_factory=list)

    # Partner API
    partner_api_base: str = "https://seats.aero/partnerapi"
    api_key_header: str = "X-Seats-Api-Key"
    auth_header_strategies: list[str] = Field(
        default_factory=lambda: list(DEFAULT_HEADER_STRATEGIES)
    )
    upstream_timeout: float | None = 30.0
    health_timeout: float = 5.0

    # OAuth
    oauth_client_id: str | None = None
    oauth_client_secret: str | None = None
    oauth_redirect_uri: str | None = None
    oauth_authorize_url: str = "https://seats.aero/oauth2/consent"
    oauth_token_url: str = "https://seats.aero/oauth2/token"
    oauth_userinfo_url: str = "https://seats.aero/oauth2/userinfo"
    oauth_scope: str = "openid"
    oauth_state_ttl_seconds: int = Field(default=600, gt=0)
    oauth_result_ttl_seconds: int = Field(default=600, gt=0)

    # Profiles
    profile_dir: Path | None = None
    max_trips: int = Field(default=100, ge=1)
    scan_delay_seconds: float = Field(default=0.3, ge=0)

    @field_validator("partner_api_base")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def oauth_missing(self) -> list[str]:
        """Names of the OAuth settings that still need a value."""
        missing = []
        if not self.oauth_client_id:
            missing.append("oauth_client_id")
        if not self.oauth_client_secret:
            missing.append("oauth_client_secret")
        if not self.oauth_redirect_uri:
            missing.append("oauth_redirect_uri")
        return missing

    @property
    def oauth_enabled(self) -> bool:
        return not self.oauth_missing

    def resolved_profile_dir(self) -> Path:
        if self.profile_dir is not None:
            return self.profile_dir
        return get_config_dir() / "profiles"

    @classmethod
    def load(cls) -> Settings:
        """Build a fresh Settings instance from the environment."""
        settings = cls()
        if not settings.oauth_enabled:
            logger.debug("OAuth disabled, missing: %s", ", ".join(settings.oauth_missing))
        return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings (loaded once)."""
    return Settings.load()
