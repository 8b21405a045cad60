# OAuth schemas.
# Created: 2026-10-06

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class OAuthStatusResponse(BaseModel):
    """Which OAuth settings are in place (never the values themselves)."""

    model_config = ConfigDict(populate_by_name=True)

    enabled: bool
    has_client_id: bool = Field(serialization_alias="hasClientId")
    has_client_secret: bool = Field(serialization_alias="hasClientSecret")
    redirect_uri: str | None = Field(serialization_alias="redirectUri")


class RefreshRequest(BaseModel):
    """Body of POST /oauth/refresh."""

    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(..., alias="refreshToken", min_length=1)


class RefreshResponse(BaseModel):
    success: bool = True
    token: dict[str, Any]
