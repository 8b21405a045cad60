# Health router: liveness plus a bounded upstream credential probe.
# Created: 2026-10-07

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from aeroscan.api.deps import optional_auth
from aeroscan.config import Settings, get_settings
from aeroscan.security.auth_resolver import ResolvedAuth
from aeroscan.upstream.partner import PartnerClient, get_partner_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: str = "ok"
    authenticated: bool = False
    authMode: str | None = None
    credentialValid: bool | None = None
    oauthEnabled: bool = False


@router.get("/health", response_model=HealthResponse)
async def health(
    auth: ResolvedAuth | None = Depends(optional_auth),
    partner: PartnerClient = Depends(get_partner_client),
    settings: Settings = Depends(get_settings),
):
    """Never fails on missing or conflicting credentials; reports them instead."""
    if auth is None:
        return HealthResponse(oauthEnabled=settings.oauth_enabled)

    return HealthResponse(
        authenticated=True,
        authMode=auth.mode.value,
        credentialValid=await partner.probe(auth),
        oauthEnabled=settings.oauth_enabled,
    )
