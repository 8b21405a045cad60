# Shared FastAPI dependencies for the API layer.
# Created: 2026-10-06

from __future__ import annotations

from fastapi import Depends, Request

from aeroscan.api.oauth2.client import TokenExchangeClient, get_token_client
from aeroscan.config import Settings, get_settings
from aeroscan.security.auth_resolver import ResolvedAuth, resolve_auth, resolve_auth_silent
from aeroscan.security.identity import OwnerIdentity, resolve_owner_identity


async def require_auth(
    request: Request, settings: Settings = Depends(get_settings)
) -> ResolvedAuth:
    """Resolve the caller's credential or fail with 400/401.

    Usage::

        @router.get("/search")
        async def search(auth: ResolvedAuth = Depends(require_auth)): ...
    """
    return resolve_auth(request.headers, settings.api_key_header)


async def optional_auth(
    request: Request, settings: Settings = Depends(get_settings)
) -> ResolvedAuth | None:
    """Silent variant for endpoints that degrade instead of failing."""
    return resolve_auth_silent(request.headers, settings.api_key_header)


async def require_owner(
    auth: ResolvedAuth = Depends(require_auth),
    token_client: TokenExchangeClient = Depends(get_token_client),
) -> OwnerIdentity:
    return await resolve_owner_identity(auth, token_client)
