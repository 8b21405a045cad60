# OAuth router: start, callback, one-time result, refresh.
# Created: 2026-10-06
#
# Callback failures are never surfaced as HTTP errors: every outcome is
# stored as a one-time result and handed to the opener via the callback
# page, so the app always receives {success, ...} from /oauth/result/{id}.

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from aeroscan.api.oauth2.callback_page import render_callback_page
from aeroscan.api.oauth2.client import TokenExchangeClient, get_token_client
from aeroscan.api.oauth2.models import OAuthResultPayload
from aeroscan.api.oauth2.origin import sanitize_origin
from aeroscan.api.oauth2.storage import ResultStore, StateStore, get_result_store, get_state_store
from aeroscan.api.v1.schemas.oauth import OAuthStatusResponse, RefreshRequest, RefreshResponse
from aeroscan.config import Settings, get_settings
from aeroscan.errors import ConfigError, NotFound, TokenExchangeFailed
from aeroscan.security.rate_limiter import (
    client_key,
    oauth_limiter,
    refresh_limiter,
    too_many_requests,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["OAuth"])


@router.get("/oauth/status", response_model=OAuthStatusResponse)
async def oauth_status(settings: Settings = Depends(get_settings)):
    """Report whether the OAuth integration is configured."""
    return OAuthStatusResponse(
        enabled=settings.oauth_enabled,
        has_client_id=bool(settings.oauth_client_id),
        has_client_secret=bool(settings.oauth_client_secret),
        redirect_uri=settings.oauth_redirect_uri,
    )


@router.get("/oauth/start")
async def oauth_start(
    request: Request,
    origin: str | None = Query(None),
    states: StateStore = Depends(get_state_store),
    token_client: TokenExchangeClient = Depends(get_token_client),
):
    """Mint a CSRF state and redirect to the seats.aero consent screen."""
    retry_after = oauth_limiter.acquire(client_key(request))
    if retry_after:
        return too_many_requests(retry_after)

    token_client.require_config()
    state = states.create(sanitize_origin(origin))
    return RedirectResponse(token_client.build_authorize_url(state), status_code=302)


async def _complete_callback(
    code: str, state: str, token_client: TokenExchangeClient
) -> OAuthResultPayload:
    try:
        token = await token_client.exchange_code(code, state=state)
    except TokenExchangeFailed as e:
        return OAuthResultPayload.failure(e.message)
    except ConfigError:
        return OAuthResultPayload.failure("OAuth is not configured")

    user = await token_client.fetch_user_info(token.access_token)
    return OAuthResultPayload(
        success=True,
        token=token,
        user=user.raw if user is not None else None,
    )


@router.get("/oauth/callback", response_class=HTMLResponse)
async def oauth_callback(
    request: Request,
    code: str = Query(""),
    state: str = Query(""),
    error: str = Query(""),
    error_description: str = Query(""),
    states: StateStore = Depends(get_state_store),
    results: ResultStore = Depends(get_result_store),
    token_client: TokenExchangeClient = Depends(get_token_client),
):
    """Consume the state, exchange the code, and render the hand-off page."""
    retry_after = oauth_limiter.acquire(client_key(request))
    if retry_after:
        return too_many_requests(retry_after)

    entry = states.consume(state) if state else None
    origin = entry.origin if entry else None

    if error:
        logger.info("OAuth provider returned error: %s", error)
        payload = OAuthResultPayload.failure(error_description or error)
    elif entry is None:
        payload = OAuthResultPayload.failure("Invalid or expired OAuth state")
    elif not code:
        payload = OAuthResultPayload.failure("Missing authorization code")
    else:
        payload = await _complete_callback(code, state, token_client)

    result_id = results.create(payload, origin)
    return HTMLResponse(render_callback_page(result_id, origin))


@router.get("/oauth/result/{result_id}")
async def oauth_result(
    result_id: str,
    request: Request,
    results: ResultStore = Depends(get_result_store),
):
    """Hand out a callback outcome exactly once."""
    retry_after = oauth_limiter.acquire(client_key(request))
    if retry_after:
        return too_many_requests(retry_after)

    entry = results.consume_once(result_id)
    if entry is None:
        raise NotFound("OAuth result not found or already consumed")
    return entry.payload.to_dict()


@router.post("/oauth/refresh", response_model=RefreshResponse)
async def oauth_refresh(
    body: RefreshRequest,
    request: Request,
    token_client: TokenExchangeClient = Depends(get_token_client),
):
    """Refresh an access token; upstream failures keep their status."""
    retry_after = refresh_limiter.acquire(client_key(request))
    if retry_after:
        return too_many_requests(retry_after)

    token = await token_client.refresh(body.refresh_token)
    return RefreshResponse(token=token.to_dict())
