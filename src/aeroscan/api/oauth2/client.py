# Token Exchange Client: seats.aero OAuth2 code exchange, refresh, userinfo.
# Created: 2026-10-03

from __future__ import annotations

import logging
import urllib.parse
from typing import Any

import httpx

from aeroscan.api.oauth2.models import TokenRecord, UserInfo
from aeroscan.config import Settings, get_settings
from aeroscan.errors import ConfigError, TokenExchangeFailed

logger = logging.getLogger(__name__)


def _error_message(resp: httpx.Response) -> str:
    """Pull a readable message out of a failed token response."""
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("error_description", "error"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return f"Token request failed with status {resp.status_code}"


class TokenExchangeClient:
    """OAuth2 authorization-code client for the seats.aero consent flow.

    Each call opens its own ``httpx.AsyncClient`` so connections are
    released as soon as the upstream response settles. Pass *transport* to
    route requests somewhere other than the network (tests).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport

    def _client(self, timeout: float | None = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout if timeout is not None else self.settings.upstream_timeout,
            transport=self._transport,
        )

    def require_config(self) -> None:
        missing = self.settings.oauth_missing
        if missing:
            raise ConfigError("OAuth is not configured", missing=missing)

    def build_authorize_url(self, state: str) -> str:
        """Consent-screen URL for *state*."""
        self.require_config()
        params = {
            "response_type": "code",
            "client_id": self.settings.oauth_client_id,
            "redirect_uri": self.settings.oauth_redirect_uri,
            "state": state,
            "scope": self.settings.oauth_scope,
        }
        return f"{self.settings.oauth_authorize_url}?{urllib.parse.urlencode(params)}"

    async def _post_token(
        self, form: dict[str, Any], previous_refresh_token: str | None = None
    ) -> TokenRecord:
        try:
            async with self._client() as client:
                resp = await client.post(
                    self.settings.oauth_token_url,
                    data={k: v for k, v in form.items() if v is not None},
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as e:
            logger.error("Token %s request failed: %s", form["grant_type"], e)
            raise TokenExchangeFailed(502, "Token endpoint unreachable") from e

        if not resp.is_success:
            message = _error_message(resp)
            logger.warning(
                "Token %s failed (%d): %s", form["grant_type"], resp.status_code, message
            )
            raise TokenExchangeFailed(resp.status_code, message)

        try:
            data = resp.json()
            if not isinstance(data, dict):
                raise ValueError("Token response is not a JSON object")
            return TokenRecord.from_token_response(
                data, previous_refresh_token=previous_refresh_token
            )
        except ValueError as e:
            raise TokenExchangeFailed(502, str(e)) from e

    async def exchange_code(
        self, code: str, redirect_uri: str | None = None, state: str | None = None
    ) -> TokenRecord:
        """Exchange an authorization code for a TokenRecord."""
        self.require_config()
        token = await self._post_token(
            {
                "code": code,
                "client_id": self.settings.oauth_client_id,
                "client_secret": self.settings.oauth_client_secret,
                "redirect_uri": redirect_uri or self.settings.oauth_redirect_uri,
                "grant_type": "authorization_code",
                "state": state,
                "scope": self.settings.oauth_scope,
            }
        )
        logger.info("OAuth code exchanged (expires_in=%s)", token.expires_in)
        return token

    async def refresh(self, refresh_token: str) -> TokenRecord:
        """Trade a refresh token for a new access token.

        The prior refresh token is kept when upstream does not rotate it.
        """
        self.require_config()
        token = await self._post_token(
            {
                "refresh_token": refresh_token,
                "client_id": self.settings.oauth_client_id,
                "client_secret": self.settings.oauth_client_secret,
                "grant_type": "refresh_token",
            },
            previous_refresh_token=refresh_token,
        )
        logger.info("OAuth token refreshed")
        return token

    async def get_user_info(self, access_token: str) -> UserInfo:
        """GET /userinfo with the bearer token. Raises on any failure."""
        async with self._client() as client:
            resp = await client.get(
                self.settings.oauth_userinfo_url,
                headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
            )
            resp.raise_for_status()
            data = resp.json()
        if not isinstance(data, dict):
            raise ValueError("userinfo response is not a JSON object")
        return UserInfo.from_payload(data)

    async def fetch_user_info(self, access_token: str) -> UserInfo | None:
        """Best-effort variant of :meth:`get_user_info`; failures yield None."""
        try:
            return await self.get_user_info(access_token)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("userinfo lookup failed: %s", e)
            return None


def get_token_client() -> TokenExchangeClient:
    return TokenExchangeClient()
