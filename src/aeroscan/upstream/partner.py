# Partner API client: forwards resolved-auth requests to seats.aero.
# Created: 2026-10-04
#
# OAuth bearer tokens are tried against an ordered list of header shapes;
# the first response that is not 401/403 wins. API keys only ever use the
# primary shape.

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any

import httpx

from aeroscan.config import Settings, get_settings
from aeroscan.errors import BadRequest, UpstreamError
from aeroscan.security.auth_resolver import PARTNER_HEADER, AuthMode, ResolvedAuth

logger = logging.getLogger(__name__)

AUTH_FAILURE_STATUSES = frozenset({401, 403})

HeaderStrategy = Callable[[str], dict[str, str]]

HEADER_STRATEGIES: dict[str, HeaderStrategy] = {
    "partner_raw": lambda token: {PARTNER_HEADER: token},
    "partner_bearer": lambda token: {PARTNER_HEADER: f"Bearer {token}"},
    "authorization_bearer": lambda token: {"Authorization": f"Bearer {token}"},
}


def build_strategies(names: Iterable[str]) -> list[tuple[str, HeaderStrategy]]:
    """Resolve configured strategy names, rejecting unknown ones."""
    strategies = []
    for name in names:
        try:
            strategies.append((name, HEADER_STRATEGIES[name]))
        except KeyError:
            raise ValueError(f"Unknown auth header strategy: {name}") from None
    if not strategies:
        raise ValueError("At least one auth header strategy is required")
    return strategies


class PartnerClient:
    """HTTP client for the seats.aero partner API."""

    def __init__(
        self,
        settings: Settings | None = None,
        strategies: Sequence[str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = self.settings.partner_api_base
        self.strategies = build_strategies(strategies or self.settings.auth_header_strategies)
        self._transport = transport

    def header_attempts(self, auth: ResolvedAuth) -> list[tuple[str, dict[str, str]]]:
        """Header sets to try, in order, for *auth*."""
        if auth.mode is AuthMode.API_KEY:
            return [("api_key", dict(auth.headers))]
        return [(name, build(auth.credential)) for name, build in self.strategies]

    async def get(
        self,
        path: str,
        auth: ResolvedAuth,
        params: Any = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """GET *path* upstream, walking the header fallback chain."""
        url = f"{self.base_url}/{path.lstrip('/')}"
        (first_name, first_headers), *fallbacks = self.header_attempts(auth)

        async with httpx.AsyncClient(
            timeout=timeout if timeout is not None else self.settings.upstream_timeout,
            transport=self._transport,
        ) as client:

            async def send(headers: dict[str, str]) -> httpx.Response:
                return await client.get(
                    url, params=params, headers={"Accept": "application/json", **headers}
                )

            resp = await send(first_headers)
            tried = first_name
            for name, headers in fallbacks:
                if resp.status_code not in AUTH_FAILURE_STATUSES:
                    break
                logger.debug(
                    "Upstream %d with %s header shape, trying %s", resp.status_code, tried, name
                )
                resp = await send(headers)
                tried = name
                if resp.status_code not in AUTH_FAILURE_STATUSES:
                    logger.info("Upstream accepted %s header shape for /%s", name, path)

        return resp

    async def get_json(self, path: str, auth: ResolvedAuth, params: Any = None) -> Any:
        """GET *path* and return parsed JSON.

        Non-2xx answers and network failures both raise UpstreamError.
        """
        try:
            resp = await self.get(path, auth, params=params)
        except httpx.HTTPError as e:
            logger.error("External API unreachable on /%s: %s", path, e)
            raise UpstreamError(502, str(e), message="External API unreachable") from e
        if not resp.is_success:
            logger.error("External API error: %d on /%s", resp.status_code, path)
            raise UpstreamError(resp.status_code, resp.text)
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError(502, resp.text, message="Invalid JSON from external API") from e

    async def probe(self, auth: ResolvedAuth) -> bool | None:
        """Check whether upstream accepts *auth*.

        A parameter-less /availability call answers 401/403 for a bad
        credential and 400 (missing parameters) for a good one. Returns None
        when upstream cannot be reached.
        """
        try:
            resp = await self.get("availability", auth, timeout=self.settings.health_timeout)
        except httpx.HTTPError as e:
            logger.warning("Health probe failed: %s", e)
            return None
        return resp.status_code not in AUTH_FAILURE_STATUSES


def validate_path_segment(value: str) -> str:
    """Reject ids that would escape their path segment upstream."""
    if not value or "/" in value or "\\" in value or value in (".", ".."):
        raise BadRequest("invalid id")
    return value


def get_partner_client() -> PartnerClient:
    return PartnerClient()
