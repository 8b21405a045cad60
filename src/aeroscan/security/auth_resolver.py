# Auth Resolver: API key vs. OAuth bearer credentials.
# Created: 2026-10-03
#
# A request must carry exactly one credential: the API-key header or an
# ``Authorization: Bearer`` token. Both or neither are rejected with
# distinct errors.

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from aeroscan.errors import AeroscanError, BadRequest, Unauthorized

logger = logging.getLogger(__name__)

PARTNER_HEADER = "Partner-Authorization"
DEFAULT_API_KEY_HEADER = "X-Seats-Api-Key"


class AuthMode(StrEnum):
    API_KEY = "api_key"
    OAUTH = "oauth"


@dataclass(frozen=True)
class ResolvedAuth:
    """Credential extracted from one request plus its upstream headers."""

    mode: AuthMode
    credential: str = field(repr=False)
    headers: dict[str, str] = field(repr=False)


def _bearer_token(headers: Mapping[str, str]) -> str | None:
    value = headers.get("authorization") or headers.get("Authorization")
    if not value:
        return None
    scheme, _, token = value.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def _api_key(headers: Mapping[str, str], header_name: str) -> str | None:
    value = headers.get(header_name) or headers.get(header_name.lower())
    if value is None:
        return None
    return value.strip() or None


def resolve_auth(
    headers: Mapping[str, str], api_key_header: str = DEFAULT_API_KEY_HEADER
) -> ResolvedAuth:
    """Resolve request headers into upstream auth headers.

    Raises BadRequest when both credentials are present and Unauthorized
    when neither is.
    """
    key = _api_key(headers, api_key_header)
    token = _bearer_token(headers)

    if key and token:
        raise BadRequest("provide exactly one auth mode")
    if key:
        return ResolvedAuth(AuthMode.API_KEY, key, {PARTNER_HEADER: key})
    if token:
        return ResolvedAuth(AuthMode.OAUTH, token, {PARTNER_HEADER: token})
    raise Unauthorized("no credentials provided")


def resolve_auth_silent(
    headers: Mapping[str, str], api_key_header: str = DEFAULT_API_KEY_HEADER
) -> ResolvedAuth | None:
    """Like :func:`resolve_auth` but returns None instead of raising."""
    try:
        return resolve_auth(headers, api_key_header)
    except AeroscanError as e:
        logger.debug("Silent auth resolution: %s", e.message)
        return None
