# OAuth2 data models.
# Created: 2026-10-02
#
# Upstream token and userinfo payloads are normalized here so the rest of
# the code only ever sees one record shape per response type.

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def _first(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return None


@dataclass
class OAuthStateEntry:
    """CSRF state minted by /oauth/start."""

    state: str
    created_at: float
    origin: str | None = None


@dataclass
class TokenRecord:
    """Access/refresh token pair handed to the browser."""

    access_token: str
    refresh_token: str | None = None
    token_type: str = "Bearer"
    scope: str | None = None
    expires_in: int | None = None
    obtained_at: int = field(default_factory=now_ms)
    expires_at: int | None = None

    def __post_init__(self) -> None:
        if self.expires_at is None and self.expires_in is not None:
            self.expires_at = self.obtained_at + self.expires_in * 1000

    @classmethod
    def from_token_response(
        cls,
        data: dict[str, Any],
        *,
        obtained_at: int | None = None,
        previous_refresh_token: str | None = None,
    ) -> TokenRecord:
        """Build a record from a token endpoint JSON body.

        Raises ``ValueError`` when no access token is present or
        ``expires_in`` is not a number.
        """
        access_token = _first(data, "access_token", "accessToken")
        if not access_token:
            raise ValueError("Token response missing access_token")

        expires_in = _first(data, "expires_in", "expiresIn")
        if expires_in is not None:
            try:
                expires_in = max(0, int(expires_in))
            except (TypeError, ValueError):
                raise ValueError(f"Invalid expires_in: {expires_in!r}") from None

        return cls(
            access_token=str(access_token),
            refresh_token=_first(data, "refresh_token", "refreshToken") or previous_refresh_token,
            token_type=_first(data, "token_type", "tokenType") or "Bearer",
            scope=_first(data, "scope"),
            expires_in=expires_in,
            obtained_at=obtained_at if obtained_at is not None else now_ms(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
            "tokenType": self.token_type,
            "scope": self.scope,
            "expiresIn": self.expires_in,
            "obtainedAt": self.obtained_at,
            "expiresAt": self.expires_at,
        }


@dataclass
class UserInfo:
    """Identity returned by the upstream /userinfo endpoint."""

    subject: str | None
    email: str | None = None
    name: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> UserInfo:
        subject = _first(data, "sub", "id", "email")
        return cls(
            subject=str(subject) if subject is not None else None,
            email=_first(data, "email"),
            name=_first(data, "name", "username", "preferred_username"),
            raw=dict(data),
        )

    @property
    def display_name(self) -> str:
        return self.name or self.email or self.subject or "seats.aero user"


@dataclass
class OAuthResultPayload:
    """Outcome of one callback, delivered once through /oauth/result/{id}."""

    success: bool
    token: TokenRecord | None = None
    user: dict[str, Any] | None = None
    error: str | None = None

    @classmethod
    def failure(cls, error: str) -> OAuthResultPayload:
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error or "OAuth failed"}
        return {
            "success": True,
            "token": self.token.to_dict() if self.token else None,
            "user": self.user,
        }


@dataclass
class OAuthResultEntry:
    """Stored callback outcome awaiting one-time retrieval."""

    result_id: str
    created_at: float
    payload: OAuthResultPayload
    origin: str | None = None
