# Aeroscan error taxonomy.
# Created: 2026-10-02
#
# Every error carries the HTTP status it maps to; api/serve.py registers a
# single exception handler that renders them as JSON.

from __future__ import annotations

from typing import Any


class AeroscanError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "code": self.code}


class BadRequest(AeroscanError):
    status_code = 400
    code = "bad_request"


class Unauthorized(AeroscanError):
    status_code = 401
    code = "unauthorized"


class NotFound(AeroscanError):
    status_code = 404
    code = "not_found"


class ConfigError(AeroscanError):
    """OAuth (or another integration) invoked without its configuration."""

    status_code = 500
    code = "config_error"

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.missing:
            data["missing"] = self.missing
        return data


class InternalError(AeroscanError):
    status_code = 500
    code = "internal_error"


class UpstreamError(AeroscanError):
    """Non-2xx answer from the partner API, passed through to the caller."""

    code = "upstream_error"

    def __init__(self, status_code: int, details: str = "", message: str = "External API error"):
        super().__init__(message, status_code=status_code)
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["details"] = self.details
        return data


class TokenExchangeFailed(UpstreamError):
    """The OAuth token endpoint rejected a code or refresh token."""

    code = "token_exchange_failed"

    def __init__(self, status_code: int, message: str):
        super().__init__(status_code, details=message, message=message)
