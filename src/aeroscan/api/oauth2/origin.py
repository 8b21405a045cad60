# Return-origin sanitizer for OAuth popups and redirects.
# Created: 2026-10-02

from __future__ import annotations

from urllib.parse import urlsplit

_DEFAULT_PORTS = {"http": 80, "https": 443}


def sanitize_origin(value: str | None) -> str | None:
    """Normalize *value* to ``scheme://host[:port]`` or return None.

    Only http(s) URLs with a host are accepted. The result is used to scope
    ``postMessage`` and redirect targets, never to make auth decisions.
    """
    if not value or not isinstance(value, str):
        return None

    try:
        parts = urlsplit(value.strip())
        port = parts.port
    except ValueError:
        return None

    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PORTS:
        return None

    host = parts.hostname
    if not host:
        return None
    if ":" in host:
        host = f"[{host}]"

    if port is None or port == _DEFAULT_PORTS[scheme]:
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"
