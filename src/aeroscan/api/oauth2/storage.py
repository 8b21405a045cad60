# OAuth2 state and result storage.
# Created: 2026-10-02
#
# Both stores are short-lived, read-once maps with TTL eviction. Entries
# live in process memory only; a restart drops in-flight flows, which then
# fail with "invalid or expired state".

from __future__ import annotations

import logging
import secrets
import threading
import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from aeroscan.api.oauth2.models import OAuthResultEntry, OAuthResultPayload, OAuthStateEntry

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 600.0


def generate_token() -> str:
    """Opaque URL-safe token with 256 bits of entropy."""
    return secrets.token_urlsafe(32)


@runtime_checkable
class StateStore(Protocol):
    def create(self, origin: str | None) -> str: ...

    def consume(self, state: str) -> OAuthStateEntry | None: ...

    def sweep(self) -> int: ...


@runtime_checkable
class ResultStore(Protocol):
    def create(self, payload: OAuthResultPayload, origin: str | None) -> str: ...

    def consume_once(self, result_id: str) -> OAuthResultEntry | None: ...

    def sweep(self) -> int: ...


class _TTLMap:
    """Lock-guarded dict keyed by token, evicting entries older than ``ttl``."""

    def __init__(self, ttl: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] | None = None):
        self.ttl = float(ttl)
        self._clock = clock or time.time
        self._lock = threading.Lock()
        self._entries: dict = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _sweep_locked(self, now: float) -> int:
        expired = [k for k, v in self._entries.items() if now - v.created_at > self.ttl]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def sweep(self) -> int:
        """Drop every entry older than the TTL. Returns the number removed."""
        with self._lock:
            removed = self._sweep_locked(self._clock())
        if removed:
            logger.debug("%s swept %d expired entries", type(self).__name__, removed)
        return removed

    def _insert(self, build) -> str:
        token = generate_token()
        with self._lock:
            now = self._clock()
            self._sweep_locked(now)
            while token in self._entries:
                token = generate_token()
            self._entries[token] = build(token, now)
        return token

    def _pop(self, token: str):
        if not token:
            return None
        with self._lock:
            self._sweep_locked(self._clock())
            return self._entries.pop(token, None)


class InMemoryStateStore(_TTLMap):
    """CSRF state tokens for /oauth/start → /oauth/callback."""

    def create(self, origin: str | None) -> str:
        return self._insert(lambda token, now: OAuthStateEntry(token, now, origin))

    def consume(self, state: str) -> OAuthStateEntry | None:
        return self._pop(state)


class InMemoryResultStore(_TTLMap):
    """Callback outcomes, each retrievable exactly once."""

    def create(self, payload: OAuthResultPayload, origin: str | None) -> str:
        return self._insert(
            lambda token, now: OAuthResultEntry(
                result_id=token, created_at=now, payload=payload, origin=origin
            )
        )

    def consume_once(self, result_id: str) -> OAuthResultEntry | None:
        return self._pop(result_id)


# Singletons
_state_store: StateStore | None = None
_result_store: ResultStore | None = None


def get_state_store() -> StateStore:
    global _state_store
    if _state_store is None:
        from aeroscan.config import get_settings

        _state_store = InMemoryStateStore(ttl=get_settings().oauth_state_ttl_seconds)
    return _state_store


def get_result_store() -> ResultStore:
    global _result_store
    if _result_store is None:
        from aeroscan.config import get_settings

        _result_store = InMemoryResultStore(ttl=get_settings().oauth_result_ttl_seconds)
    return _result_store


def reset_oauth_stores() -> None:
    """Reset singletons (for testing)."""
    global _state_store, _result_store
    _state_store = None
    _result_store = None
