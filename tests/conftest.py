# Shared fixtures for the Aeroscan test suite.
# Created: 2026-10-08

from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from aeroscan.api.oauth2.client import TokenExchangeClient, get_token_client
from aeroscan.api.oauth2.storage import (
    InMemoryResultStore,
    InMemoryStateStore,
    get_result_store,
    get_state_store,
)
from aeroscan.api.serve import register_exception_handlers
from aeroscan.api.v1 import mount_routers
from aeroscan.config import Settings, get_settings
from aeroscan.profiles.store import TripProfileStore, get_profile_store
from aeroscan.security.rate_limiter import oauth_limiter, refresh_limiter
from aeroscan.upstream.partner import PartnerClient, get_partner_client


def make_settings(tmp_path=None, **overrides) -> Settings:
    """Settings isolated from the developer's env and .env file."""
    values = {
        "oauth_client_id": "cid",
        "oauth_client_secret": "csecret",
        "oauth_redirect_uri": "http://localhost:3001/api/oauth/callback",
        "partner_api_base": "https://partner.test/partnerapi",
        "oauth_token_url": "https://partner.test/oauth2/token",
        "oauth_userinfo_url": "https://partner.test/oauth2/userinfo",
        "oauth_authorize_url": "https://partner.test/oauth2/consent",
        "scan_delay_seconds": 0,
    }
    if tmp_path is not None:
        values["profile_dir"] = tmp_path / "profiles"
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture(autouse=True)
def _reset_rate_limiters():
    oauth_limiter.reset()
    refresh_limiter.reset()
    yield
    oauth_limiter.reset()
    refresh_limiter.reset()


class UpstreamStub:
    """MockTransport handler serving canned responses per URL path."""

    def __init__(self):
        self.routes: dict[str, list] = {}
        self.requests: list[httpx.Request] = []

    def on(self, path: str, status: int = 200, json=None, text: str | None = None):
        """Queue a response for *path*; the last queued one repeats."""
        self.routes.setdefault(path, []).append((status, json, text))
        return self

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queued = self.routes.get(request.url.path)
        if not queued:
            return httpx.Response(404, text="no route")
        status, body, text = queued.pop(0) if len(queued) > 1 else queued[0]
        if text is not None:
            return httpx.Response(status, text=text)
        return httpx.Response(status, json=body if body is not None else {})


@pytest.fixture
def upstream():
    return UpstreamStub()


@pytest.fixture
def app(settings, upstream):
    """Full API app with every upstream call routed to ``upstream``."""
    transport = httpx.MockTransport(upstream)
    app = FastAPI()
    register_exception_handlers(app)
    mount_routers(app)

    app.state.states = InMemoryStateStore()
    app.state.results = InMemoryResultStore()
    app.state.profiles = TripProfileStore(settings.resolved_profile_dir())

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_state_store] = lambda: app.state.states
    app.dependency_overrides[get_result_store] = lambda: app.state.results
    app.dependency_overrides[get_profile_store] = lambda: app.state.profiles
    app.dependency_overrides[get_token_client] = lambda: TokenExchangeClient(
        settings, transport=transport
    )
    app.dependency_overrides[get_partner_client] = lambda: PartnerClient(
        settings, transport=transport
    )
    return app


@pytest.fixture
def client(app):
    return TestClient(app)
