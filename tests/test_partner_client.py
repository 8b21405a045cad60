# Tests for upstream/partner.py: proxy with header fallback.
# Created: 2026-10-09

import httpx
import pytest
from conftest import make_settings

from aeroscan.errors import BadRequest, UpstreamError
from aeroscan.security.auth_resolver import resolve_auth
from aeroscan.upstream.partner import (
    PartnerClient,
    build_strategies,
    validate_path_segment,
)

API_KEY_AUTH = resolve_auth({"X-Seats-Api-Key": "key-1"})
OAUTH_AUTH = resolve_auth({"Authorization": "Bearer tok-1"})


class Recorder:
    """MockTransport handler that records requests and replays statuses."""

    def __init__(self, *statuses: int, body=None):
        self.statuses = list(statuses)
        self.body = body if body is not None else {"data": []}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status = self.statuses.pop(0) if self.statuses else 200
        if status >= 400:
            return httpx.Response(status, text=f"error {status}")
        return httpx.Response(status, json=self.body)


def _partner(handler, **overrides) -> PartnerClient:
    return PartnerClient(make_settings(**overrides), transport=httpx.MockTransport(handler))


class TestStrategies:
    def test_unknown_strategy_rejected(self):
        with pytest.raises(ValueError, match="Unknown auth header strategy"):
            build_strategies(["partner_raw", "carrier_pigeon"])

    def test_empty_strategy_list_rejected(self):
        with pytest.raises(ValueError):
            build_strategies([])

    def test_api_key_uses_single_attempt(self):
        partner = _partner(Recorder())
        assert partner.header_attempts(API_KEY_AUTH) == [
            ("api_key", {"Partner-Authorization": "key-1"})
        ]

    def test_oauth_attempt_order(self):
        partner = _partner(Recorder())
        assert partner.header_attempts(OAUTH_AUTH) == [
            ("partner_raw", {"Partner-Authorization": "tok-1"}),
            ("partner_bearer", {"Partner-Authorization": "Bearer tok-1"}),
            ("authorization_bearer", {"Authorization": "Bearer tok-1"}),
        ]

    def test_strategies_come_from_settings(self):
        partner = _partner(Recorder(), auth_header_strategies=["authorization_bearer"])
        assert partner.header_attempts(OAUTH_AUTH) == [
            ("authorization_bearer", {"Authorization": "Bearer tok-1"})
        ]


class TestFallback:
    async def test_primary_success_makes_one_call(self):
        rec = Recorder(200)
        resp = await _partner(rec).get("search", OAUTH_AUTH)
        assert resp.status_code == 200
        assert len(rec.requests) == 1
        assert rec.requests[0].headers["partner-authorization"] == "tok-1"

    async def test_falls_back_on_401_then_succeeds(self):
        rec = Recorder(401, 200)
        resp = await _partner(rec).get("search", OAUTH_AUTH)
        assert resp.status_code == 200
        assert len(rec.requests) == 2
        assert rec.requests[1].headers["partner-authorization"] == "Bearer tok-1"

    async def test_walks_whole_chain_on_auth_failures(self):
        rec = Recorder(403, 401, 200)
        resp = await _partner(rec).get("search", OAUTH_AUTH)
        assert resp.status_code == 200
        third = rec.requests[2]
        assert third.headers["authorization"] == "Bearer tok-1"
        assert "partner-authorization" not in third.headers

    async def test_exhausted_chain_returns_last_response(self):
        rec = Recorder(401, 401, 403)
        resp = await _partner(rec).get("search", OAUTH_AUTH)
        assert resp.status_code == 403
        assert len(rec.requests) == 3

    async def test_single_strategy_returns_auth_failure(self):
        rec = Recorder(401)
        partner = _partner(rec, auth_header_strategies=["partner_bearer"])
        resp = await partner.get("search", OAUTH_AUTH)
        assert resp.status_code == 401
        assert len(rec.requests) == 1

    async def test_stops_on_non_auth_error(self):
        rec = Recorder(401, 500)
        resp = await _partner(rec).get("search", OAUTH_AUTH)
        assert resp.status_code == 500
        assert len(rec.requests) == 2

    async def test_api_key_never_falls_back(self):
        rec = Recorder(401, 200)
        resp = await _partner(rec).get("search", API_KEY_AUTH)
        assert resp.status_code == 401
        assert len(rec.requests) == 1

    async def test_params_forwarded_verbatim(self):
        rec = Recorder(200)
        params = [("origin_airport", "JFK"), ("source", "united"), ("source", "aeroplan")]
        await _partner(rec).get("search", API_KEY_AUTH, params=params)
        url = rec.requests[0].url
        assert url.path == "/partnerapi/search"
        assert url.params.get_list("source") == ["united", "aeroplan"]
        assert url.params["origin_airport"] == "JFK"


class TestGetJson:
    async def test_returns_parsed_json(self):
        data = await _partner(Recorder(200, body={"data": [{"ID": "x"}]})).get_json(
            "search", API_KEY_AUTH
        )
        assert data == {"data": [{"ID": "x"}]}

    async def test_upstream_error_passes_status_and_body(self):
        with pytest.raises(UpstreamError) as exc:
            await _partner(Recorder(429)).get_json("search", API_KEY_AUTH)
        assert exc.value.status_code == 429
        assert exc.value.details == "error 429"

    async def test_invalid_json_is_upstream_error(self):
        partner = _partner(lambda r: httpx.Response(200, text="<html>"))
        with pytest.raises(UpstreamError) as exc:
            await partner.get_json("search", API_KEY_AUTH)
        assert exc.value.status_code == 502


class TestProbe:
    async def test_bad_request_means_valid_credential(self):
        assert await _partner(Recorder(400)).probe(API_KEY_AUTH) is True

    async def test_unauthorized_means_invalid_credential(self):
        assert await _partner(Recorder(401)).probe(API_KEY_AUTH) is False

    async def test_unreachable_upstream(self):
        def handler(request):
            raise httpx.ConnectTimeout("slow", request=request)

        assert await _partner(handler).probe(API_KEY_AUTH) is None


class TestPathSegment:
    @pytest.mark.parametrize("value", ["", ".", "..", "a/b", "a\\b"])
    def test_rejects_unsafe(self, value):
        with pytest.raises(BadRequest):
            validate_path_segment(value)

    def test_accepts_plain_id(self):
        assert validate_path_segment("2YbC1pE3") == "2YbC1pE3"


class TestNetworkFailures:
    async def test_get_json_wraps_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamError) as exc:
            await _partner(handler).get_json("search", OAUTH_AUTH)
        assert exc.value.status_code == 502
        assert exc.value.message == "External API unreachable"
        assert exc.value.details == "refused"
