# Tests for the profile router (/api/profile/*).
# Created: 2026-10-10

import hashlib

import httpx

from aeroscan.security.identity import owner_from_api_key
from aeroscan.upstream.partner import PartnerClient, get_partner_client

KEY = {"X-Seats-Api-Key": "k"}
SEARCH_PATH = "/partnerapi/search"
USERINFO_PATH = "/oauth2/userinfo"


def _trip(trip_id="t1", **overrides):
    trip = {
        "id": trip_id,
        "origin": "jfk",
        "destination": "lhr",
        "startDate": "2026-05-01",
        "endDate": "2026-05-10",
        "cabin": "Business",
        "seats": 2,
    }
    trip.update(overrides)
    return trip


class TestTrips:
    def test_empty_profile(self, client):
        resp = client.get("/api/profile/trips", headers=KEY)
        assert resp.status_code == 200
        data = resp.json()
        assert data["ownerId"] == "api_key:" + hashlib.sha256(b"k").hexdigest()
        assert data["identityType"] == "api_key"
        assert data["trips"] == []

    def test_requires_credentials(self, client):
        assert client.get("/api/profile/trips").status_code == 401

    def test_save_normalizes_and_reports_rejected(self, app, client):
        resp = client.put(
            "/api/profile/trips",
            headers=KEY,
            json={"trips": [_trip(), _trip("t2", seats=10), _trip("t3", cabin="coach")]},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["rejected"] == 2
        assert data["trips"][0]["origin"] == "JFK"
        assert data["trips"][0]["cabin"] == "business"

        stored = app.state.profiles.load(owner_from_api_key("k").owner_id)
        assert [t["id"] for t in stored] == ["t1"]
        assert client.get("/api/profile/trips", headers=KEY).json()["trips"] == stored

    def test_bare_list_body(self, client):
        resp = client.put("/api/profile/trips", headers=KEY, json=[_trip()])
        assert resp.json()["trips"][0]["id"] == "t1"

    def test_trips_must_be_array(self, client):
        resp = client.put("/api/profile/trips", headers=KEY, json={"trips": "t1"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "trips must be an array"

    def test_body_must_be_json(self, client):
        resp = client.put(
            "/api/profile/trips",
            headers={**KEY, "Content-Type": "application/json"},
            content=b"{oops",
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Request body must be JSON"

    def test_owners_do_not_see_each_other(self, client):
        client.put("/api/profile/trips", headers=KEY, json=[_trip()])
        other = client.get("/api/profile/trips", headers={"X-Seats-Api-Key": "other"})
        assert other.json()["trips"] == []

    def test_oauth_owner_from_userinfo(self, client, upstream):
        upstream.on(USERINFO_PATH, json={"sub": "user-1", "name": "Ada"})
        resp = client.get("/api/profile/trips", headers={"Authorization": "Bearer tok"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["ownerId"] == "oauth:" + hashlib.sha256(b"user-1").hexdigest()
        assert data["displayName"] == "Ada"
        assert upstream.calls(USERINFO_PATH)[0].headers["authorization"] == "Bearer tok"

    def test_oauth_owner_unverifiable(self, client, upstream):
        upstream.on(USERINFO_PATH, status=401, text="expired")
        resp = client.get("/api/profile/trips", headers={"Authorization": "Bearer tok"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "unable to verify OAuth identity"


class TestScan:
    def test_scan_summarizes_each_trip(self, client, upstream):
        client.put(
            "/api/profile/trips",
            headers=KEY,
            json=[_trip("t1"), _trip("t2", origin="sfo", destination="nrt", programs=["ana"])],
        )
        upstream.on(
            SEARCH_PATH,
            json={"data": [
                {"Source": "united", "MileageCost": 70000},
                {"Source": "aeroplan", "MileageCost": 60000},
            ]},
        ).on(SEARCH_PATH, status=500, text="boom")

        resp = client.post("/api/profile/trips/scan", headers=KEY, json={"take": 10})
        assert resp.status_code == 200
        first, second = resp.json()["results"]
        assert first == {
            "tripId": "t1",
            "status": "limited",
            "count": 2,
            "lowestMiles": 60000,
            "programs": ["aeroplan", "united"],
            "error": None,
        }
        assert second["tripId"] == "t2"
        assert second["status"] == "error"
        assert second["error"] == "External API error"

        calls = upstream.calls(SEARCH_PATH)
        assert calls[0].url.params["origin_airport"] == "JFK"
        assert calls[0].url.params["take"] == "10"
        assert "source" not in calls[0].url.params
        assert calls[1].url.params["source"] == "ana"

    def test_scan_without_body(self, client, upstream):
        client.put("/api/profile/trips", headers=KEY, json=[_trip()])
        upstream.on(SEARCH_PATH, json={"data": []})
        resp = client.post("/api/profile/trips/scan", headers=KEY)
        assert resp.status_code == 200
        assert resp.json()["results"][0]["status"] == "unavailable"
        assert upstream.calls(SEARCH_PATH)[0].url.params["take"] == "50"

    def test_scan_records_unreachable_upstream(self, app, client, settings):
        client.put("/api/profile/trips", headers=KEY, json=[_trip("t1"), _trip("t2")])

        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        app.dependency_overrides[get_partner_client] = lambda: PartnerClient(
            settings, transport=httpx.MockTransport(handler)
        )
        resp = client.post("/api/profile/trips/scan", headers=KEY, json={})
        assert resp.status_code == 200
        results = resp.json()["results"]
        assert [r["tripId"] for r in results] == ["t1", "t2"]
        assert {r["status"] for r in results} == {"error"}
        assert results[0]["error"] == "External API unreachable"

    def test_scan_aborts_on_auth_failure(self, client, upstream):
        client.put("/api/profile/trips", headers=KEY, json=[_trip("t1"), _trip("t2")])
        upstream.on(SEARCH_PATH, status=403, text="revoked")
        resp = client.post("/api/profile/trips/scan", headers=KEY, json={})
        assert resp.status_code == 403
        assert len(upstream.calls(SEARCH_PATH)) == 1

    def test_scan_empty_profile(self, client, upstream):
        resp = client.post("/api/profile/trips/scan", headers=KEY, json={})
        assert resp.json() == {"results": []}
        assert upstream.requests == []
