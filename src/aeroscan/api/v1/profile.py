# Profile router: owner-scoped saved trips and availability scans.
# Created: 2026-10-07

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, Request

from aeroscan.api.deps import require_auth, require_owner
from aeroscan.api.v1.schemas.profile import (
    ScanRequest,
    ScanResponse,
    TripScanResult,
    TripsResponse,
    TripsSaveResponse,
)
from aeroscan.config import Settings, get_settings
from aeroscan.errors import BadRequest, UpstreamError
from aeroscan.profiles.store import TripProfileStore, get_profile_store
from aeroscan.profiles.trips import normalize_trips
from aeroscan.security.auth_resolver import ResolvedAuth
from aeroscan.security.identity import OwnerIdentity
from aeroscan.upstream.availability import rows_from_response, summarize_availability
from aeroscan.upstream.partner import AUTH_FAILURE_STATUSES, PartnerClient, get_partner_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Profile"])


@router.get("/profile/trips", response_model=TripsResponse)
async def get_trips(
    owner: OwnerIdentity = Depends(require_owner),
    store: TripProfileStore = Depends(get_profile_store),
):
    """Load the caller's saved trips."""
    return TripsResponse(**owner.to_dict(), trips=store.load(owner.owner_id))


@router.put("/profile/trips", response_model=TripsSaveResponse)
async def save_trips(
    request: Request,
    owner: OwnerIdentity = Depends(require_owner),
    store: TripProfileStore = Depends(get_profile_store),
    settings: Settings = Depends(get_settings),
):
    """Replace the caller's trips. Invalid entries are dropped, not stored."""
    try:
        body = await request.json()
    except ValueError:
        raise BadRequest("Request body must be JSON") from None

    items = body.get("trips") if isinstance(body, dict) else body
    if not isinstance(items, list):
        raise BadRequest("trips must be an array")

    trips, rejected = normalize_trips(items, max_trips=settings.max_trips)
    if rejected:
        logger.info("Dropped %d invalid trip entries", rejected)
    store.save(owner.owner_id, trips)
    return TripsSaveResponse(trips=trips, rejected=rejected)


async def _scan_trip(
    trip: dict, body: ScanRequest, auth: ResolvedAuth, partner: PartnerClient
) -> TripScanResult:
    params = {
        "origin_airport": trip["origin"],
        "destination_airport": trip["destination"],
        "start_date": trip["startDate"],
        "end_date": trip["endDate"],
        "cabin": trip.get("cabin", "business"),
        "take": str(body.take),
    }
    programs = trip.get("programs") or body.programs
    if programs:
        params["source"] = ",".join(programs)

    try:
        data = await partner.get_json("search", auth, params=params)
    except UpstreamError as e:
        if e.status_code in AUTH_FAILURE_STATUSES:
            raise
        logger.warning("Scan of trip %s failed: %s", trip["id"], (e.details or e.message)[:200])
        return TripScanResult(tripId=trip["id"], status="error", error=e.message)

    return TripScanResult(tripId=trip["id"], **summarize_availability(rows_from_response(data)))


@router.post("/profile/trips/scan", response_model=ScanResponse)
async def scan_trips(
    body: ScanRequest | None = None,
    auth: ResolvedAuth = Depends(require_auth),
    owner: OwnerIdentity = Depends(require_owner),
    store: TripProfileStore = Depends(get_profile_store),
    partner: PartnerClient = Depends(get_partner_client),
    settings: Settings = Depends(get_settings),
):
    """Search availability for each saved trip, one upstream call at a time."""
    body = body or ScanRequest()
    results = []
    for i, trip in enumerate(store.load(owner.owner_id)):
        if i:
            await asyncio.sleep(settings.scan_delay_seconds)
        results.append(await _scan_trip(trip, body, auth, partner))
    return ScanResponse(results=results)
