# Partner API proxy router: search, availability, trips, routes.
# Created: 2026-10-06
#
# Query parameters are forwarded verbatim. Upstream errors come back with
# the upstream status and body; successes return the parsed JSON.

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from aeroscan.api.deps import require_auth
from aeroscan.security.auth_resolver import ResolvedAuth
from aeroscan.upstream.partner import PartnerClient, get_partner_client, validate_path_segment

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Partner API"])


@router.get("/search")
async def search(
    request: Request,
    auth: ResolvedAuth = Depends(require_auth),
    partner: PartnerClient = Depends(get_partner_client),
):
    """Cached search across mileage programs."""
    params = request.query_params.multi_items()
    logger.info("Search request (%s): %s", auth.mode, dict(params))
    data = await partner.get_json("search", auth, params=params)
    count = len(data.get("data") or []) if isinstance(data, dict) else 0
    logger.info("Search returned %d results", count)
    return data


@router.get("/availability")
async def availability(
    request: Request,
    auth: ResolvedAuth = Depends(require_auth),
    partner: PartnerClient = Depends(get_partner_client),
):
    """Bulk availability for a single mileage program."""
    return await partner.get_json(
        "availability", auth, params=request.query_params.multi_items()
    )


@router.get("/trips/{trip_id}")
async def trip_details(
    trip_id: str,
    request: Request,
    auth: ResolvedAuth = Depends(require_auth),
    partner: PartnerClient = Depends(get_partner_client),
):
    """Flight-level details for one availability object."""
    return await partner.get_json(
        f"trips/{validate_path_segment(trip_id)}",
        auth,
        params=request.query_params.multi_items(),
    )


@router.get("/routes")
async def routes(
    request: Request,
    auth: ResolvedAuth = Depends(require_auth),
    partner: PartnerClient = Depends(get_partner_client),
):
    """Routes monitored for a mileage program."""
    return await partner.get_json("routes", auth, params=request.query_params.multi_items())
