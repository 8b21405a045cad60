# Saved trip validation.
# Created: 2026-10-05

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any

logger = logging.getLogger(__name__)

VALID_CABINS = ("economy", "premium", "business", "first")
DEFAULT_CABIN = "business"
MIN_SEATS = 1
MAX_SEATS = 9

_AIRPORT_RE = re.compile(r"^[A-Z]{3}$")
_MAX_ID_LEN = 64
_MAX_NAME_LEN = 120
_MAX_PROGRAMS = 30


def _text(value: Any, max_len: int) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value[:max_len] if value else None


def _iso_date(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except ValueError:
        return None


def _seats(value: Any) -> int | None:
    if value is None:
        return MIN_SEATS
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int):
        return None
    return value if MIN_SEATS <= value <= MAX_SEATS else None


def normalize_trip(raw: Any) -> dict[str, Any] | None:
    """Validate one trip entry.

    Returns the normalized trip, or None if the entry must be dropped.
    """
    if not isinstance(raw, dict):
        return None

    trip_id = _text(raw.get("id"), _MAX_ID_LEN)
    origin = (_text(raw.get("origin"), 8) or "").upper()
    destination = (_text(raw.get("destination"), 8) or "").upper()
    start = _iso_date(raw.get("startDate"))
    end = _iso_date(raw.get("endDate"))
    if not trip_id or not start or not end:
        return None
    if not _AIRPORT_RE.match(origin) or not _AIRPORT_RE.match(destination):
        return None
    if end < start:
        return None

    cabin = raw.get("cabin", DEFAULT_CABIN)
    cabin = cabin.strip().lower() if isinstance(cabin, str) else None
    if cabin not in VALID_CABINS:
        return None

    seats = _seats(raw.get("seats"))
    if seats is None:
        return None

    trip: dict[str, Any] = {
        "id": trip_id,
        "name": _text(raw.get("name"), _MAX_NAME_LEN) or f"{origin} → {destination}",
        "origin": origin,
        "destination": destination,
        "startDate": start,
        "endDate": end,
        "cabin": cabin,
        "seats": seats,
    }

    programs = raw.get("programs")
    if isinstance(programs, list):
        cleaned = [p.strip() for p in programs if isinstance(p, str) and p.strip()]
        trip["programs"] = cleaned[:_MAX_PROGRAMS]

    return trip


def normalize_trips(items: list[Any], max_trips: int = 100) -> tuple[list[dict[str, Any]], int]:
    """Normalize a trip list.

    Invalid entries are dropped; a repeated id keeps its first occurrence.
    Returns ``(trips, rejected_count)`` with at most *max_trips* trips.
    """
    trips: list[dict[str, Any]] = []
    seen: set[str] = set()
    rejected = 0
    for raw in items:
        trip = normalize_trip(raw)
        if trip is None or trip["id"] in seen:
            rejected += 1
            continue
        seen.add(trip["id"])
        trips.append(trip)

    if len(trips) > max_trips:
        logger.info("Trip list capped at %d (got %d)", max_trips, len(trips))
        rejected += len(trips) - max_trips
        trips = trips[:max_trips]
    return trips, rejected
