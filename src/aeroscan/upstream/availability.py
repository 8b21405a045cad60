# Availability rows: adapter for seats.aero search results.
# Created: 2026-10-05
#
# Upstream rows have shown up in both PascalCase and snake_case; both are
# folded into AvailabilityRow here.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

AVAILABLE_THRESHOLD = 5


def _pick(row: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = row.get(key)
        if value not in (None, ""):
            return value
    return None


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class AvailabilityRow:
    date: str | None
    origin: str | None
    destination: str | None
    source: str | None
    mileage_cost: int | None

    @classmethod
    def from_upstream(cls, row: dict[str, Any]) -> AvailabilityRow:
        route = row.get("Route") if isinstance(row.get("Route"), dict) else {}
        return cls(
            date=_pick(row, "Date", "date"),
            origin=_pick(row, "OriginAirport", "origin_airport") or _pick(route, "OriginAirport"),
            destination=_pick(row, "DestinationAirport", "destination_airport")
            or _pick(route, "DestinationAirport"),
            source=_pick(row, "Source", "source") or _pick(route, "Source"),
            mileage_cost=_as_int(_pick(row, "MileageCost", "mileage_cost")),
        )


def rows_from_response(data: Any) -> list[AvailabilityRow]:
    """Extract rows from a search response body (``{"data": [...]}``)."""
    items = data.get("data") if isinstance(data, dict) else data
    if not isinstance(items, list):
        return []
    return [AvailabilityRow.from_upstream(r) for r in items if isinstance(r, dict)]


def classify(count: int) -> str:
    if count > AVAILABLE_THRESHOLD:
        return "available"
    if count > 0:
        return "limited"
    return "unavailable"


def summarize_availability(rows: list[AvailabilityRow]) -> dict[str, Any]:
    costs = [r.mileage_cost for r in rows if r.mileage_cost is not None]
    programs = sorted({r.source for r in rows if r.source})
    return {
        "status": classify(len(rows)),
        "count": len(rows),
        "lowestMiles": min(costs) if costs else None,
        "programs": programs,
    }
