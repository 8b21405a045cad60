# Profile schemas.
# Created: 2026-10-07

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class TripsResponse(BaseModel):
    """An owner's saved trips."""

    ownerId: str
    identityType: str
    displayName: str
    trips: list[dict[str, Any]] = []


class TripsSaveResponse(BaseModel):
    success: bool = True
    trips: list[dict[str, Any]] = []
    rejected: int = 0


class ScanRequest(BaseModel):
    """Optional knobs for POST /profile/trips/scan."""

    programs: list[str] = Field(default_factory=list, max_length=30)
    take: int = Field(50, ge=1, le=1000)


class TripScanResult(BaseModel):
    tripId: str
    status: str
    count: int = 0
    lowestMiles: int | None = None
    programs: list[str] = []
    error: str | None = None


class ScanResponse(BaseModel):
    results: list[TripScanResult] = []
