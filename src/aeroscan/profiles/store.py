# Trip profile store: per-owner JSON files under ~/.aeroscan/profiles/.
# Created: 2026-10-05
#
# Files are keyed by the hashed owner id and written via temp file +
# os.replace, so a crash mid-write never leaves a torn profile behind.

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Any

from aeroscan.errors import InternalError

logger = logging.getLogger(__name__)

_OWNER_RE = re.compile(r"^(api_key|oauth):[0-9a-f]{64}$")


class TripProfileStore:
    """File-based trip lists, one file per owner.

    Files are chmod 0600 (owner-only read/write).
    """

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)
        self._lock = threading.Lock()

    def _path(self, owner_id: str) -> Path:
        if not _OWNER_RE.match(owner_id):
            raise ValueError(f"Malformed owner id: {owner_id[:16]}")
        kind, digest = owner_id.split(":", 1)
        return self.base_dir / f"{kind}_{digest}.json"

    def load(self, owner_id: str) -> list[dict[str, Any]]:
        """Load an owner's trips. Missing or unreadable files yield []."""
        path = self._path(owner_id)
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Failed to load profile %s: %s", path.name, e)
            return []
        trips = data.get("trips") if isinstance(data, dict) else None
        return trips if isinstance(trips, list) else []

    def save(self, owner_id: str, trips: list[dict[str, Any]]) -> None:
        """Atomically replace an owner's trips."""
        path = self._path(owner_id)
        content = json.dumps({"ownerId": owner_id, "trips": trips}, indent=2)
        with self._lock:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
                try:
                    with os.fdopen(fd, "w") as f:
                        f.write(content)
                    os.replace(tmp_path, path)
                except OSError:
                    Path(tmp_path).unlink(missing_ok=True)
                    raise
            except OSError as e:
                logger.error("Failed to save profile %s: %s", path.name, e)
                raise InternalError("Failed to save trips") from e
        logger.info("Saved %d trips for %s", len(trips), owner_id.split(":", 1)[0])


# Singleton
_store: TripProfileStore | None = None


def get_profile_store() -> TripProfileStore:
    global _store
    if _store is None:
        from aeroscan.config import get_settings

        _store = TripProfileStore(get_settings().resolved_profile_dir())
    return _store


def reset_profile_store() -> None:
    """Reset singleton (for testing)."""
    global _store
    _store = None
