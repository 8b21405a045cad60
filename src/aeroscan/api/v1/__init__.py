# API router aggregation.
# Created: 2026-10-07
#
# mount_routers(app) registers every domain router under /api.

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

API_PREFIX = "/api"

# (module_path, attr_name, tag)
_ROUTERS: list[tuple[str, str, str]] = [
    ("aeroscan.api.v1.health", "router", "Health"),
    ("aeroscan.api.v1.oauth", "router", "OAuth"),
    ("aeroscan.api.v1.proxy", "router", "Partner API"),
    ("aeroscan.api.v1.profile", "router", "Profile"),
]


def mount_routers(app: FastAPI, prefix: str = API_PREFIX) -> None:
    """Mount all domain routers on *app* at *prefix*."""
    for module_path, attr_name, tag in _ROUTERS:
        mod = importlib.import_module(module_path)
        app.include_router(getattr(mod, attr_name), prefix=prefix)
        logger.debug("Mounted router: %s (%s)", module_path, tag)
