# Browser-facing router aggregation.
# Created: 2026-10-19
#
# mount_routers(app) registers the health, auth and proxy routers at the root;
# the frontend calls /auth/* and /api/* directly.

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

_ROUTERS: list[tuple[str, str, str]] = [
    # (module_path, attr_name, tag)
    ("playdeck.api.health", "router", "Health"),
    ("playdeck.api.auth", "router", "Auth"),
    ("playdeck.api.player", "router", "Player"),
]


def mount_routers(app: FastAPI) -> None:
    """Mount every domain router on *app*. Import errors propagate."""
    for module_path, attr_name, tag in _ROUTERS:
        mod = importlib.import_module(module_path)
        app.include_router(getattr(mod, attr_name))
        logger.debug("Mounted router: %s (%s)", module_path, tag)
