"""
Routes Configuration

This module builds the routing table of the application listener.
"""

from fastapi import APIRouter
from .controllers import (
    echo_router,
    probe_router,
    load_router
)


def build_router(include_probes: bool = True) -> APIRouter:
    """
    Aggregate controller routers into a single API router.

    Args:
        include_probes: Mount /ready and /live here. False when a dedicated
            health listener serves them instead.
    """
    api_router = APIRouter()

    if include_probes:
        api_router.include_router(probe_router)  # /ready, /live

    api_router.include_router(load_router)      # /load, /delay

    # Catch-all, so it must come last
    api_router.include_router(echo_router)      # /{path}

    return api_router
