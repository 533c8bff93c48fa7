"""
Probe Controller Module

This module defines the readiness and liveness probe endpoints.
Both always answer with the literal "ok"; they hold no state and have no
failure path, so an orchestrator sees the process as healthy for as long
as it can serve HTTP at all.
"""

from fastapi import APIRouter, status
from fastapi.responses import PlainTextResponse

from .methods import ANY_METHOD

router = APIRouter(tags=["Health"])


PROBE_OK = "ok"


@router.api_route(
    "/ready",
    methods=ANY_METHOD,
    response_class=PlainTextResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness probe"
)
async def readiness_probe():
    """K8s readiness probe."""
    return PROBE_OK


@router.api_route(
    "/live",
    methods=ANY_METHOD,
    response_class=PlainTextResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness probe"
)
async def liveness_probe():
    """K8s liveness probe."""
    return PROBE_OK
