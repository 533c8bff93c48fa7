"""
Echo Controller Module

This module defines the catch-all endpoint: any path and method not claimed
by another route lands here. It reports which instance served the request:
host name, configured version and the caller's address.
Lookup failures are written into the body as a single line; the status
stays 200.
"""

import socket
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from ..lifecycle.dependencies import get_version
from .methods import ANY_METHOD


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Echo"])


@router.api_route(
    "/{path:path}",
    methods=ANY_METHOD,
    response_class=PlainTextResponse,
    summary="Report host name, version and client address"
)
async def echo(request: Request, version: str = Depends(get_version)):
    """
    Echo endpoint.

    Returns:
        Plain text:
            Server name: <hostname>
            Server version: <version>
            Remote client address: <ip>
    """
    try:
        hostname = socket.gethostname()
    except OSError as e:
        logger.warning(f"Error getting hostname: {e}")
        return "Error getting hostname\n"

    remote_address = _remote_address(request)
    if not remote_address:
        return "Error getting remote address\n"

    return (
        f"Server name: {hostname}\n"
        f"Server version: {version}\n"
        f"Remote client address: {remote_address}\n"
    )


def _remote_address(request: Request) -> Optional[str]:
    """Client host without the port, or None if the server did not supply one."""
    if request.client is None:
        return None
    return request.client.host or None
