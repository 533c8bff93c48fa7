"""
Socket Binding Module

Every listener binds its socket synchronously in start(), before any serving
loop runs, so a bind failure is reported per listener at startup and the
bound port is known immediately (also when port 0 was requested).
"""

import socket
import logging

from ..core.config import ListenAddress
from ..core.errors import ListenerStartError


logger = logging.getLogger(__name__)


LISTEN_BACKLOG = 128


def bind_socket(address: ListenAddress, listener: str) -> socket.socket:
    """
    Create a listening TCP socket for an address.

    Args:
        address: Address to bind
        listener: Listener name, for error reporting

    Returns:
        Bound, listening socket

    Raises:
        ListenerStartError: If the address cannot be bound
    """
    host = address.bind_host
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    dualstack = not address.host and family == socket.AF_INET6

    try:
        sock = socket.create_server(
            (host, address.port),
            family=family,
            backlog=LISTEN_BACKLOG,
            dualstack_ipv6=dualstack
        )
    except OSError as e:
        raise ListenerStartError(listener, str(address), e) from e

    logger.debug(f"Bound {listener} socket on {sock.getsockname()[:2]}")
    return sock
