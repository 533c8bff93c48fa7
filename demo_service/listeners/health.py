"""
Health Listener Module

This module provides a lightweight health-check server using aiohttp.
It runs its own event loop in a background thread, so probes keep answering
even while the application listener is busy, and it is not instrumented.

It is not drained on shutdown: the thread is a daemon and ends with the
process.
"""

import asyncio
import logging
import threading
from typing import Optional

from aiohttp import web

from ..core.config import ListenAddress
from .sockets import bind_socket


logger = logging.getLogger(__name__)


STOP_POLL_INTERVAL = 0.5
PROBE_OK = "ok"


def build_health_app() -> web.Application:
    """Create the aiohttp application serving /live and /ready."""

    async def probe(request: web.Request) -> web.Response:
        """Liveness/readiness probe."""
        return web.Response(text=PROBE_OK)

    app = web.Application()
    app.router.add_get("/live", probe)
    app.router.add_get("/ready", probe)
    return app


class HealthListener:
    """
    Dedicated health-check listener.

    Attributes:
        address: Configured bind address
        port: Bound port (after start)
    """

    name = "health"

    def __init__(self, address: ListenAddress):
        self.address = address
        self.port: Optional[int] = None
        self._socket = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """
        Bind the address and start serving in a background thread.

        Raises:
            ListenerStartError: If the address cannot be bound
        """
        self._socket = bind_socket(self.address, self.name)
        self.port = self._socket.getsockname()[1]

        self._thread = threading.Thread(
            target=self._run,
            name="health-listener",
            daemon=True
        )
        self._thread.start()
        logger.info(f"Serving health checks on {self.address}")

    def stop(self, timeout: float = 2.0) -> None:
        """Stop serving and wait for the thread to exit."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def _run(self) -> None:
        """Thread body: run the server in a new event loop for this thread."""
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            loop.run_until_complete(self._serve())
        except Exception as e:
            logger.error(f"Health listener error: {e}", extra={"listener": self.name})
        finally:
            loop.close()

    async def _serve(self) -> None:
        runner = web.AppRunner(build_health_app())
        await runner.setup()
        site = web.SockSite(runner, self._socket)
        await site.start()
        logger.debug(f"Health listener running on port {self.port}")

        # Keep running until stop event
        while not self._stop_event.is_set():
            await asyncio.sleep(STOP_POLL_INTERVAL)

        await runner.cleanup()
        logger.info("Health listener stopped")
