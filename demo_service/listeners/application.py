"""
Application Listener Module

Runs the instrumented FastAPI application under uvicorn, as a task on the
coordinator's event loop. It is the only listener that is drained on
shutdown.

uvicorn normally installs its own SIGINT/SIGTERM handlers; here the
coordinator owns the signals and asks the server to stop explicitly.
"""

import asyncio
import logging
from contextlib import contextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from ..core.config import ListenAddress
from ..lifecycle.shutdown import SHUTDOWN_DEADLINE_SEC, drain_application
from ..middlewares.request_tracker import RequestTracker
from .sockets import bind_socket


logger = logging.getLogger(__name__)


class ApplicationServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the coordinator."""

    @contextmanager
    def capture_signals(self):
        yield


class ApplicationListener:
    """
    Application traffic listener.

    Attributes:
        address: Configured bind address
        app: Instrumented FastAPI application
        tracker: Active request tracker read during the drain
        port: Bound port (after start)
    """

    name = "application"

    def __init__(self, address: ListenAddress, app: FastAPI, tracker: RequestTracker):
        self.address = address
        self.app = app
        self.tracker = tracker
        self.port: Optional[int] = None
        self.server: Optional[ApplicationServer] = None
        self.task: Optional[asyncio.Task] = None
        self._socket = None

    @property
    def running(self) -> bool:
        return self.task is not None and not self.task.done()

    def start(self) -> None:
        """
        Bind the address and start serving as a task on the running loop.

        Raises:
            ListenerStartError: If the address cannot be bound
        """
        self._socket = bind_socket(self.address, self.name)
        self.port = self._socket.getsockname()[1]

        config = uvicorn.Config(
            self.app,
            log_config=None,
            timeout_graceful_shutdown=SHUTDOWN_DEADLINE_SEC,
        )
        self.server = ApplicationServer(config)
        self.task = asyncio.create_task(self._serve(), name="application-listener")

        logger.info(f"Server started at {self.address}")

    async def _serve(self) -> None:
        try:
            await self.server.serve(sockets=[self._socket])
        except Exception as e:
            logger.error(
                f"Application listener stopped unexpectedly: {e}",
                exc_info=True,
                extra={"listener": self.name}
            )

    async def shutdown(self, deadline: float = SHUTDOWN_DEADLINE_SEC) -> bool:
        """
        Gracefully stop: stop accepting, drain, force-close after deadline.

        Returns:
            True if every in-flight request finished within the deadline
        """
        if not self.running:
            return True

        self.server.config.timeout_graceful_shutdown = deadline
        return await drain_application(self.server, self.task, self.tracker, deadline)
