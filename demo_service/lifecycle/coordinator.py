"""
Lifecycle Coordinator Module

Brings up the listener set, waits for termination, then drives the bounded
graceful shutdown of the application listener.

Startup Order:
    1. Build the routing table and wrap it with instrumentation
    2. Start every listener (each binds its socket first)
    3. Wait for the termination signal

A listener that fails to bind is logged and skipped; the other listeners
keep running and the process stays up until it is told to terminate.

Usage:
    coordinator = LifecycleCoordinator(config, MetricRegistry(config.version))
    asyncio.run(coordinator.run())
"""

import logging
from typing import List, Optional

from ..core.config import ServerConfig
from ..core.errors import ListenerStartError
from ..core.metrics import MetricRegistry
from ..listeners import ApplicationListener, HealthListener, MetricsListener
from ..main import create_app
from ..middlewares.request_tracker import RequestTracker
from .shutdown import SHUTDOWN_DEADLINE_SEC
from .termination import TerminationSignal


logger = logging.getLogger(__name__)


class LifecycleCoordinator:
    """
    Process entry point: owns the listeners and the termination signal.

    Attributes:
        config: Service configuration
        metrics: Metric registry, registered before any listener starts
        termination: Termination token the coordinator waits on
        application: Application listener (after start)
        health: Health listener, None when probes are served by the application
        metrics_listener: Metrics listener (after start)
    """

    def __init__(
        self,
        config: ServerConfig,
        metrics: MetricRegistry,
        termination: Optional[TerminationSignal] = None
    ):
        self.config = config
        self.metrics = metrics
        self.termination = termination or TerminationSignal()
        self.tracker = RequestTracker()

        self.application: Optional[ApplicationListener] = None
        self.health: Optional[HealthListener] = None
        self.metrics_listener: Optional[MetricsListener] = None

    @property
    def listeners(self) -> List:
        return [
            listener
            for listener in (self.application, self.health, self.metrics_listener)
            if listener is not None
        ]

    def start(self) -> None:
        """
        Build the application and start every listener.

        Must be called from a running event loop; does not block.
        """
        app = create_app(self.config, self.metrics, self.tracker)

        self.application = ApplicationListener(self.config.listen_addr, app, self.tracker)
        if self.config.separate_health_listener:
            self.health = HealthListener(self.config.check_addr)
        self.metrics_listener = MetricsListener(self.config.metric_addr, self.metrics)

        for listener in self.listeners:
            try:
                listener.start()
            except ListenerStartError as e:
                logger.error(
                    f"{e}",
                    extra={"listener": e.listener, "address": e.address}
                )

        running = [listener.name for listener in self.listeners if listener.running]
        logger.info(f"Listeners running: {', '.join(running) or 'none'}")

    async def await_termination(self) -> None:
        """Suspend until SIGINT/SIGTERM (or a programmatic trigger)."""
        await self.termination.wait()

    async def shutdown(self, deadline: float = SHUTDOWN_DEADLINE_SEC) -> bool:
        """
        Gracefully stop the application listener.

        Health and metrics listeners are left to end with the process.

        Returns:
            True if every in-flight request finished within the deadline
        """
        logger.info("Shutting down gracefully the server ...")

        if self.application is None:
            return True

        return await self.application.shutdown(deadline)

    async def run(self) -> None:
        """Start, wait for termination, shut down."""
        self.termination.install()
        try:
            self.start()
            await self.await_termination()
            await self.shutdown()
        finally:
            self.termination.uninstall()

        logger.info("Shutdown complete")
