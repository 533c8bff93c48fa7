"""
Metrics Listener Module

Serves the Prometheus exposition of the shared MetricRegistry on its own
address, using prometheus_client's threaded HTTP server. Like the health
listener it runs in a daemon thread and ends abruptly with the process.
"""

import logging
from typing import Optional

from prometheus_client import start_http_server

from ..core.config import ListenAddress
from ..core.errors import ListenerStartError
from ..core.metrics import MetricRegistry


logger = logging.getLogger(__name__)


class MetricsListener:
    """
    Metrics scrape listener.

    Attributes:
        address: Configured bind address
        metrics: Registry rendered on every scrape
    """

    name = "metrics"

    def __init__(self, address: ListenAddress, metrics: MetricRegistry):
        self.address = address
        self.metrics = metrics
        self._server = None
        self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def port(self) -> Optional[int]:
        if self._server is None:
            return None
        return self._server.server_port

    def start(self) -> None:
        """
        Bind the address and start serving in a background thread.

        Raises:
            ListenerStartError: If the address cannot be bound
        """
        try:
            self._server, self._thread = start_http_server(
                self.address.port,
                addr=self.address.bind_host,
                registry=self.metrics.registry
            )
        except OSError as e:
            raise ListenerStartError(self.name, str(self.address), e) from e

        logger.info(f"Serving metrics on {self.address}")

    def stop(self) -> None:
        """Stop serving and release the socket."""
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        logger.info("Metrics listener stopped")
