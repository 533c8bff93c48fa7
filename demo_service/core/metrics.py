"""
Prometheus Metrics Module

Defines the request metrics of the demo service on an explicitly constructed
CollectorRegistry. One MetricRegistry is built at process start, before any
listener accepts traffic, and is shared by the instrumentation middleware
(writes) and the metrics listener (reads).

Metrics:
    - http_requests_total{code,method,version}: counter of served requests
    - in_flight_requests{version}: requests currently being handled
    - request_duration_seconds{code,method,version}: latency histogram
    - response_size_bytes{code,method,version}: response body size histogram

Label values follow the Prometheus Go client conventions used by existing
dashboards: "code" is the decimal status ("200") and "method" is lower case
("get").

Bucket boundaries are fixed; scraping dashboards depend on them.
"""

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from prometheus_client import (
    CollectorRegistry, Counter, Gauge, Histogram,
    generate_latest
)


logger = logging.getLogger(__name__)


DURATION_BUCKETS = (0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
SIZE_BUCKETS = (200.0, 500.0, 900.0, 1500.0)

REQUEST_LABELS = ("code", "method", "version")


class MetricRegistry:
    """
    Request metrics bound to one CollectorRegistry.

    All updates are delegated to prometheus_client, whose metric values are
    thread-safe; callers never need their own locking.

    Attributes:
        version: Value of the constant "version" label
        registry: Underlying CollectorRegistry (what the metrics listener serves)
    """

    def __init__(
        self,
        version: str = "",
        registry: Optional[CollectorRegistry] = None
    ):
        """
        Create and register the request metrics.

        Args:
            version: Build/version string attached to every sample
            registry: Registry to register on (default: a fresh one)

        Raises:
            ValueError: If a metric name is already registered on the registry
        """
        self.version = version
        self.registry = registry if registry is not None else CollectorRegistry()

        self.requests_total = Counter(
            "http_requests_total",
            "A counter for received requests",
            REQUEST_LABELS,
            registry=self.registry
        )
        self.in_flight_requests = Gauge(
            "in_flight_requests",
            "A gauge of requests currently being served",
            ["version"],
            registry=self.registry
        )
        self.request_duration = Histogram(
            "request_duration_seconds",
            "A histogram of latencies for requests",
            REQUEST_LABELS,
            buckets=DURATION_BUCKETS,
            registry=self.registry
        )
        self.response_size = Histogram(
            "response_size_bytes",
            "A histogram of response sizes for requests",
            REQUEST_LABELS,
            buckets=SIZE_BUCKETS,
            registry=self.registry
        )

        self._in_flight = self.in_flight_requests.labels(version=self.version)

    @contextmanager
    def track_in_flight(self) -> Iterator[None]:
        """Hold the in-flight gauge incremented for the duration of the block."""
        with self._in_flight.track_inprogress():
            yield

    def observe_request(
        self,
        status_code: int,
        method: str,
        duration_seconds: float,
        size_bytes: int
    ) -> None:
        """
        Record one completed request.

        Args:
            status_code: HTTP status sent to the client
            method: HTTP request method
            duration_seconds: Wall-clock handling time
            size_bytes: Total response body bytes
        """
        labels = self.request_labels(status_code, method)

        self.request_duration.labels(**labels).observe(duration_seconds)
        self.response_size.labels(**labels).observe(size_bytes)
        self.requests_total.labels(**labels).inc()

    def request_labels(self, status_code: int, method: str) -> Dict[str, str]:
        """Label set used for a request with the given status and method."""
        return {
            "code": str(status_code),
            "method": method.lower(),
            "version": self.version,
        }

    def sample(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        """Current value of one sample, or None if it has not been observed."""
        return self.registry.get_sample_value(name, labels or {})

    def in_flight(self) -> float:
        """Current value of the in-flight gauge."""
        return self.sample("in_flight_requests", {"version": self.version})

    def render(self) -> bytes:
        """Generate Prometheus exposition format."""
        return generate_latest(self.registry)
