"""
Listeners Package

The three independently bound network endpoints of the service:
    - ApplicationListener: routed handlers behind instrumentation (uvicorn)
    - HealthListener: liveness/readiness probes (aiohttp, own thread)
    - MetricsListener: Prometheus exposition (prometheus_client, own thread)
"""

from .application import ApplicationListener
from .health import HealthListener
from .metrics import MetricsListener

__all__ = [
    "ApplicationListener",
    "HealthListener",
    "MetricsListener",
]
