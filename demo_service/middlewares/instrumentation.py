"""
Instrumentation Middleware

This middleware observes every HTTP request passing through the application
listener and records Prometheus metrics without altering the response.

It is written as a plain ASGI middleware rather than a BaseHTTPMiddleware so
the response status and the exact number of body bytes can be read off the
ASGI "send" messages, including for streaming responses.

Per request:
    1. in_flight_requests is incremented before the inner app runs and
       decremented exactly once when it finishes, however it finishes
    2. status code (default 200), method, duration and body size are captured
    3. one observation goes into request_duration_seconds and
       response_size_bytes, and http_requests_total is incremented

Usage:
    from demo_service.middlewares.instrumentation import InstrumentationMiddleware

    app.add_middleware(InstrumentationMiddleware, metrics=metric_registry)
"""

import time
import logging

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..core.metrics import MetricRegistry


logger = logging.getLogger(__name__)


DEFAULT_STATUS_CODE = 200
UNHANDLED_ERROR_STATUS_CODE = 500


class InstrumentationMiddleware:
    """
    Wraps an ASGI application with request metrics.

    Attributes:
        app: Inner ASGI application
        metrics: Shared metric registry
    """

    def __init__(self, app: ASGIApp, metrics: MetricRegistry):
        self.app = app
        self.metrics = metrics

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        status_code = None
        size_bytes = 0

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code, size_bytes

            if message["type"] == "http.response.start":
                status_code = message["status"]
            elif message["type"] == "http.response.body":
                size_bytes += len(message.get("body", b""))

            await send(message)

        start_time = time.perf_counter()

        with self.metrics.track_in_flight():
            try:
                await self.app(scope, receive, send_wrapper)
            except BaseException:
                # Includes cancellation by a forced shutdown
                if status_code is None:
                    status_code = UNHANDLED_ERROR_STATUS_CODE
                raise
            finally:
                self.metrics.observe_request(
                    status_code=status_code or DEFAULT_STATUS_CODE,
                    method=scope["method"],
                    duration_seconds=time.perf_counter() - start_time,
                    size_bytes=size_bytes
                )
