"""
Request Tracker Middleware

This middleware tracks active requests on the application listener and
rejects new requests once shutdown has begun.

Features:
    - Counts active requests (read by the shutdown drain)
    - Rejects requests during shutdown with 503
    - Thread-safe counter

Usage:
    from demo_service.middlewares.request_tracker import (
        RequestTracker,
        RequestTrackerMiddleware
    )

    tracker = RequestTracker()
    app.add_middleware(RequestTrackerMiddleware, tracker=tracker)
"""

import logging
import threading

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from fastapi import status


logger = logging.getLogger(__name__)


class RequestTracker:
    """
    Active request counter with a shutdown flag.

    Attributes:
        active: Number of requests currently inside the application
        shutting_down: True once begin_shutdown() was called
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._active = 0
        self._shutting_down = threading.Event()

    @property
    def active(self) -> int:
        return self._active

    @property
    def shutting_down(self) -> bool:
        return self._shutting_down.is_set()

    def begin_shutdown(self) -> None:
        """Stop admitting new requests."""
        self._shutting_down.set()

    def increment(self) -> int:
        """Increment active request count and return new value."""
        with self._lock:
            self._active += 1
            return self._active

    def decrement(self) -> int:
        """Decrement active request count and return new value."""
        with self._lock:
            self._active = max(0, self._active - 1)
            return self._active


class RequestTrackerMiddleware(BaseHTTPMiddleware):
    """
    Middleware to track active requests and handle shutdown gracefully.

    During shutdown:
    - Rejects new incoming requests with 503
    - Existing requests are allowed to complete
    """

    def __init__(self, app, tracker: RequestTracker):
        super().__init__(app)
        self.tracker = tracker

    async def dispatch(self, request: Request, call_next):
        """Process request with tracking."""
        if self.tracker.shutting_down:
            return PlainTextResponse(
                "Server is shutting down\n",
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE
            )

        self.tracker.increment()
        try:
            return await call_next(request)
        finally:
            self.tracker.decrement()
