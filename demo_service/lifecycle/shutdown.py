"""
Application Shutdown Module

This module drains the application listener on shutdown.
Only the application listener is drained; the health and metrics listeners
carry no stateful work and end with the process.

Shutdown Order:
    1. Reject requests arriving on existing connections (503)
    2. Ask uvicorn to stop: it closes the listening socket and idle connections
    3. Wait for active requests to finish, up to the deadline
    4. Past the deadline uvicorn cancels the remaining request tasks, which
       closes their connections; the outstanding count is logged as a warning
    5. Wait for the server task to exit

Usage:
    from demo_service.lifecycle.shutdown import drain_application

    drained = await drain_application(server, serve_task, tracker, deadline=5.0)
"""

import asyncio
import logging
import time

from ..middlewares.request_tracker import RequestTracker


logger = logging.getLogger(__name__)


# Timeout constants
SHUTDOWN_DEADLINE_SEC = 5.0
DRAIN_POLL_INTERVAL = 0.1
SERVER_STOP_TIMEOUT = 2.0


async def drain_application(
    server,
    serve_task: asyncio.Task,
    tracker: RequestTracker,
    deadline: float = SHUTDOWN_DEADLINE_SEC
) -> bool:
    """
    Gracefully stop a uvicorn server within a bounded time.

    The server must have been configured with timeout_graceful_shutdown equal
    to the deadline; that is what cancels requests still running past it.

    Args:
        server: uvicorn.Server instance to stop
        serve_task: Task running server.serve()
        tracker: Active request tracker for the served application
        deadline: Seconds to wait for in-flight requests

    Returns:
        True if all in-flight requests finished before the deadline
    """
    tracker.begin_shutdown()
    server.should_exit = True

    drained = await _wait_for_active_requests(tracker, deadline)
    await _wait_for_server_stop(serve_task)

    logger.info("Application listener stopped")
    return drained


async def _wait_for_active_requests(tracker: RequestTracker, deadline: float) -> bool:
    """Wait for active requests to complete with timeout."""
    if tracker.active:
        logger.info(
            f"Waiting up to {deadline}s for {tracker.active} "
            f"active requests to complete..."
        )

    start_time = time.monotonic()

    while tracker.active > 0:
        elapsed = time.monotonic() - start_time
        if elapsed >= deadline:
            logger.warning(
                f"Shutdown timeout reached. "
                f"Force closing with {tracker.active} "
                f"requests still active."
            )
            return False

        await asyncio.sleep(min(DRAIN_POLL_INTERVAL, deadline - elapsed))

    return True


async def _wait_for_server_stop(serve_task: asyncio.Task) -> None:
    """Wait for the server task, cancelling it if it does not stop in time."""
    try:
        await asyncio.wait_for(asyncio.shield(serve_task), timeout=SERVER_STOP_TIMEOUT)
    except asyncio.TimeoutError:
        logger.warning(f"Server did not stop within {SERVER_STOP_TIMEOUT}s, cancelling")
        serve_task.cancel()
        try:
            await serve_task
        except asyncio.CancelledError:
            pass
