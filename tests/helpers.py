"""
Shared test helpers.
"""

import asyncio
import time


TEST_VERSION = "v1.2.3"


def request_labels(code: str = "200", method: str = "get") -> dict:
    """Label set the instrumentation uses for a request."""
    return {"code": code, "method": method, "version": TEST_VERSION}


async def wait_until(predicate, timeout: float = 5.0, interval: float = 0.02) -> None:
    """Poll a condition from an async test until it holds."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(interval)
