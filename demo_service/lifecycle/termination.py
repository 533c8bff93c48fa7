"""
Termination Signal Module

A cancellation token for the coordinator: set once by SIGINT/SIGTERM (or
programmatically), awaited by exactly one coordinating task.
"""

import signal
import asyncio
import logging
from typing import Optional


logger = logging.getLogger(__name__)


class TerminationSignal:
    """
    Process-wide termination request.

    Attributes:
        reason: What triggered termination (signal name or caller-supplied text)
    """

    SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(self):
        self._event = asyncio.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.reason: Optional[str] = None

    def install(self) -> None:
        """Set the token when SIGINT or SIGTERM is received by the running loop."""
        self._loop = asyncio.get_running_loop()
        for sig in self.SIGNALS:
            self._loop.add_signal_handler(sig, self.trigger, sig.name)

    def uninstall(self) -> None:
        """Restore default signal handling."""
        if self._loop is None:
            return
        for sig in self.SIGNALS:
            self._loop.remove_signal_handler(sig)
        self._loop = None

    def trigger(self, reason: str = "requested") -> None:
        """Request termination. Later calls are ignored."""
        if self._event.is_set():
            return
        self.reason = reason
        logger.info(f"Termination requested ({reason})")
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> Optional[str]:
        """Suspend until termination is requested; returns the reason."""
        await self._event.wait()
        return self.reason
