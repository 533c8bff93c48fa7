"""
Error Types Module

This module provides the exception classes raised by the demo service.
Failures are handled at the boundary where they occur: a listener that
cannot bind is logged and skipped, a bad address aborts argument parsing.
Nothing here is ever turned into an HTTP error response.

Available Exception Classes:
    - DemoServiceError: Base class for all service errors
    - ConfigurationError: Invalid address or flag value
    - ListenerStartError: A listener could not bind its address

Usage:
    from demo_service.core.errors import ListenerStartError

    try:
        listener.start()
    except ListenerStartError as e:
        logger.error(f"{e}")
"""

from typing import Optional


class DemoServiceError(Exception):
    """Base class for all demo service errors."""


class ConfigurationError(DemoServiceError, ValueError):
    """
    Invalid configuration value.

    Subclasses ValueError so pydantic validators and argparse type
    converters report it as a regular validation failure.
    """


class ListenerStartError(DemoServiceError):
    """
    A listener failed to bind its network address.

    Attributes:
        listener: Listener name ("application", "health", "metrics")
        address: Address string that was being bound
        reason: Underlying OS error, if any
    """

    def __init__(
        self,
        listener: str,
        address: str,
        reason: Optional[BaseException] = None
    ):
        self.listener = listener
        self.address = address
        self.reason = reason

        message = f"Starting {listener} listener on {address} failed"
        if reason is not None:
            message = f"{message}: {reason}"

        super().__init__(message)
