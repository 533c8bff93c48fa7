"""
Lifecycle Package

This package provides process lifecycle management including:
- Dependency injection (dependencies.py)
- Termination signal (termination.py)
- Graceful shutdown of the application listener (shutdown.py)
- Listener startup and shutdown coordination (coordinator.py)

The coordinator is imported from its module directly
(demo_service.lifecycle.coordinator); it depends on the application factory,
which itself depends on this package.
"""

from .dependencies import (
    AppContainer,
    get_container,
    set_container,
    get_version,
)

from .termination import TerminationSignal
from .shutdown import SHUTDOWN_DEADLINE_SEC, drain_application

__all__ = [
    # Container
    "AppContainer",
    "get_container",
    "set_container",

    # Dependency getters
    "get_version",

    # Shutdown
    "TerminationSignal",
    "SHUTDOWN_DEADLINE_SEC",
    "drain_application",
]
