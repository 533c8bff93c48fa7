"""
Application Dependencies Module

This module provides dependency injection for FastAPI endpoints.
The container is attached to the application object (app.state.container)
when the app is created, so every app instance carries its own configuration
instead of sharing module-level state.

Components:
    - AppContainer: Holds the objects shared by request handlers
    - Getter functions: FastAPI Depends() compatible functions

Usage:
    from demo_service.lifecycle.dependencies import get_version

    @router.get("/")
    async def echo(request: Request, version: str = Depends(get_version)):
        ...
"""

import logging
from dataclasses import dataclass, field

from fastapi import FastAPI, Request

from ..core.config import ServerConfig
from ..middlewares.request_tracker import RequestTracker


logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """
    Container for application dependencies.

    Attributes:
        config: Service configuration
        tracker: Active request tracker used by the shutdown drain
    """
    config: ServerConfig
    tracker: RequestTracker = field(default_factory=RequestTracker)


def set_container(app: FastAPI, container: AppContainer) -> None:
    """Attach the container to an application."""
    app.state.container = container


def get_container(request: Request) -> AppContainer:
    """Get the container of the application serving this request."""
    return request.app.state.container


# =============================================================================
# FastAPI Dependency Functions
# =============================================================================

def get_version(request: Request) -> str:
    """Get the configured version string."""
    return get_container(request).config.version
