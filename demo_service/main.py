"""
Main Application Module

This module defines the FastAPI application factory for the application
listener.
"""

import logging
from typing import Optional

from fastapi import FastAPI

from . import __version__
from .core.config import ServerConfig
from .core.metrics import MetricRegistry
from .routes import build_router
from .lifecycle.dependencies import AppContainer, set_container

from .middlewares.request_tracker import RequestTracker, RequestTrackerMiddleware
from .middlewares.instrumentation import InstrumentationMiddleware


logger = logging.getLogger(__name__)


def create_app(
    config: ServerConfig,
    metrics: MetricRegistry,
    tracker: Optional[RequestTracker] = None
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Service configuration
        metrics: Metric registry the instrumentation records into
        tracker: Active request tracker (default: a new one)

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Demo Service",
        version=__version__,
        description="Demo workload for rollout, probe and scrape testing",
        docs_url=None,
        redoc_url=None,
        openapi_url=None
    )

    container = AppContainer(
        config=config,
        tracker=tracker or RequestTracker()
    )
    set_container(app, container)

    # Add Middlewares (Order matters!)
    # Execution order: last added -> first executed

    # 1. Request Tracker (Active request count for graceful shutdown)
    app.add_middleware(RequestTrackerMiddleware, tracker=container.tracker)

    # 2. Instrumentation (outermost, so rejected requests are counted too)
    app.add_middleware(InstrumentationMiddleware, metrics=metrics)

    app.include_router(
        build_router(include_probes=not config.separate_health_listener)
    )

    logger.info("FastAPI application created")
    return app
