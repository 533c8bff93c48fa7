"""
pytest configuration and fixtures.
"""

import socket

import pytest
from fastapi.testclient import TestClient

from demo_service.core.config import ServerConfig
from demo_service.core.metrics import MetricRegistry
from demo_service.main import create_app

from tests.helpers import TEST_VERSION


@pytest.fixture
def anyio_backend() -> str:
    """Async tests run on asyncio (uvicorn and the coordinator need it)."""
    return "asyncio"


@pytest.fixture
def config() -> ServerConfig:
    """Configuration with all three listeners on ephemeral loopback ports."""
    return ServerConfig(
        listen_addr="127.0.0.1:0",
        check_addr="127.0.0.1:0",
        metric_addr="127.0.0.1:0",
        version=TEST_VERSION,
    )


@pytest.fixture
def folded_config() -> ServerConfig:
    """Configuration without a health listener: probes live on the application."""
    return ServerConfig(
        listen_addr="127.0.0.1:0",
        check_addr="",
        metric_addr="127.0.0.1:0",
        version=TEST_VERSION,
    )


@pytest.fixture
def metrics() -> MetricRegistry:
    """Fresh metric registry per test."""
    return MetricRegistry(version=TEST_VERSION)


@pytest.fixture
def app(folded_config, metrics):
    """Application with every route mounted."""
    return create_app(folded_config, metrics)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def occupied_port():
    """A loopback port that already has a listener bound to it."""
    with socket.create_server(("127.0.0.1", 0)) as sock:
        yield sock.getsockname()[1]
