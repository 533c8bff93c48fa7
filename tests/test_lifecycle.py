"""
Tests for listener startup, termination and graceful shutdown.
"""

import os
import time
import signal
import asyncio

import httpx
import pytest

from demo_service.controllers import load_controller
from demo_service.core.config import ServerConfig
from demo_service.lifecycle import TerminationSignal
from demo_service.lifecycle.coordinator import LifecycleCoordinator

from tests.helpers import TEST_VERSION, request_labels, wait_until


pytestmark = pytest.mark.anyio


@pytest.fixture
async def coordinator(config, metrics):
    coordinator = LifecycleCoordinator(config, metrics)
    yield coordinator
    await coordinator.shutdown(deadline=0.5)
    for listener in (coordinator.health, coordinator.metrics_listener):
        if listener is not None:
            listener.stop()


def url(listener, path: str) -> str:
    return f"http://127.0.0.1:{listener.port}{path}"


async def test_start_serves_all_listeners(coordinator, metrics):
    coordinator.start()

    assert coordinator.application.running
    assert coordinator.health.running
    assert coordinator.metrics_listener.running

    async with httpx.AsyncClient(timeout=5) as client:
        echo = await client.get(url(coordinator.application, "/"))
        live = await client.get(url(coordinator.health, "/live"))
        ready = await client.get(url(coordinator.health, "/ready"))
        scrape = await client.get(url(coordinator.metrics_listener, "/metrics"))

    assert echo.status_code == 200
    assert "Remote client address: 127.0.0.1" in echo.text
    assert TEST_VERSION in echo.text
    assert live.text == "ok"
    assert ready.text == "ok"
    for name in (
        "http_requests_total",
        "in_flight_requests",
        "request_duration_seconds",
        "response_size_bytes",
    ):
        assert name in scrape.text

    # Only application traffic is instrumented
    await wait_until(lambda: metrics.sample("http_requests_total", request_labels()) is not None)
    assert metrics.sample("http_requests_total", request_labels()) == 1.0


async def test_probes_folded_into_application_without_health_listener(folded_config, metrics):
    coordinator = LifecycleCoordinator(folded_config, metrics)
    coordinator.start()
    try:
        assert coordinator.health is None

        async with httpx.AsyncClient(timeout=5) as client:
            live = await client.get(url(coordinator.application, "/live"))

        assert live.text == "ok"
        # Recorded once the response has been sent
        await wait_until(lambda: metrics.sample("http_requests_total", request_labels()) is not None)
        assert metrics.sample("http_requests_total", request_labels()) == 1.0
    finally:
        await coordinator.shutdown(deadline=0.5)
        coordinator.metrics_listener.stop()


async def test_bind_failure_keeps_other_listeners_running(occupied_port, metrics):
    config = ServerConfig(
        listen_addr=f"127.0.0.1:{occupied_port}",
        check_addr="127.0.0.1:0",
        metric_addr="127.0.0.1:0",
        version=TEST_VERSION,
    )
    coordinator = LifecycleCoordinator(config, metrics)
    coordinator.start()
    try:
        assert not coordinator.application.running
        assert coordinator.health.running
        assert coordinator.metrics_listener.running

        async with httpx.AsyncClient(timeout=5) as client:
            live = await client.get(url(coordinator.health, "/live"))
        assert live.text == "ok"

        assert await coordinator.shutdown(deadline=0.5)
    finally:
        coordinator.health.stop()
        coordinator.metrics_listener.stop()


async def test_shutdown_drains_in_flight_requests(coordinator, monkeypatch):
    monkeypatch.setattr(load_controller, "DELAY_SECONDS", 0.5)
    coordinator.start()

    async with httpx.AsyncClient(timeout=10) as client:
        requests = [
            asyncio.create_task(client.get(url(coordinator.application, "/delay")))
            for _ in range(3)
        ]
        await wait_until(lambda: coordinator.tracker.active == 3)

        drained = await coordinator.shutdown(deadline=5.0)
        responses = await asyncio.gather(*requests)

    assert drained
    assert [r.status_code for r in responses] == [200, 200, 200]
    assert [r.text for r in responses] == ["ok", "ok", "ok"]
    assert not coordinator.application.running


async def test_shutdown_stops_accepting_connections(coordinator):
    coordinator.start()
    port = coordinator.application.port

    async with httpx.AsyncClient(timeout=5) as client:
        assert (await client.get(url(coordinator.application, "/"))).status_code == 200

    await coordinator.shutdown(deadline=1.0)

    with pytest.raises(httpx.ConnectError):
        async with httpx.AsyncClient(timeout=2) as client:
            await client.get(f"http://127.0.0.1:{port}/")


async def test_shutdown_force_closes_after_deadline(coordinator, metrics, monkeypatch):
    monkeypatch.setattr(load_controller, "DELAY_SECONDS", 30.0)
    coordinator.start()

    async with httpx.AsyncClient(timeout=10) as client:
        request = asyncio.create_task(client.get(url(coordinator.application, "/delay")))
        await wait_until(lambda: coordinator.tracker.active == 1)

        started = time.monotonic()
        drained = await coordinator.shutdown(deadline=0.5)
        elapsed = time.monotonic() - started

        try:
            response = await asyncio.wait_for(request, timeout=5)
        except httpx.HTTPError:
            response = None

    assert not drained
    assert elapsed < 0.5 + 2.5
    assert response is None or response.status_code != 200
    assert not coordinator.application.running
    assert metrics.in_flight() == 0.0


async def test_requests_after_shutdown_began_are_rejected(coordinator):
    coordinator.start()
    coordinator.tracker.begin_shutdown()

    async with httpx.AsyncClient(timeout=5) as client:
        response = await client.get(url(coordinator.application, "/"))

    assert response.status_code == 503
    assert response.text == "Server is shutting down\n"


async def test_run_until_triggered(config, metrics):
    coordinator = LifecycleCoordinator(config, metrics)
    run = asyncio.create_task(coordinator.run())
    try:
        await wait_until(lambda: coordinator.application is not None)
        assert coordinator.application.running

        coordinator.termination.trigger("test")
        await asyncio.wait_for(run, timeout=5)

        assert coordinator.termination.reason == "test"
        assert not coordinator.application.running
    finally:
        coordinator.health.stop()
        coordinator.metrics_listener.stop()


async def test_run_stops_on_sigterm(config, metrics):
    coordinator = LifecycleCoordinator(config, metrics)
    run = asyncio.create_task(coordinator.run())
    try:
        await wait_until(lambda: coordinator.application is not None)

        os.kill(os.getpid(), signal.SIGTERM)
        await asyncio.wait_for(run, timeout=5)

        assert coordinator.termination.reason == "SIGTERM"
        assert not coordinator.application.running
    finally:
        coordinator.health.stop()
        coordinator.metrics_listener.stop()


async def test_termination_signal_is_set_once():
    termination = TerminationSignal()
    assert not termination.is_set()

    termination.trigger("first")
    termination.trigger("second")

    assert termination.is_set()
    assert await termination.wait() == "first"
