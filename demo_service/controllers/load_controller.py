"""
Load Controller Module

This module defines the artificial load endpoints used to trigger CPU
pressure and slow responses on purpose, for testing autoscaling, alerting,
timeouts and slow-client handling in the surrounding infrastructure.

Endpoints:
    - /load:  keep every logical CPU busy for a fixed window
    - /delay: answer "ok" after a fixed delay

Both timers are fixed and do not react to the client going away.
"""

import asyncio
import logging
import multiprocessing
from typing import List

import psutil
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool

from .methods import ANY_METHOD


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Load"])


LOAD_DURATION_SECONDS = 10.0
DELAY_SECONDS = 10.0
WORKER_JOIN_TIMEOUT = 5.0


def _spin(stop_event) -> None:
    """Busy-loop until told to stop."""
    while not stop_event.is_set():
        pass


def _start_workers(count: int, stop_event, context) -> List[multiprocessing.Process]:
    """Start one busy worker process per CPU, stopping those already started on failure."""
    workers = []
    try:
        for i in range(count):
            worker = context.Process(
                target=_spin,
                args=(stop_event,),
                name=f"cpu-load-{i}",
                daemon=True
            )
            worker.start()
            workers.append(worker)
    except BaseException:
        stop_event.set()
        _stop_workers(workers)
        raise
    return workers


def _stop_workers(workers: List[multiprocessing.Process]) -> None:
    """Wait for workers to exit, terminating any that ignore the stop event."""
    for worker in workers:
        worker.join(timeout=WORKER_JOIN_TIMEOUT)
        if worker.is_alive():
            logger.warning(f"Worker {worker.name} did not stop, terminating")
            worker.terminate()
            worker.join()


@router.api_route(
    "/load",
    methods=ANY_METHOD,
    response_class=PlainTextResponse,
    summary="Keep every CPU busy for a fixed window"
)
async def load_cpu():
    """
    Spin one busy process per logical CPU, wait, then stop them.

    Processes rather than threads, so the load is not serialized on the GIL.

    Returns:
        One line "Loading CPU: <n>" per CPU exercised.
    """
    cpu_count = psutil.cpu_count(logical=True) or 1
    context = multiprocessing.get_context("spawn")
    stop_event = context.Event()

    workers = await run_in_threadpool(_start_workers, cpu_count, stop_event, context)
    logger.info(f"Loading {cpu_count} CPUs for {LOAD_DURATION_SECONDS}s")

    try:
        await asyncio.sleep(LOAD_DURATION_SECONDS)
    finally:
        stop_event.set()
        await run_in_threadpool(_stop_workers, workers)

    return "".join(f"Loading CPU: {i}\n" for i in range(len(workers)))


@router.api_route(
    "/delay",
    methods=ANY_METHOD,
    response_class=PlainTextResponse,
    summary="Answer after a fixed delay"
)
async def delay():
    """Sleep for a fixed delay, then return "ok"."""
    await asyncio.sleep(DELAY_SECONDS)
    return "ok"
