"""Periodic background sync, started from the FastAPI lifespan."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Callable, Optional

from .blinko_client import build_note_client
from .repositories import get_store
from .settings import Settings
from .sync import SyncService, default_sync_configs

logger = logging.getLogger(__name__)


def run_scheduled_sync(settings: Settings) -> None:
    """One scheduled run: sync every configured calendar and record the results."""
    client = build_note_client()
    try:
        service = SyncService(
            client,
            get_store(),
            filename=settings.ics_filename,
            ttl_seconds=settings.feed_ttl_seconds or None,
        )
        logger.info("Starting scheduled sync...")
        service.auto_sync(default_sync_configs(settings))
        logger.info("Scheduled sync completed")
    finally:
        client.close()


# PUBLIC_INTERFACE
async def sync_forever(
    interval_seconds: float,
    run_once: Callable[[], None],
    *,
    stop: Optional[asyncio.Event] = None,
) -> None:
    """
    Call run_once in a worker thread, then sleep interval_seconds, until stopped or cancelled.

    A failing run is logged and the loop keeps going.
    """
    stop = stop or asyncio.Event()
    while not stop.is_set():
        try:
            await asyncio.to_thread(run_once)
        except Exception:
            logger.exception("Scheduled sync failed")
        try:
            await asyncio.wait_for(stop.wait(), timeout=interval_seconds)
        except asyncio.TimeoutError:
            pass


# PUBLIC_INTERFACE
def start_scheduler(settings: Settings) -> Optional[asyncio.Task]:
    """
    Start the background sync loop if an interval and the note API are configured.

    Returns:
        The running task, or None when scheduling is disabled.
    """
    if settings.sync_interval_minutes <= 0:
        logger.info("Scheduled sync disabled (SYNC_INTERVAL_MINUTES=0)")
        return None
    if not settings.blinko_api_base or not settings.blinko_token:
        logger.warning("Scheduled sync disabled: BLINKO_API_BASE or BLINKO_TOKEN not set")
        return None
    logger.info("Scheduled sync every %d minutes", settings.sync_interval_minutes)
    return asyncio.create_task(
        sync_forever(settings.sync_interval_minutes * 60, lambda: run_scheduled_sync(settings))
    )


# PUBLIC_INTERFACE
async def stop_scheduler(task: Optional[asyncio.Task]) -> None:
    """Cancel the background sync loop and wait for it to finish unwinding."""
    if task is None:
        return
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task
    logger.info("Scheduled sync stopped")
