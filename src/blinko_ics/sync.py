"""Sync orchestration: fetch todos, render the feed, persist it and record the outcome."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from fastapi import Depends

from .blinko_client import BlinkoClient, get_note_client
from .ics import CIVIL_ZONE, CivilZone, assemble
from .models import SyncResult, SyncStatusRecord
from .repositories import FeedStore, get_store
from .schemas import SyncConfig
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

SYNC_RESULTS_KEY = "sync-results"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(instant: datetime) -> str:
    return instant.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# PUBLIC_INTERFACE
def default_sync_configs(settings: Settings) -> List[SyncConfig]:
    """The calendars synced on every scheduled run."""
    return [SyncConfig(calendar_name=settings.calendar_name, size=settings.sync_page_size)]


class SyncService:
    """
    Runs calendar syncs against a note client and a feed store.

    The clock is injected so tests control "now"; it is the only place the
    wall clock is read, and its value is passed down to the feed engine.
    """

    def __init__(
        self,
        client: BlinkoClient,
        store: FeedStore,
        *,
        filename: str = "todo.ics",
        ttl_seconds: Optional[int] = 86400,
        zone: CivilZone = CIVIL_ZONE,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._client = client
        self._store = store
        self._filename = filename
        self._ttl_seconds = ttl_seconds
        self._zone = zone
        self._clock = clock

    @property
    def filename(self) -> str:
        return self._filename

    def save_feed(self, content: str, filename: str) -> None:
        """Store a rendered feed with lastUpdated/size/filename metadata."""
        metadata = {
            "lastUpdated": _iso(self._clock()),
            "size": len(content),
            "filename": filename,
        }
        self._store.put(filename, content, metadata=metadata, ttl_seconds=self._ttl_seconds)

    def sync_calendar(self, config: SyncConfig) -> SyncResult:
        """
        Fetch todos for one config, render and store the feed.

        Raises whatever the fetch or render step raises (NoteApiError, InvalidInput).
        """
        logger.info("Syncing calendar: %s", config.calendar_name)
        todos = self._client.fetch_todos(config)
        content = assemble(todos, config.calendar_name, self._clock(), self._zone)
        self.save_feed(content, self._filename)
        logger.info("Synced %d todos for %s", len(todos), config.calendar_name)
        return {
            "calendarName": config.calendar_name,
            "status": "success",
            "count": len(todos),
            "filename": self._filename,
        }

    def record_results(self, results: List[SyncResult]) -> SyncStatusRecord:
        """Persist the outcome of a sync run under 'sync-results'."""
        record: SyncStatusRecord = {"lastSync": _iso(self._clock()), "results": results}
        self._store.put(SYNC_RESULTS_KEY, json.dumps(record))
        return record

    def sync_and_record(self, config: SyncConfig) -> SyncResult:
        """Manual sync of one calendar; the outcome is recorded, failures re-raised."""
        try:
            result = self.sync_calendar(config)
        except Exception as exc:
            logger.error("Failed to sync %s: %s", config.calendar_name, exc)
            self.record_results([_error_result(config, exc)])
            raise
        self.record_results([result])
        return result

    def auto_sync(self, configs: Iterable[SyncConfig]) -> SyncStatusRecord:
        """
        Sync every config in turn. A failing calendar is recorded as an error
        and does not stop the others.
        """
        results: List[SyncResult] = []
        for config in configs:
            try:
                results.append(self.sync_calendar(config))
            except Exception as exc:
                logger.exception("Failed to sync %s", config.calendar_name)
                results.append(_error_result(config, exc))
        return self.record_results(results)


def _error_result(config: SyncConfig, exc: Exception) -> SyncResult:
    return {"calendarName": config.calendar_name, "status": "error", "error": str(exc)}


# PUBLIC_INTERFACE
def load_sync_status(store: FeedStore) -> Optional[SyncStatusRecord]:
    """Return the last recorded sync run, or None."""
    raw = store.get(SYNC_RESULTS_KEY)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Stored sync results are not valid JSON; ignoring them")
        return None


# PUBLIC_INTERFACE
def get_sync_service(
    client: BlinkoClient = Depends(get_note_client),
    store: FeedStore = Depends(get_store),
) -> SyncService:
    """
    FastAPI dependency wiring the note client and feed store into a SyncService.
    """
    settings = get_settings()
    return SyncService(
        client,
        store,
        filename=settings.ics_filename,
        ttl_seconds=settings.feed_ttl_seconds or None,
    )
