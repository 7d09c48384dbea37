from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from ..auth import require_verification
from ..blinko_client import BlinkoClient, get_note_client
from ..repositories import FeedStore, get_store
from ..schemas import CalendarFileOut, SyncRequest, SyncResponse, SyncStatusOut
from ..settings import get_settings
from ..sync import SyncService, get_sync_service, load_sync_status
from ..utils import calendar_listing

router = APIRouter(
    prefix="/api",
    tags=["sync"],
)


# PUBLIC_INTERFACE
@router.post(
    "/sync",
    response_model=SyncResponse,
    summary="Manual Sync",
    description=(
        "Fetch todos for the given config, regenerate the calendar feed and store it.\n\n"
        "Requires the verification cookie from POST /api/verify when a password is configured."
    ),
    dependencies=[Depends(require_verification)],
    responses={
        200: {"description": "Feed generated"},
        401: {"description": "Password verification required"},
        502: {"description": "Note API request failed"},
    },
)
def manual_sync(payload: SyncRequest, service: SyncService = Depends(get_sync_service)) -> SyncResponse:
    """
    Run one sync and record its result.
    """
    result = service.sync_and_record(payload.config)
    return SyncResponse(
        success=True,
        message="File generated successfully",
        filename=result["filename"],
        count=result["count"],
    )


# PUBLIC_INTERFACE
@router.get(
    "/status",
    response_model=SyncStatusOut,
    summary="Sync Status",
    description="Return the time and per-calendar results of the last sync run.",
)
def sync_status(store: FeedStore = Depends(get_store)) -> SyncStatusOut:
    """
    Report the last recorded sync run.
    """
    record = load_sync_status(store) or {}
    return SyncStatusOut(
        status="running",
        last_sync=record.get("lastSync"),
        results=record.get("results") or [],
    )


# PUBLIC_INTERFACE
@router.get(
    "/calendars",
    response_model=List[CalendarFileOut],
    summary="List Calendars",
    description="List stored calendar feeds with their last update time and size.",
)
def list_calendars(store: FeedStore = Depends(get_store)) -> List[CalendarFileOut]:
    """
    List stored .ics feeds.
    """
    return [CalendarFileOut(**item) for item in calendar_listing(store.list_keys())]


# PUBLIC_INTERFACE
@router.get(
    "/test",
    summary="Connectivity Test",
    description="Report note API configuration and the outcome of a small live request.",
    dependencies=[Depends(require_verification)],
)
def connectivity_test(client: BlinkoClient = Depends(get_note_client)) -> Dict[str, Any]:
    """
    Probe the note API.
    """
    report = client.probe()
    report["syncInterval"] = get_settings().sync_interval_minutes
    return report
