from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response

from ..repositories import FeedStore, get_store

router = APIRouter(tags=["feeds"])

CALENDAR_MEDIA_TYPE = "text/calendar; charset=utf-8"


# PUBLIC_INTERFACE
@router.get(
    "/{filename}",
    summary="Download Feed",
    description="Serve a stored calendar feed, e.g. /todo.ics, for calendar clients to subscribe to.",
    response_class=Response,
    responses={
        200: {"description": "The calendar feed", "content": {"text/calendar": {}}},
        404: {"description": "File not found"},
    },
)
def download_feed(filename: str, store: FeedStore = Depends(get_store)) -> Response:
    """
    Return the stored feed with calendar headers, or 404.
    """
    content = store.get(filename) if filename.endswith(".ics") else None
    if content is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return Response(
        content=content,
        media_type=CALENDAR_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "public, max-age=3600",
        },
    )
