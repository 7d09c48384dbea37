from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# PUBLIC_INTERFACE
class SyncConfig(BaseModel):
    """
    Parameters of one calendar sync: which todos to fetch and what to call the calendar.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "calendarName": "Todo",
                "size": 100,
                "searchText": "",
                "tagName": "work",
            }
        },
    )

    calendar_name: str = Field(default="Todo", description="Calendar name written to X-WR-CALNAME", max_length=200)
    size: int = Field(default=100, ge=1, le=1000, description="Number of todos fetched from the note API")
    search_text: Optional[str] = Field(default=None, description="Optional full-text filter")
    tag_name: Optional[str] = Field(default=None, description="Optional tag name filter")

    @field_validator("calendar_name")
    @classmethod
    def validate_calendar_name(cls, v: str) -> str:
        """
        Strip whitespace and enforce a non-empty name.
        """
        s = v.strip()
        if not s:
            raise ValueError("calendarName must not be empty")
        return s

    @field_validator("search_text", "tag_name")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """
        Treat blank filters as absent.
        """
        if v is None:
            return None
        s = v.strip()
        return s or None


# PUBLIC_INTERFACE
class SyncRequest(BaseModel):
    """Body of a manual sync request."""

    config: SyncConfig = Field(..., description="Sync parameters")


# PUBLIC_INTERFACE
class SyncResponse(BaseModel):
    """Result of a successful manual sync."""

    success: bool = Field(..., description="Always true on success")
    message: str = Field(..., description="Human readable summary")
    filename: str = Field(..., description="Storage key of the generated feed")
    count: int = Field(..., description="Number of todos written to the feed")


# PUBLIC_INTERFACE
class SyncResultOut(BaseModel):
    """Outcome of syncing one calendar."""

    model_config = _CAMEL

    calendar_name: str = Field(..., description="Calendar name")
    status: str = Field(..., description="'success' or 'error'")
    count: Optional[int] = Field(default=None, description="Number of todos synced")
    filename: Optional[str] = Field(default=None, description="Storage key of the feed")
    error: Optional[str] = Field(default=None, description="Error message on failure")


# PUBLIC_INTERFACE
class SyncStatusOut(BaseModel):
    """Service status and the results of the last sync run."""

    model_config = _CAMEL

    status: str = Field(default="running", description="Service state")
    last_sync: Optional[str] = Field(default=None, description="ISO8601 time of the last sync run")
    results: List[SyncResultOut] = Field(default_factory=list, description="Per-calendar results")


# PUBLIC_INTERFACE
class CalendarFileOut(BaseModel):
    """A stored calendar feed."""

    model_config = _CAMEL

    name: str = Field(..., description="Feed filename, e.g. 'todo.ics'")
    last_updated: Optional[str] = Field(default=None, description="ISO8601 time the feed was written")
    size: Optional[int] = Field(default=None, description="Feed length in characters")


# PUBLIC_INTERFACE
class VerifyRequest(BaseModel):
    """Password submitted to unlock manual sync."""

    password: str = Field(..., description="Manual sync password")


# PUBLIC_INTERFACE
class VerifyResponse(BaseModel):
    """Verification state."""

    verified: bool = Field(..., description="Whether the caller holds a valid verification cookie")
