from __future__ import annotations

from typing import Any, Dict, List, Optional, TypedDict


# PUBLIC_INTERFACE
class TodoMetadata(TypedDict, total=False):
    """Nested metadata block some Blinko todos carry."""

    startDate: Optional[str]
    endDate: Optional[str]


# PUBLIC_INTERFACE
class TodoRecord(TypedDict, total=False):
    """
    A todo note as returned by the Blinko note API. Every field may be missing
    or malformed; the feed engine reads it defensively.

    Fields:
    - id: note identifier, used as the event UID
    - content: raw note text, may carry list markup and time expressions
    - createdAt / updatedAt: ISO8601 timestamps
    - startDate / endDate: explicit event bounds
    - metadata: optional nested startDate/endDate
    """

    id: Any
    content: str
    createdAt: Optional[str]
    updatedAt: Optional[str]
    startDate: Optional[str]
    endDate: Optional[str]
    metadata: TodoMetadata


# PUBLIC_INTERFACE
class StoredKey(TypedDict):
    """
    A key listed from the feed store.

    Fields:
    - name: storage key, e.g. 'todo.ics'
    - metadata: metadata saved with the value, e.g. lastUpdated/size/filename
    """

    name: str
    metadata: Optional[Dict[str, Any]]


# PUBLIC_INTERFACE
class SyncResult(TypedDict, total=False):
    """Outcome of syncing one calendar."""

    calendarName: str
    status: str
    count: int
    filename: str
    error: str


# PUBLIC_INTERFACE
class SyncStatusRecord(TypedDict):
    """Record stored under 'sync-results' after each sync run."""

    lastSync: str
    results: List[SyncResult]
