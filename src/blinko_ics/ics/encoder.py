from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Mapping

from .civil_time import CIVIL_ZONE, CivilZone, format_utc
from .resolver import ResolvedInterval
from .text import NormalizedText, escape_text

UID_DOMAIN = "blinko.calendar"
MAX_LINE_OCTETS = 75


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class CalendarEvent:
    """One VEVENT, with every field already in its final ICS text form."""

    uid: str
    title: str
    description: str
    created: datetime
    updated: datetime
    start: datetime
    end: datetime
    dtstamp: datetime

    def to_lines(self) -> List[str]:
        """Content lines in the fixed VEVENT order, unfolded."""
        return [
            "BEGIN:VEVENT",
            f"UID:{self.uid}",
            f"DTSTAMP:{format_utc(self.dtstamp)}",
            f"DTSTART:{format_utc(self.start)}",
            f"DTEND:{format_utc(self.end)}",
            f"SUMMARY:{escape_text(self.title)}",
            f"DESCRIPTION:{self.description}",
            f"CREATED:{format_utc(self.created)}",
            f"LAST-MODIFIED:{format_utc(self.updated)}",
            "CLASS:PUBLIC",
            "TRANSP:OPAQUE",
            "END:VEVENT",
        ]


# PUBLIC_INTERFACE
def fold_line(line: str) -> List[str]:
    """
    Split a content line into physical lines of at most 75 octets.

    Continuation lines start with a single space. Splits never fall inside a
    UTF-8 multi-byte character.
    """
    if len(line.encode("utf-8")) <= MAX_LINE_OCTETS:
        return [line]
    parts: List[str] = []
    current = ""
    size = 0
    for ch in line:
        width = len(ch.encode("utf-8"))
        if size + width > MAX_LINE_OCTETS:
            parts.append(current)
            current = " "
            size = 1
        current += ch
        size += width
    parts.append(current)
    return parts


def event_uid(todo: Mapping[str, Any], index: int) -> str:
    todo_id = todo.get("id")
    if todo_id is None or str(todo_id).strip() == "":
        return f"todo-{index}@{UID_DOMAIN}"
    return f"{todo_id}@{UID_DOMAIN}"


def diagnostic_trailer(resolved: ResolvedInterval, created: datetime, zone: CivilZone) -> str:
    return f"\\n\\nTime source: {resolved.source}\\nCreated: {zone.describe(created)}"


# PUBLIC_INTERFACE
def encode(
    todo: Mapping[str, Any],
    resolved: ResolvedInterval,
    text: NormalizedText,
    created: datetime,
    updated: datetime,
    dtstamp: datetime,
    index: int,
    zone: CivilZone = CIVIL_ZONE,
) -> CalendarEvent:
    """
    Build the calendar event for one todo.

    The UID is the todo id, or "todo-<index>" when the record has none, suffixed
    with @blinko.calendar. The description carries a trailer naming the time
    source and the creation instant in the civil zone.
    """
    return CalendarEvent(
        uid=event_uid(todo, index),
        title=text.title,
        description=text.description + diagnostic_trailer(resolved, created, zone),
        created=created,
        updated=updated,
        start=resolved.start,
        end=resolved.end,
        dtstamp=dtstamp,
    )
