from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any, List

from ..errors import InvalidInput
from .civil_time import CIVIL_ZONE, CivilZone
from .encoder import CalendarEvent, encode, fold_line
from .resolver import as_utc, creation_instant, resolve, update_instant
from .text import escape_text, normalize

logger = logging.getLogger(__name__)

PRODUCT_ID = "-//Blinko Todo Calendar//CN"
CALENDAR_DESCRIPTION = "Blinko Todo Items Calendar - Auto Sync"
CRLF = "\r\n"


def _header(calendar_name: str, zone: CivilZone) -> List[str]:
    return [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODUCT_ID}",
        f"X-WR-CALNAME:{escape_text(calendar_name)}",
        f"X-WR-CALDESC:{CALENDAR_DESCRIPTION}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        f"X-WR-TIMEZONE:{zone.tzid}",
        "BEGIN:VTIMEZONE",
        f"TZID:{zone.tzid}",
        "BEGIN:STANDARD",
        "DTSTART:19700101T000000",
        f"TZOFFSETFROM:{zone.ics_offset}",
        f"TZOFFSETTO:{zone.ics_offset}",
        f"TZNAME:{zone.abbreviation}",
        "END:STANDARD",
        "END:VTIMEZONE",
    ]


# PUBLIC_INTERFACE
def build_events(
    todos: Any, reference_now: datetime, zone: CivilZone = CIVIL_ZONE
) -> List[CalendarEvent]:
    """
    Convert todo records into calendar events, one per record, in input order.

    Raises:
        InvalidInput: if `todos` is not a sequence of records.
    """
    if isinstance(todos, (str, bytes, bytearray)) or not isinstance(todos, Sequence):
        raise InvalidInput(f"todos must be a list of records, got {type(todos).__name__}")
    reference_now = as_utc(reference_now)

    events: List[CalendarEvent] = []
    for index, todo in enumerate(todos):
        if not isinstance(todo, Mapping):
            logger.warning("Todo at index %d is a %s, not a record; using an empty record", index, type(todo).__name__)
            todo = {}
        created = creation_instant(todo, reference_now, zone)
        updated = update_instant(todo, reference_now, zone)
        resolved = resolve(todo, reference_now, zone)
        text = normalize(todo.get("content"))
        events.append(encode(todo, resolved, text, created, updated, reference_now, index, zone))
    return events


# PUBLIC_INTERFACE
def assemble(
    todos: Any,
    calendar_name: str,
    reference_now: datetime,
    zone: CivilZone = CIVIL_ZONE,
) -> str:
    """
    Render todo records as a complete iCalendar payload.

    The output is a pure function of the arguments: the same todos, calendar name,
    reference instant and zone always yield the same text.

    Args:
        todos: ordered sequence of todo records from the note API.
        calendar_name: value for X-WR-CALNAME.
        reference_now: injected "now" used for DTSTAMP and missing timestamps.
        zone: civil zone for clock times and the VTIMEZONE block.

    Returns:
        The calendar text, CRLF line endings, long lines folded.

    Raises:
        InvalidInput: if `todos` is not a sequence of records.
    """
    lines = _header(calendar_name, zone)
    for event in build_events(todos, reference_now, zone):
        lines.extend(event.to_lines())
    lines.append("END:VCALENDAR")

    physical: List[str] = []
    for line in lines:
        physical.extend(fold_line(line))
    return CRLF.join(physical) + CRLF
