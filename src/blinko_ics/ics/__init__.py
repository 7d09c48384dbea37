"""
Todo-to-iCalendar transformation engine.

Pure and deterministic: no I/O, no wall-clock reads. Callers inject the
reference instant and, optionally, the civil zone.
"""

from .civil_time import CIVIL_ZONE, CivilZone, format_utc, parse_instant
from .encoder import CalendarEvent, encode
from .feed import assemble, build_events
from .resolver import ResolvedInterval, resolve
from .text import NormalizedText, normalize

__all__ = [
    "CIVIL_ZONE",
    "CalendarEvent",
    "CivilZone",
    "NormalizedText",
    "ResolvedInterval",
    "assemble",
    "build_events",
    "encode",
    "format_utc",
    "normalize",
    "parse_instant",
    "resolve",
]
