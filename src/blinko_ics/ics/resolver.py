from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from re import Match, Pattern
from typing import Any, Callable, Dict, Mapping, NamedTuple, Optional, Tuple

from .civil_time import CIVIL_ZONE, CivilZone, parse_instant
from .patterns import DATE_TIME_RE, SINGLE_TIME_RE, TIME_RANGE_RE

ONE_HOUR = timedelta(hours=1)
ONE_DAY = timedelta(days=1)

SOURCE_DEFAULT = "default"
SOURCE_CONTENT_TIME_RANGE = "content_time_range"
SOURCE_CONTENT_SINGLE_TIME = "content_single_time"
SOURCE_CONTENT_DATE_TIME = "content_date_time"


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class ResolvedInterval:
    """
    The start/end instants chosen for a todo, plus the tag of the tier that produced them.

    Invariant: end > start.
    """

    start: datetime
    end: datetime
    source: str


def _metadata(todo: Mapping[str, Any]) -> Mapping[str, Any]:
    md = todo.get("metadata")
    return md if isinstance(md, Mapping) else {}


class _FieldCandidate(NamedTuple):
    tier: str
    slot: str
    extract: Callable[[Mapping[str, Any]], Any]


# Highest precedence first. A slot is taken by the first candidate holding a value.
_FIELD_CANDIDATES: Tuple[_FieldCandidate, ...] = (
    _FieldCandidate("api", "start", lambda t: t.get("startDate")),
    _FieldCandidate("api", "end", lambda t: t.get("endDate")),
    _FieldCandidate("metadata", "start", lambda t: _metadata(t).get("startDate")),
    _FieldCandidate("metadata", "end", lambda t: _metadata(t).get("endDate")),
)


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def _field_source(filled: Dict[str, Tuple[str, Any]]) -> str:
    start_tier = filled.get("start", (None,))[0]
    end_tier = filled.get("end", (None,))[0]
    if start_tier is not None and start_tier == end_tier:
        return f"{start_tier}_both"
    if start_tier is not None:
        return f"{start_tier}_startDate"
    return f"{end_tier}_endDate"


def _from_time_range(m: Match[str], created: datetime, zone: CivilZone) -> Optional[Tuple[datetime, datetime]]:
    start = zone.at_clock_time(created, int(m.group(1)), int(m.group(2)))
    end = zone.at_clock_time(created, int(m.group(3)), int(m.group(4)))
    if end <= start:
        # overnight range, e.g. 22:00-1:00
        end += ONE_DAY
    return start, end


def _from_single_time(m: Match[str], created: datetime, zone: CivilZone) -> Optional[Tuple[datetime, datetime]]:
    start = zone.at_clock_time(created, int(m.group(1)), int(m.group(2)))
    return start, start + ONE_HOUR


def _from_date_time(m: Match[str], created: datetime, zone: CivilZone) -> Optional[Tuple[datetime, datetime]]:
    try:
        start = zone.wall_clock(*(int(g) for g in m.groups()))
    except ValueError:
        return None
    return start, start + ONE_HOUR


class _ContentPattern(NamedTuple):
    source: str
    regex: Pattern[str]
    build: Callable[[Match[str], datetime, CivilZone], Optional[Tuple[datetime, datetime]]]


_CONTENT_PATTERNS: Tuple[_ContentPattern, ...] = (
    _ContentPattern(SOURCE_CONTENT_TIME_RANGE, TIME_RANGE_RE, _from_time_range),
    _ContentPattern(SOURCE_CONTENT_SINGLE_TIME, SINGLE_TIME_RE, _from_single_time),
    _ContentPattern(SOURCE_CONTENT_DATE_TIME, DATE_TIME_RE, _from_date_time),
)


def as_utc(reference_now: datetime) -> datetime:
    """A naive reference instant is taken as UTC, never as server local time."""
    if reference_now.tzinfo is None:
        return reference_now.replace(tzinfo=timezone.utc)
    return reference_now


# PUBLIC_INTERFACE
def creation_instant(todo: Mapping[str, Any], reference_now: datetime, zone: CivilZone = CIVIL_ZONE) -> datetime:
    """Return createdAt, else updatedAt, else reference_now."""
    return (
        parse_instant(todo.get("createdAt"), zone)
        or parse_instant(todo.get("updatedAt"), zone)
        or as_utc(reference_now)
    )


# PUBLIC_INTERFACE
def update_instant(todo: Mapping[str, Any], reference_now: datetime, zone: CivilZone = CIVIL_ZONE) -> datetime:
    """Return updatedAt, else createdAt, else reference_now."""
    return (
        parse_instant(todo.get("updatedAt"), zone)
        or parse_instant(todo.get("createdAt"), zone)
        or as_utc(reference_now)
    )


def _resolve_fields(
    todo: Mapping[str, Any], created: datetime, zone: CivilZone
) -> Optional[Tuple[Optional[datetime], Optional[datetime], str]]:
    filled: Dict[str, Tuple[str, Any]] = {}
    for candidate in _FIELD_CANDIDATES:
        if candidate.slot in filled:
            continue
        value = candidate.extract(todo)
        if _is_present(value):
            filled[candidate.slot] = (candidate.tier, value)

    if not filled:
        return None

    def instant(slot: str) -> Optional[datetime]:
        if slot not in filled:
            return None
        return parse_instant(filled[slot][1], zone) or created

    return instant("start"), instant("end"), _field_source(filled)


def _resolve_content(
    content: Any, created: datetime, zone: CivilZone
) -> Optional[Tuple[datetime, datetime, str]]:
    if not isinstance(content, str) or not content:
        return None
    for pattern in _CONTENT_PATTERNS:
        m = pattern.regex.search(content)
        if m is None:
            continue
        built = pattern.build(m, created, zone)
        if built is not None:
            return built[0], built[1], pattern.source
    return None


# PUBLIC_INTERFACE
def resolve(todo: Mapping[str, Any], reference_now: datetime, zone: CivilZone = CIVIL_ZONE) -> ResolvedInterval:
    """
    Choose a single start/end interval for a todo.

    Precedence, highest first:
    1. top-level startDate/endDate
    2. metadata.startDate/metadata.endDate, for slots not filled above
    3. a time expression in the content, only if no slot was filled:
       time range, then single time, then full date-time
    4. the creation instant

    Each field tier overrides only the slot it fills. An unfilled slot keeps its
    default (start at the creation instant, end one hour after it), and a slot
    holding an unparseable value falls back to the creation instant. The result
    always satisfies end > start.

    Args:
        todo: the todo record as returned by the note API.
        reference_now: injected "now", used only when the record has no timestamps.
        zone: civil zone in which clock times found in content are read.

    Returns:
        ResolvedInterval with its source tag.
    """
    created = creation_instant(todo, reference_now, zone)

    fields = _resolve_fields(todo, created, zone)
    if fields is not None:
        field_start, field_end, source = fields
        start = field_start or created
        end = field_end or created + ONE_HOUR
    else:
        from_content = _resolve_content(todo.get("content"), created, zone)
        if from_content is not None:
            start, end, source = from_content
        else:
            start, end, source = created, created + ONE_HOUR, SOURCE_DEFAULT

    if end <= start:
        end = start + ONE_HOUR
    return ResolvedInterval(start=start, end=end, source=source)
