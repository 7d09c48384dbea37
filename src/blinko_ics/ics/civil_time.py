from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Optional

ICS_UTC_FORMAT = "%Y%m%dT%H%M%SZ"
_MIN_YEAR = 2
_MAX_YEAR = 9998


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class CivilZone:
    """
    A fixed civil UTC offset used to interpret wall-clock times found in todo text.

    The zone never observes daylight saving time, so clock arithmetic is a plain
    offset shift. It is passed explicitly to the resolver and the feed assembler.

    Fields:
    - tzid: identifier written to X-WR-TIMEZONE and the VTIMEZONE block
    - offset: offset from UTC
    - abbreviation: TZNAME written to the VTIMEZONE block
    """

    tzid: str = "Asia/Shanghai"
    offset: timedelta = timedelta(hours=8)
    abbreviation: str = "CST"
    tzinfo: tzinfo = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tzinfo", timezone(self.offset, self.abbreviation))

    @property
    def ics_offset(self) -> str:
        """Offset rendered as +HHMM for TZOFFSETFROM/TZOFFSETTO."""
        total = int(self.offset.total_seconds()) // 60
        sign = "+" if total >= 0 else "-"
        hours, minutes = divmod(abs(total), 60)
        return f"{sign}{hours:02d}{minutes:02d}"

    def to_civil(self, instant: datetime) -> datetime:
        """Return the instant expressed as wall-clock time in this zone."""
        return instant.astimezone(self.tzinfo)

    def at_clock_time(self, instant: datetime, hour: int, minute: int) -> datetime:
        """
        Return the instant at hour:minute on the civil calendar date of `instant`.
        Seconds and microseconds are zeroed.
        """
        local = self.to_civil(instant)
        return local.replace(hour=hour, minute=minute, second=0, microsecond=0)

    def wall_clock(self, year: int, month: int, day: int, hour: int, minute: int) -> datetime:
        """Build an aware datetime from civil wall-clock components. Raises ValueError if invalid."""
        return datetime(year, month, day, hour, minute, tzinfo=self.tzinfo)

    def describe(self, instant: datetime) -> str:
        """Human readable rendering used in event descriptions."""
        return f"{self.to_civil(instant).strftime('%Y-%m-%d %H:%M:%S')} ({self.tzid})"


CIVIL_ZONE = CivilZone()


# PUBLIC_INTERFACE
def parse_instant(value: Any, zone: CivilZone = CIVIL_ZONE) -> Optional[datetime]:
    """
    Parse a loosely typed timestamp into an aware datetime, or None when it cannot be parsed.

    Accepts:
    - datetime (naive values are read as civil wall-clock time)
    - date (midnight civil time)
    - int/float as epoch milliseconds
    - ISO8601 strings, with or without a trailing 'Z'; date-only strings map to midnight civil time
    """
    parsed = _parse(value, zone)
    # Keep a day of headroom so offset shifts cannot overflow datetime's range
    if parsed is None or not _MIN_YEAR <= parsed.year <= _MAX_YEAR:
        return None
    return parsed


def _parse(value: Any, zone: CivilZone) -> Optional[datetime]:
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=zone.tzinfo)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=zone.tzinfo)

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(s)
        except ValueError:
            try:
                d = date.fromisoformat(s)
            except ValueError:
                return None
            return datetime(d.year, d.month, d.day, tzinfo=zone.tzinfo)
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=zone.tzinfo)

    return None


# PUBLIC_INTERFACE
def format_utc(instant: datetime) -> str:
    """Render an instant in the basic UTC form YYYYMMDDThhmmssZ."""
    return instant.astimezone(timezone.utc).strftime(ICS_UTC_FORMAT)
