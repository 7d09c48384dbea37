"""Regular expressions for list markup and time expressions embedded in todo content."""

from __future__ import annotations

import re

# "* [ ] ", "* [x] ", "*[done]"
CHECKBOX_RE = re.compile(r"^\*\s*\[.*?\]\s*")
BULLET_RE = re.compile(r"^\s*[-*+]\s*")

_HH = r"([01]?\d|2[0-3])"
_MM = r"([0-5]\d)"

# 9:00-10:30, 21:00 - 1:00
TIME_RANGE_RE = re.compile(rf"(?<!\d){_HH}:{_MM}\s*-\s*{_HH}:{_MM}(?!\d)")

# A lone clock time that is not the time part of a date-time such as "2024-1-5 9:00".
SINGLE_TIME_RE = re.compile(rf"(?<!-\d[ T])(?<!-\d\d[ T])(?<!\d){_HH}:{_MM}(?!\d)")

# 2024-01-15 14:00, 2024-1-5 9:00, 2024-01-15T14:00
DATE_TIME_RE = re.compile(r"(?<!\d)(\d{4})-(\d{1,2})-(\d{1,2})[ T](\d{1,2}):(\d{2})(?!\d)")

LEADING_TIME_RE = re.compile(
    r"^(?:"
    rf"\d{{4}}-\d{{1,2}}-\d{{1,2}}[ T]\d{{1,2}}:\d{{2}}"
    rf"|{_HH}:{_MM}\s*-\s*{_HH}:{_MM}"
    rf"|{_HH}:{_MM}"
    r")(?!\d)\s*"
)
