from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .patterns import BULLET_RE, CHECKBOX_RE, LEADING_TIME_RE

PLACEHOLDER_TITLE = "Untitled Todo"
MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class NormalizedText:
    """Summary and ICS-escaped description derived from raw todo content."""

    title: str
    description: str


def _strip_markup(raw: str) -> str:
    return BULLET_RE.sub("", CHECKBOX_RE.sub("", raw, count=1), count=1)


# PUBLIC_INTERFACE
def escape_text(value: str) -> str:
    """
    Escape a TEXT value for an ICS content line.

    Order matters: newline, carriage return, semicolon, comma.
    """
    return (
        value.replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace(";", "\\;")
        .replace(",", "\\,")
    )


def _escape_within(value: str, limit: int) -> str:
    # Escape per character so a cut never splits an escape pair; literal
    # backslashes in the content are left alone.
    pieces = []
    length = 0
    for ch in value:
        piece = escape_text(ch)
        if length + len(piece) > limit:
            break
        pieces.append(piece)
        length += len(piece)
    return "".join(pieces)


def derive_title(raw: str) -> str:
    title = _strip_markup(raw).strip()
    title = LEADING_TIME_RE.sub("", title, count=1).strip()
    title = title[:MAX_TITLE_LENGTH].strip()
    return title or PLACEHOLDER_TITLE


def derive_description(raw: str) -> str:
    return _escape_within(_strip_markup(raw), MAX_DESCRIPTION_LENGTH)


# PUBLIC_INTERFACE
def normalize(raw_content: Any) -> NormalizedText:
    """
    Turn raw todo content into an event title and description.

    Title and description are derived independently from the same input. The title
    loses list markup and a leading time expression and is capped at 100 characters,
    with a placeholder when nothing is left. The description loses list markup, is
    escaped, then capped at 500 characters. Never raises.
    """
    raw = raw_content if isinstance(raw_content, str) else ""
    return NormalizedText(title=derive_title(raw), description=derive_description(raw))
