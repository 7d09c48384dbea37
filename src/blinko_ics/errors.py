from __future__ import annotations

from typing import Optional


# PUBLIC_INTERFACE
class InvalidInput(ValueError):
    """The todo payload handed to the feed engine is not a sequence of records."""


# PUBLIC_INTERFACE
class NoteApiError(RuntimeError):
    """
    The Blinko note API could not be reached or answered with an error status.

    Attributes:
        status_code: upstream HTTP status, when a response was received.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# PUBLIC_INTERFACE
class NoteApiConfigError(NoteApiError):
    """The note API base URL or token is missing or malformed."""
