from __future__ import annotations

from typing import Any, Dict, List, Optional

from .models import StoredKey


# PUBLIC_INTERFACE
def mask_token(token: Optional[str], visible: int = 10) -> str:
    """
    Return a log-safe rendering of a secret: its first characters followed by '...'.

    Args:
        token: the secret, possibly None.
        visible: number of leading characters to keep.

    Returns:
        'not set' when the token is empty, else the masked token.
    """
    if not token:
        return "not set"
    return token[:visible] + "..."


# PUBLIC_INTERFACE
def calendar_listing(keys: List[StoredKey]) -> List[Dict[str, Any]]:
    """
    Build the calendar list for the dashboard from stored keys.

    Only keys ending in '.ics' are listed; lastUpdated and size come from the
    metadata saved alongside each feed.
    """
    listing: List[Dict[str, Any]] = []
    for key in keys:
        if not key["name"].endswith(".ics"):
            continue
        meta = key["metadata"] or {}
        listing.append(
            {
                "name": key["name"],
                "lastUpdated": meta.get("lastUpdated"),
                "size": meta.get("size"),
            }
        )
    return listing
