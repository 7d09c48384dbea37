"""HTTP client for the Blinko note API."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional

import httpx

from .errors import NoteApiConfigError, NoteApiError
from .schemas import SyncConfig
from .settings import get_settings
from .utils import mask_token

logger = logging.getLogger(__name__)

NOTE_TYPE_TODO = 2
TAG_SCAN_SIZE = 1000

_LIST_DEFAULTS: Dict[str, Any] = {
    "page": 1,
    "size": 30,
    "tagId": None,
    "searchText": "",
    "orderBy": "desc",
    "type": NOTE_TYPE_TODO,
    "isArchived": False,
    "isShare": None,
    "isRecycle": False,
    "withoutTag": False,
    "withFile": False,
    "withLink": False,
    "isUseAiQuery": False,
    "startDate": None,
    "endDate": None,
    "hasTodo": True,
}


# PUBLIC_INTERFACE
def validate_token(token: Optional[str]) -> bool:
    """Return True if the token looks like a usable JWT bearer token."""
    if not token:
        return False
    if token in {"undefined", "null"}:
        return False
    return "." in token


class BlinkoClient:
    """
    Minimal synchronous client for POST {base}/note/list.

    Args:
        base_url: API base, e.g. 'https://blinko.example.com/api/v1'
        token: bearer token
        timeout: request timeout in seconds
        http_client: optional preconfigured httpx.Client (tests pass one with a MockTransport)
    """

    def __init__(
        self,
        base_url: Optional[str],
        token: Optional[str],
        *,
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self._base_url = (base_url or "").rstrip("/")
        self._token = token
        self._http = http_client or httpx.Client(timeout=timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def token(self) -> Optional[str]:
        return self._token

    def close(self) -> None:
        self._http.close()

    def _ensure_configured(self) -> None:
        if not self._base_url:
            raise NoteApiConfigError("Blinko API base URL is not configured")
        if not self._token:
            raise NoteApiConfigError("Blinko token is not configured")
        if not validate_token(self._token):
            raise NoteApiConfigError("Invalid token format")

    def _post_list(self, **overrides: Any) -> httpx.Response:
        self._ensure_configured()
        body = {**_LIST_DEFAULTS, **overrides}
        return self._http.post(
            f"{self._base_url}/note/list",
            json=body,
            headers={
                "accept": "application/json",
                "Authorization": f"Bearer {self._token}",
            },
        )

    def find_tag_id(self, tag_name: str) -> Optional[int]:
        """
        Look up a tag id by name among the most recent todo notes.

        Lookup failures are logged and reported as None so the sync continues unfiltered.
        """
        try:
            response = self._post_list(size=TAG_SCAN_SIZE)
            response.raise_for_status()
            notes = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Tag lookup for %r failed: %s", tag_name, exc)
            return None

        if not isinstance(notes, list):
            return None
        for note in notes:
            tags = note.get("tags") if isinstance(note, dict) else None
            if not isinstance(tags, list):
                continue
            for item in tags:
                tag = item.get("tag") if isinstance(item, dict) else None
                if isinstance(tag, dict) and tag.get("name") == tag_name:
                    return tag.get("id")
        return None

    def fetch_todos(self, config: SyncConfig) -> Any:
        """
        Fetch the first page of todo notes for a sync config.

        Returns:
            The decoded JSON payload; a list of todo records on success.

        Raises:
            NoteApiConfigError: base URL or token missing or malformed.
            NoteApiError: transport failure or non-2xx response.
        """
        tag_id = self.find_tag_id(config.tag_name) if config.tag_name else None
        try:
            response = self._post_list(
                size=config.size,
                tagId=tag_id,
                searchText=config.search_text or "",
            )
        except httpx.HTTPError as exc:
            raise NoteApiError(f"Failed to fetch todos: {exc}") from exc

        if response.is_error:
            raise NoteApiError(
                f"Failed to fetch todos: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise NoteApiError("Failed to fetch todos: response is not JSON") from exc

    def probe(self, size: int = 5) -> Dict[str, Any]:
        """
        Connectivity diagnostics: configuration summary plus a small live request.
        Never raises; failures are reported in the returned dict.
        """
        report: Dict[str, Any] = {
            "hasToken": bool(self._token),
            "tokenStart": mask_token(self._token),
            "tokenValid": validate_token(self._token),
            "apiBase": self._base_url or "not set",
        }
        try:
            response = self._post_list(size=size)
        except NoteApiConfigError as exc:
            report["configError"] = str(exc)
            return report
        except httpx.HTTPError as exc:
            report["fetchError"] = str(exc)
            return report

        report["apiStatus"] = response.status_code
        report["apiStatusText"] = response.reason_phrase
        if response.is_success:
            try:
                data = response.json()
            except ValueError:
                report["errorDetails"] = "response is not JSON"
                return report
            items: List[Any] = data if isinstance(data, list) else []
            report["dataCount"] = len(items)
            report["sampleData"] = items[:1]
        else:
            report["errorDetails"] = response.text
        return report


# PUBLIC_INTERFACE
def build_note_client() -> BlinkoClient:
    """Build a BlinkoClient from settings. The caller owns it and must close it."""
    settings = get_settings()
    return BlinkoClient(
        settings.blinko_api_base,
        settings.blinko_token,
        timeout=settings.http_timeout_seconds,
    )


# PUBLIC_INTERFACE
def get_note_client() -> Iterator[BlinkoClient]:
    """FastAPI dependency yielding a client that is closed after the request."""
    client = build_note_client()
    try:
        yield client
    finally:
        client.close()
