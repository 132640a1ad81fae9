from __future__ import annotations

import datetime as _dt
import logging
from pathlib import Path
from typing import Any, Callable, List

from google.oauth2 import service_account
from googleapiclient.discovery import build

from devassist_common.errors import ConfigError
from devassist_mcp.models import CalendarEventInput
from devassist_mcp.results import AdapterResult, capture

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]
CALENDAR_ID = "primary"


def _utc_now_rfc3339() -> str:
    return _dt.datetime.now(_dt.timezone.utc).isoformat().replace("+00:00", "Z")


def _build_service(service_account_path: str):
    path = Path(service_account_path).expanduser()
    if not path.is_file():
        raise ConfigError(f"Google service-account key file not found: {path}")
    try:
        creds = service_account.Credentials.from_service_account_file(str(path), scopes=SCOPES)
    except (ValueError, KeyError) as e:
        raise ConfigError(f"Invalid Google service-account key file {path}: {e}") from e
    return build("calendar", "v3", credentials=creds, cache_discovery=False)


class GoogleCalendarAdapter:
    """Google Calendar v3 on the service account's primary calendar."""

    def __init__(
        self,
        service_account_path: str,
        *,
        service: Any = None,
        clock: Callable[[], str] = _utc_now_rfc3339,
    ) -> None:
        if not (service_account_path or "").strip():
            raise ConfigError("Google service-account key path is empty")
        self._service = service if service is not None else _build_service(service_account_path)
        self._clock = clock

    def list_upcoming_events(self, max_results: int = 10) -> AdapterResult[List[dict]]:
        """
        Upcoming single event instances, soonest first.

        Only the first upstream page is read; if the API truncates, so do we.
        """
        if max_results <= 0:
            raise ValueError("max_results must be a positive integer")

        def _list() -> List[dict]:
            resp = self._service.events().list(
                calendarId=CALENDAR_ID,
                timeMin=self._clock(),
                maxResults=max_results,
                singleEvents=True,
                orderBy="startTime",
            ).execute()
            return list(resp.get("items") or [])

        return capture("calendar.events.list", _list)

    def create_event(self, event: CalendarEventInput) -> AdapterResult[dict]:
        def _insert() -> dict:
            return self._service.events().insert(
                calendarId=CALENDAR_ID,
                body=event.to_request_body(),
            ).execute()

        result = capture("calendar.events.insert", _insert)
        if result.ok:
            logger.info("Created calendar event %s", (result.value or {}).get("id"))
        return result
