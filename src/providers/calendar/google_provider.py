"""Google Calendar and Google Tasks adapter.

Authenticates with a stored OAuth refresh token (no interactive flow)
and talks to both APIs through ``googleapiclient``.  The client library
is synchronous, so every ``execute()`` runs in a worker thread.

Events get two popup reminders (1 hour and 1 day before).  Tasks go to
the first task list on the account.
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime, time
from typing import Any

import structlog
from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from src.interfaces.calendar_provider import ICalendarProvider
from src.models.records import CalendarEventRef, EventWindow, TaskRef
from src.utils.errors import DownstreamWriteError, ServiceNotConfiguredError

logger = structlog.get_logger(logger_name=__name__)

_TOKEN_URI = "https://oauth2.googleapis.com/token"
_SCOPES = [
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/tasks",
]
_REMINDER_MINUTES = (60, 1440)


class GoogleWorkspaceProvider(ICalendarProvider):
    """Creates Google Calendar events and Google Tasks.

    Parameters
    ----------
    client_id / client_secret / refresh_token:
        OAuth client and the long-lived refresh token; all three are
        required for :meth:`is_configured`.
    timezone:
        IANA zone used for timed events.
    calendar_id:
        Target calendar, ``"primary"`` by default.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        timezone: str = "Asia/Taipei",
        calendar_id: str = "primary",
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._refresh_token = refresh_token
        self._timezone = timezone
        self._calendar_id = calendar_id
        self._calendar_service: Any = None
        self._tasks_service: Any = None

    # ------------------------------------------------------------------
    # ICalendarProvider implementation
    # ------------------------------------------------------------------

    async def create_event(
        self,
        title: str,
        window: EventWindow,
        description: str | None = None,
        location: str | None = None,
    ) -> CalendarEventRef:
        service = self._calendar()
        body: dict[str, Any] = {
            "summary": title,
            "start": self._event_time(window.start),
            "end": self._event_time(window.end),
            "reminders": {
                "useDefault": False,
                "overrides": [{"method": "popup", "minutes": minutes} for minutes in _REMINDER_MINUTES],
            },
        }
        if description:
            body["description"] = description
        if location:
            body["location"] = location

        request = service.events().insert(calendarId=self._calendar_id, body=body)
        data = await self._execute(request, "create_event")
        logger.info("google_event_created", event_id=data.get("id"), all_day=window.all_day)
        return CalendarEventRef(id=data["id"], link=data.get("htmlLink"))

    async def create_task(
        self,
        title: str,
        notes: str | None = None,
        due: date | None = None,
    ) -> TaskRef:
        service = self._tasks()
        lists = await self._execute(service.tasklists().list(maxResults=1), "list_tasklists")
        items = lists.get("items") or []
        if not items:
            raise DownstreamWriteError(
                message="No Google Tasks list found",
                provider_name=self.get_provider_name(),
            )

        body: dict[str, Any] = {"title": title}
        if notes:
            body["notes"] = notes
        if due:
            # Tasks only keeps the date part of ``due``; it must still be RFC 3339.
            body["due"] = datetime.combine(due, time.min).isoformat() + "Z"

        request = service.tasks().insert(tasklist=items[0]["id"], body=body)
        data = await self._execute(request, "create_task")
        logger.info("google_task_created", task_id=data.get("id"))
        return TaskRef(id=data["id"])

    def is_configured(self) -> bool:
        return bool(self._client_id and self._client_secret and self._refresh_token)

    def get_provider_name(self) -> str:
        return "google"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _event_time(self, value: datetime | date) -> dict[str, str]:
        if isinstance(value, datetime):
            return {"dateTime": value.strftime("%Y-%m-%dT%H:%M:%S"), "timeZone": self._timezone}
        return {"date": value.isoformat()}

    def _credentials(self) -> Credentials:
        if not self.is_configured():
            raise ServiceNotConfiguredError(
                message="Google OAuth credentials are not set",
                provider_name=self.get_provider_name(),
            )
        return Credentials(
            token=None,
            refresh_token=self._refresh_token,
            client_id=self._client_id,
            client_secret=self._client_secret,
            token_uri=_TOKEN_URI,
            scopes=_SCOPES,
        )

    def _calendar(self) -> Any:
        if self._calendar_service is None:
            self._calendar_service = build(
                "calendar", "v3", credentials=self._credentials(), cache_discovery=False
            )
        return self._calendar_service

    def _tasks(self) -> Any:
        if self._tasks_service is None:
            self._tasks_service = build(
                "tasks", "v1", credentials=self._credentials(), cache_discovery=False
            )
        return self._tasks_service

    async def _execute(self, request: Any, operation: str) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(request.execute)
        except HttpError as exc:
            raise DownstreamWriteError(
                message=f"Google API error during {operation}: HTTP {exc.resp.status}",
                provider_name=self.get_provider_name(),
            ) from exc
        except GoogleAuthError as exc:
            raise DownstreamWriteError(
                message=f"Google authentication failed during {operation}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
