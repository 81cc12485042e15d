"""Google Calendar integration.

Access tokens come from the refresh-token exchange against Google's OAuth
token endpoint. A stored access token is reused until shortly before it
expires; a refreshed one is written back to the recruiter's settings.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx
import structlog

from pipeline.config import get_settings
from pipeline.credentials import CredentialResolver
from pipeline.errors import CollaboratorFailure
from pipeline.models import ensure_utc
from pipeline.scheduling import BusyInterval, CalendarEvent, CreatedEvent, EventRequest

logger = structlog.get_logger()

# Refresh a cached token this long before Google says it expires
TOKEN_REFRESH_MARGIN = timedelta(seconds=60)
FIND_EVENTS_LIMIT = 5


def _parse_time(value: dict) -> datetime:
    """Parse a Google ``{dateTime|date}`` object to an aware UTC datetime."""
    raw = value.get("dateTime") or value.get("date")
    if not raw:
        raise ValueError("Event time has neither dateTime nor date")
    return ensure_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))


def _format_time(value: datetime) -> str:
    return ensure_utc(value).isoformat().replace("+00:00", "Z")


class GoogleCalendarClient:
    """Calendar provider backed by the Google Calendar v3 REST API."""

    def __init__(
        self,
        credentials: CredentialResolver,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        config = get_settings()
        self.credentials = credentials
        self.transport = transport
        self.api_url = config.GOOGLE_CALENDAR_API_URL.rstrip("/")
        self.token_url = config.GOOGLE_TOKEN_URL
        self.timeout = config.CALENDAR_TIMEOUT_SECONDS

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def get_token(self, owner_id: str) -> str:
        """Get a valid access token for a recruiter, refreshing if necessary.

        Raises:
            CalendarError: If the calendar is not connected or the refresh fails
        """
        oauth = self.credentials.google_oauth(owner_id)
        if oauth is None:
            raise CalendarError("Calendar not connected", retryable=False)

        now = datetime.now(timezone.utc)
        if oauth.access_token and oauth.expires_at and oauth.expires_at - TOKEN_REFRESH_MARGIN > now:
            return oauth.access_token

        logger.info("Refreshing Google access token", owner_id=owner_id)

        async with self._client() as client:
            try:
                response = await client.post(
                    self.token_url,
                    data={
                        "grant_type": "refresh_token",
                        "refresh_token": oauth.refresh_token,
                        "client_id": oauth.client_id,
                        "client_secret": oauth.client_secret,
                    },
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
                response.raise_for_status()
                data = response.json()

            except httpx.HTTPStatusError as e:
                logger.error(
                    "Google token refresh failed",
                    status_code=e.response.status_code,
                    response=e.response.text[:500],
                )
                raise CalendarError(
                    f"Token refresh failed: {e.response.status_code}",
                    retryable=e.response.status_code >= 500,
                ) from e

            except httpx.HTTPError as e:
                logger.error("Google token refresh error", error=str(e))
                raise CalendarError(f"Token refresh error: {str(e)}") from e

        access_token = data["access_token"]
        expires_in = int(data.get("expires_in", 3600))
        self.credentials.store_access_token(
            owner_id,
            access_token,
            now + timedelta(seconds=expires_in),
            refresh_token=data.get("refresh_token"),
        )
        logger.info("Google access token refreshed", owner_id=owner_id, expires_in=expires_in)
        return access_token

    async def _request(
        self,
        owner_id: str,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> dict[str, Any]:
        token = await self.get_token(owner_id)
        async with self._client() as client:
            try:
                response = await client.request(
                    method,
                    f"{self.api_url}{path}",
                    params=params,
                    json=json,
                    headers={"Authorization": f"Bearer {token}"},
                )
                response.raise_for_status()
                if response.status_code == 204 or not response.content:
                    return {}
                return response.json()

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                logger.error(
                    "Google Calendar API error",
                    method=method,
                    path=path,
                    status_code=status,
                    response=e.response.text[:500],
                )
                raise CalendarError(
                    f"Calendar request failed: {status}",
                    retryable=status >= 500 or status == 429,
                ) from e

            except httpx.HTTPError as e:
                logger.error("Google Calendar request error", method=method, path=path, error=str(e))
                raise CalendarError(f"Calendar request error: {str(e)}") from e

    async def list_busy(self, owner_id: str, start: datetime, end: datetime) -> list[BusyInterval]:
        data = await self._request(
            owner_id,
            "POST",
            "/freeBusy",
            json={
                "timeMin": _format_time(start),
                "timeMax": _format_time(end),
                "items": [{"id": "primary"}],
            },
        )
        busy = data.get("calendars", {}).get("primary", {}).get("busy", [])
        return [
            BusyInterval(
                start=_parse_time({"dateTime": item["start"]}),
                end=_parse_time({"dateTime": item["end"]}),
            )
            for item in busy
        ]

    async def create_event(self, owner_id: str, request: EventRequest) -> CreatedEvent:
        body: dict[str, Any] = {
            "summary": request.summary,
            "description": request.description,
            "start": {"dateTime": _format_time(request.start)},
            "end": {"dateTime": _format_time(request.end)},
            "attendees": [{"email": request.attendee_email}],
        }
        if request.with_conference:
            body["conferenceData"] = {"createRequest": {"requestId": uuid.uuid4().hex}}

        data = await self._request(
            owner_id,
            "POST",
            "/calendars/primary/events",
            params={"conferenceDataVersion": 1, "sendUpdates": "all"},
            json=body,
        )
        event = CreatedEvent(event_id=data["id"], meeting_link=data.get("hangoutLink") or data.get("htmlLink"))
        logger.info("Calendar event created", owner_id=owner_id, event_id=event.event_id)
        return event

    async def find_events(self, owner_id: str, attendee_email: str, time_min: datetime) -> list[CalendarEvent]:
        data = await self._request(
            owner_id,
            "GET",
            "/calendars/primary/events",
            params={
                "q": attendee_email,
                "timeMin": _format_time(time_min),
                "maxResults": FIND_EVENTS_LIMIT,
                "singleEvents": "true",
                "orderBy": "startTime",
            },
        )
        events = []
        for item in data.get("items", []):
            if "start" not in item:
                continue
            events.append(
                CalendarEvent(
                    event_id=item["id"],
                    start=_parse_time(item["start"]),
                    attendee_emails=tuple(a["email"] for a in item.get("attendees", []) if a.get("email")),
                    meeting_link=item.get("hangoutLink") or item.get("htmlLink"),
                )
            )
        return events

    async def delete_event(self, owner_id: str, event_id: str) -> None:
        """Delete an event and notify its attendees of the cancellation."""
        await self._request(
            owner_id,
            "DELETE",
            f"/calendars/primary/events/{event_id}",
            params={"sendUpdates": "all"},
        )
        logger.info("Calendar event deleted", owner_id=owner_id, event_id=event_id)


class CalendarError(CollaboratorFailure):
    """Raised when the Google Calendar API or token exchange fails."""

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message, retryable=retryable, collaborator="calendar")
