"""
Google Calendar integration for Meet Recorder.

Creates calendar events with an attached Google Meet conference and reads
events back for matching them against recordings.

Setup:
1. Create a Google Cloud project and enable the Google Calendar API
2. Create OAuth 2.0 credentials (Web application type)
3. Put the credentials JSON in the GOOGLE_CREDENTIALS_JSON setting
4. Connect through /integrations/calendar/auth-url
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from googleapiclient.errors import HttpError

from ...errors import from_http_error
from ...models import CalendarEvent
from ..google.oauth import GoogleOAuthClient

logger = logging.getLogger(__name__)


# --------------------------------------------------------------------------- #
# Configuration
# --------------------------------------------------------------------------- #

PRIMARY_CALENDAR = "primary"

# Conference solution type Google uses for Meet
MEET_CONFERENCE_TYPE = "hangoutsMeet"


# --------------------------------------------------------------------------- #
# Google Calendar Integration Class
# --------------------------------------------------------------------------- #

class CalendarIntegration(GoogleOAuthClient):
    """
    Google Calendar integration for Meet events.

    Extends GoogleOAuthClient to inherit OAuth flow and credential management.

    Usage:
        calendar = CalendarIntegration(user_id="user_id")
        calendar.require_credentials()

        event = calendar.create_meet_event({
            "summary": "Team Meeting",
            "start": {"dateTime": "2025-12-20T10:00:00", "timeZone": "UTC"},
            "end": {"dateTime": "2025-12-20T10:30:00", "timeZone": "UTC"},
            "conferenceData": {...},
        })
    """

    # Google OAuth configuration
    SERVICE_NAME = "google_calendar"
    DISPLAY_NAME = "Google Calendar"
    API_NAME = "calendar"
    API_VERSION = "v3"
    SCOPES = [
        "https://www.googleapis.com/auth/calendar.events",
        "https://www.googleapis.com/auth/calendar.readonly",
    ]

    def __init__(self, user_id: Optional[str] = None):
        """Initialize the Calendar integration for a specific user."""
        super().__init__(user_id=user_id)

    # ----------------------------------------------------------------------- #
    # User Info (required by base class)
    # ----------------------------------------------------------------------- #

    def get_user_email(self) -> Optional[str]:
        """Get the email address of the connected user."""
        if not self.is_connected():
            return None

        try:
            service = self._get_service()
            # Primary calendar ID is the user's email
            calendar = service.calendars().get(calendarId=PRIMARY_CALENDAR).execute()
            return calendar.get("id")
        except HttpError as e:
            logger.warning("Error getting calendar user email: %s", e)
            return None

    # ----------------------------------------------------------------------- #
    # Calendar Event Operations
    # ----------------------------------------------------------------------- #

    def create_meet_event(
        self,
        event_body: Dict[str, Any],
        send_updates: bool = False,
    ) -> CalendarEvent:
        """
        Insert an event that requests a Meet conference.

        Args:
            event_body: Calendar v3 ``Event`` resource including
                ``conferenceData.createRequest``
            send_updates: Email the attendees about the new event

        Returns:
            The created event

        Raises:
            RecorderError: If the Calendar API rejects the request
        """
        service = self._get_service()

        try:
            created = service.events().insert(
                calendarId=PRIMARY_CALENDAR,
                body=event_body,
                conferenceDataVersion=1,
                sendUpdates="all" if send_updates else "none",
            ).execute()
        except HttpError as e:
            raise from_http_error(e, "calendar event") from e

        return CalendarEvent.from_api(created)

    def list_events(
        self,
        time_min: datetime,
        time_max: Optional[datetime] = None,
        max_results: int = 250,
    ) -> List[CalendarEvent]:
        """
        List single events of the primary calendar ordered by start time.

        Args:
            time_min: Lower bound (inclusive) for event end time
            time_max: Upper bound (exclusive) for event start time
            max_results: Maximum number of events to return
        """
        service = self._get_service()

        params: Dict[str, Any] = {
            "calendarId": PRIMARY_CALENDAR,
            "timeMin": time_min.isoformat(),
            "maxResults": max_results,
            "singleEvents": True,
            "orderBy": "startTime",
        }
        if time_max is not None:
            params["timeMax"] = time_max.isoformat()

        try:
            result = service.events().list(**params).execute()
        except HttpError as e:
            raise from_http_error(e, "calendar events") from e

        return [CalendarEvent.from_api(item) for item in result.get("items", [])]

    def get_event(self, event_id: str) -> CalendarEvent:
        """
        Fetch one event of the primary calendar.

        Raises:
            NotFoundError: If the event does not exist
        """
        service = self._get_service()

        try:
            data = service.events().get(
                calendarId=PRIMARY_CALENDAR,
                eventId=event_id,
            ).execute()
        except HttpError as e:
            raise from_http_error(e, f"calendar event {event_id}") from e

        return CalendarEvent.from_api(data)


# --------------------------------------------------------------------------- #
# User-Specific Instance Helper
# --------------------------------------------------------------------------- #

def get_calendar(user_id: str) -> CalendarIntegration:
    """
    Get a Calendar integration instance for a specific user.

    Args:
        user_id: The user's ID

    Returns:
        CalendarIntegration configured for the user
    """
    return CalendarIntegration(user_id=user_id)
