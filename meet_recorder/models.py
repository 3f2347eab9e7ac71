from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def parse_google_datetime(value: Any) -> Optional[datetime]:
    """
    Parse an RFC 3339 timestamp (or an all-day ``YYYY-MM-DD`` date) as
    returned by the Calendar and Drive APIs.

    Naive values are assumed to be UTC. Anything unparseable yields None.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# --------------------------------------------------------------------------- #
# Google API Result Types
# --------------------------------------------------------------------------- #

class EntryPoint(BaseModel):
    """One way of joining an event's conference (video, phone, ...)."""

    entry_point_type: str = ""
    uri: str = ""


class CalendarEvent(BaseModel):
    """Normalized Google Calendar event, read-only once fetched."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    entry_points: List[EntryPoint] = Field(default_factory=list)
    hangout_link: Optional[str] = None
    html_link: Optional[str] = None
    organizer_email: Optional[str] = None
    organizer_name: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CalendarEvent":
        """Build an event from a Calendar v3 ``Event`` resource."""
        start = data.get("start") or {}
        end = data.get("end") or {}
        conference = data.get("conferenceData") or {}
        organizer = data.get("organizer") or {}

        return cls(
            id=data.get("id", ""),
            title=data.get("summary") or "",
            start=parse_google_datetime(start.get("dateTime") or start.get("date")),
            end=parse_google_datetime(end.get("dateTime") or end.get("date")),
            entry_points=[
                EntryPoint(
                    entry_point_type=ep.get("entryPointType") or "",
                    uri=ep.get("uri") or "",
                )
                for ep in conference.get("entryPoints") or []
            ],
            hangout_link=data.get("hangoutLink"),
            html_link=data.get("htmlLink"),
            organizer_email=organizer.get("email"),
            organizer_name=organizer.get("displayName"),
        )

    @property
    def video_uris(self) -> List[str]:
        return [ep.uri for ep in self.entry_points if ep.entry_point_type == "video" and ep.uri]

    @property
    def meet_link(self) -> Optional[str]:
        """The video entry point URI, falling back to the legacy hangoutLink."""
        uris = self.video_uris
        return uris[0] if uris else self.hangout_link


class DriveRecordingFile(BaseModel):
    """Normalized Google Drive file metadata for a (potential) recording."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    mime_type: str = ""
    created_time: Optional[datetime] = None
    size: int = 0
    description: Optional[str] = None
    properties: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "DriveRecordingFile":
        """Build a file from a Drive v3 ``File`` resource."""
        try:
            size = int(data.get("size") or 0)
        except (TypeError, ValueError):
            size = 0

        return cls(
            id=data.get("id", ""),
            name=data.get("name") or "",
            mime_type=data.get("mimeType") or "",
            created_time=parse_google_datetime(data.get("createdTime")),
            size=size,
            description=data.get("description"),
            properties={
                str(k): str(v) for k, v in (data.get("properties") or {}).items() if v is not None
            },
        )


# --------------------------------------------------------------------------- #
# API Models (camelCase on the wire)
# --------------------------------------------------------------------------- #

class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateMeetingRequest(ApiModel):
    id: str
    title: str
    description: Optional[str] = None
    start_time: str
    end_time: str
    time_zone: str
    attendees: Optional[List[str]] = None


class RecordingInstructions(ApiModel):
    message: str
    download_endpoint: str
    list_endpoint: str


class MeetingSummary(ApiModel):
    id: str
    title: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    meet_link: Optional[str] = None
    calendar_link: Optional[str] = None
    meet_id: Optional[str] = None
    host_email: Optional[str] = None
    calendar_event_id: Optional[str] = None
    recording_instructions: Optional[RecordingInstructions] = None


class CreateMeetingResponse(ApiModel):
    success: bool = True
    event: MeetingSummary


class RecordingItem(ApiModel):
    id: str
    name: str
    mime_type: str
    created_time: Optional[str] = None
    size: int = 0
    size_formatted: str
    meeting_id: Optional[str] = None
    calendar_event_id: Optional[str] = None
    event_title: Optional[str] = None
    host_email: Optional[str] = None
    has_metadata: bool = False
    has_calendar_match: bool = False
    suggested_file_name: str


class ListRecordingsResponse(ApiModel):
    success: bool = True
    recordings: List[RecordingItem] = Field(default_factory=list)
    total: int = 0
    with_meeting_id: int = 0
    with_calendar_match: int = 0
    message: Optional[str] = None


class DownloadRecordingRequest(ApiModel):
    recording_id: Optional[str] = None
    meeting_title: str = ""
    recording_date: Optional[str] = None
    meeting_id: Optional[str] = None
    calendar_event_id: Optional[str] = None
    host_email: Optional[str] = None


class MeetingMetadata(ApiModel):
    original_title: Optional[str] = None
    final_title: str
    original_meeting_id: Optional[str] = None
    extracted_meeting_id: Optional[str] = None
    final_meeting_id: Optional[str] = None
    timestamp: Optional[str] = None


class RecordingInfo(ApiModel):
    id: str
    name: str
    created_time: Optional[str] = None
    meeting_id: Optional[str] = None
    description: Optional[str] = None
    calendar_event_id: Optional[str] = None
    event_title: Optional[str] = None
    event_start_time: Optional[str] = None
    event_end_time: Optional[str] = None
    host_email: Optional[str] = None
    host_name: Optional[str] = None
    meeting_metadata: MeetingMetadata


class DownloadRecordingResponse(ApiModel):
    success: bool = True
    message: str = "Recording downloaded successfully"
    file_name: str
    file_path: str
    file_size: int
    recording_info: RecordingInfo
