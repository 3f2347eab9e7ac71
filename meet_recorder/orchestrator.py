"""
Request-scoped workflows for meetings and recordings.

Each workflow checks the user's Google credentials before talking to any
Google API, runs the blocking client calls in a worker thread with a
bounded timeout, and shapes the response models returned by the routes.
"""
from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from .auth import User
from .config import settings
from .errors import (
    InvalidRequestError,
    LocalIOError,
    NotFoundError,
    RecorderError,
    UpstreamTimeoutError,
)
from .integrations.google_calendar.client import MEET_CONFERENCE_TYPE, get_calendar
from .integrations.google_drive.client import DriveIntegration, get_drive
from .models import (
    CalendarEvent,
    CreateMeetingRequest,
    CreateMeetingResponse,
    DownloadRecordingRequest,
    DownloadRecordingResponse,
    DriveRecordingFile,
    ListRecordingsResponse,
    MeetingMetadata,
    MeetingSummary,
    RecordingInfo,
    RecordingInstructions,
    RecordingItem,
)
from .recordings.identifiers import (
    extract_meeting_id_from_url,
    extract_recording_meeting_id,
)
from .recordings.matching import match_recording
from .recordings.naming import (
    MEETING_PLACEHOLDER,
    RECORDING_PLACEHOLDER,
    reserve_download_path,
    synthesize_file_name,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


# --------------------------------------------------------------------------- #
# Configuration
# --------------------------------------------------------------------------- #

LIST_ENDPOINT = "/api/recordings/list"
DOWNLOAD_ENDPOINT = "/api/recordings/download"

RECORDING_NOTICE = (
    "Recording will be available after the meeting ends. "
    "Use the recording download feature to get it automatically."
)
RECORDING_INSTRUCTIONS = "To enable recording, click 'Record meeting' when the meeting starts"

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #

async def _call(what: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking Google client call off the event loop with a timeout."""
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(fn, *args, **kwargs),
            timeout=settings.upstream_timeout_seconds,
        )
    except asyncio.TimeoutError as e:
        raise UpstreamTimeoutError(
            f"Timed out waiting for {what}",
            details={"timeoutSeconds": settings.upstream_timeout_seconds},
        ) from e


def _iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")


def format_file_size(size: int) -> str:
    """Human readable size using 1024 steps, e.g. ``1.5 KB``."""
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    exponent = 0
    while value >= 1024 and exponent < len(_SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[exponent]}"


def is_likely_recording(recording: DriveRecordingFile) -> bool:
    """Meet names its recordings "... - Recording"; mp4 is its output format."""
    name = recording.name.lower()
    return "meet" in name or "recording" in name or "video/mp4" in recording.mime_type


# --------------------------------------------------------------------------- #
# Create Meeting
# --------------------------------------------------------------------------- #

def build_meet_event_body(request: CreateMeetingRequest, now_ms: Optional[int] = None) -> Dict[str, Any]:
    """Calendar event body that asks Google to attach a new Meet conference."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    description = f"{request.description or ''}\n\n{RECORDING_NOTICE}"

    return {
        "summary": request.title,
        "description": description,
        "start": {"dateTime": request.start_time, "timeZone": request.time_zone},
        "end": {"dateTime": request.end_time, "timeZone": request.time_zone},
        "conferenceData": {
            "createRequest": {
                "requestId": f"meet-{request.id}-{now_ms}",
                "conferenceSolutionKey": {"type": MEET_CONFERENCE_TYPE},
            },
        },
        "attendees": [{"email": email} for email in request.attendees or []],
    }


def summarize_meeting(event: CalendarEvent) -> MeetingSummary:
    meet_link = event.meet_link
    return MeetingSummary(
        id=event.id,
        title=event.title,
        start_time=_iso(event.start),
        end_time=_iso(event.end),
        meet_link=meet_link,
        calendar_link=event.html_link,
        meet_id=extract_meeting_id_from_url(meet_link),
        host_email=event.organizer_email,
        calendar_event_id=event.id,
        recording_instructions=RecordingInstructions(
            message=RECORDING_INSTRUCTIONS,
            download_endpoint=DOWNLOAD_ENDPOINT,
            list_endpoint=LIST_ENDPOINT,
        ),
    )


async def create_meeting(user: User, request: CreateMeetingRequest) -> CreateMeetingResponse:
    """
    Create a Calendar event with a Google Meet link.

    Raises:
        UnauthorizedError: If Google Calendar is not connected
        UpstreamError: If the Calendar API rejects the event
    """
    calendar = get_calendar(user.id)
    await _call("Google Calendar credentials", calendar.require_credentials)

    body = build_meet_event_body(request)
    event = await _call(
        "Google Calendar",
        calendar.create_meet_event,
        body,
        send_updates=bool(request.attendees),
    )

    summary = summarize_meeting(event)
    if summary.meet_link is None:
        logger.warning("Calendar event %s was created without a Meet link", event.id)
    logger.info("Created meeting %s (%s) for user %s", event.id, summary.meet_id, user.id)

    return CreateMeetingResponse(event=summary)


# --------------------------------------------------------------------------- #
# List Recordings
# --------------------------------------------------------------------------- #

async def _recent_events(user: User, now: datetime) -> List[CalendarEvent]:
    """
    Calendar events of the lookback window, or an empty list when Calendar
    is not connected or fails. Matching then simply finds nothing.
    """
    calendar = get_calendar(user.id)
    time_min = now - timedelta(days=settings.calendar_lookback_days)

    try:
        await _call("Google Calendar credentials", calendar.require_credentials)
        return await _call("Google Calendar", calendar.list_events, time_min, now)
    except RecorderError as e:
        logger.warning("Skipping calendar matching for user %s: %s", user.id, e.message)
        return []


def _recording_item(
    recording: DriveRecordingFile,
    meeting_id: Optional[str],
    event: Optional[CalendarEvent],
) -> RecordingItem:
    event_title = event.title if event else None
    host_email = event.organizer_email if event else None
    calendar_event_id = event.id if event else None

    return RecordingItem(
        id=recording.id,
        name=recording.name,
        mime_type=recording.mime_type,
        created_time=_iso(recording.created_time),
        size=recording.size,
        size_formatted=format_file_size(recording.size),
        meeting_id=meeting_id,
        calendar_event_id=calendar_event_id,
        event_title=event_title,
        host_email=host_email,
        has_metadata=meeting_id is not None or bool(recording.properties),
        has_calendar_match=event is not None,
        suggested_file_name=synthesize_file_name(
            event_title or Path(recording.name).stem,
            meeting_id=meeting_id,
            calendar_event_id=calendar_event_id,
            host_email=host_email,
            timestamp=recording.created_time,
            placeholder=RECORDING_PLACEHOLDER,
        ),
    )


def _sort_key(item: Tuple[DriveRecordingFile, RecordingItem]) -> Tuple[float, bool]:
    recording, recording_item = item
    created = recording.created_time.timestamp() if recording.created_time else float("-inf")
    return created, recording_item.has_calendar_match


async def list_recordings(user: User) -> ListRecordingsResponse:
    """
    List the user's Meet recordings, each matched to its Calendar event
    when one can be found.

    Raises:
        UnauthorizedError: If Google Drive is not connected
        UpstreamError: If the Drive API fails
    """
    drive = get_drive(user.id)
    await _call("Google Drive credentials", drive.require_credentials)

    files = await _call("Google Drive", drive.list_video_files, settings.recordings_page_size)
    recordings = [f for f in files if is_likely_recording(f)]
    logger.info("Found %d potential recordings for user %s", len(recordings), user.id)

    if not recordings:
        return ListRecordingsResponse(message="No recordings found")

    events = await _recent_events(user, datetime.now(timezone.utc))
    window = timedelta(hours=settings.match_window_hours)

    items = []
    for recording in recordings:
        meeting_id = extract_recording_meeting_id(recording)
        event = match_recording(recording, events, window=window, meeting_id=meeting_id)
        items.append((recording, _recording_item(recording, meeting_id, event)))

    items.sort(key=_sort_key, reverse=True)
    result = [item for _, item in items]

    return ListRecordingsResponse(
        recordings=result,
        total=len(result),
        with_meeting_id=sum(1 for item in result if item.meeting_id),
        with_calendar_match=sum(1 for item in result if item.has_calendar_match),
    )


# --------------------------------------------------------------------------- #
# Download Recording
# --------------------------------------------------------------------------- #

async def _resolve_recording(drive: DriveIntegration, request: DownloadRecordingRequest) -> DriveRecordingFile:
    if request.recording_id:
        try:
            return await _call("Google Drive", drive.get_file, request.recording_id)
        except NotFoundError as e:
            raise NotFoundError("Recording not found or access denied", details=e.details) from e

    if not request.meeting_title:
        raise InvalidRequestError("Either recordingId or meetingTitle is required")

    matches = await _call("Google Drive", drive.search_video_files, request.meeting_title)
    if not matches:
        raise NotFoundError(
            "No recordings found for this meeting",
            details={"meetingTitle": request.meeting_title},
        )
    # Newest first
    return matches[0]


async def _calendar_event_details(user: User, event_id: str) -> Optional[CalendarEvent]:
    calendar = get_calendar(user.id)
    try:
        await _call("Google Calendar credentials", calendar.require_credentials)
        return await _call("Google Calendar", calendar.get_event, event_id)
    except RecorderError as e:
        logger.warning("Could not fetch calendar event %s: %s", event_id, e.message)
        return None


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.error("Could not remove partial download %s: %s", path, e)


def save_recording(
    drive: DriveIntegration,
    file_id: str,
    download_dir: Path,
    file_name: str,
    chunk_size: int,
    timeout: float,
) -> Tuple[Path, int]:
    """
    Reserve a collision-free path and stream the recording into it.

    Runs in a worker thread. The partially written file is removed on any
    failure.

    Returns:
        The final path and the number of bytes written
    """
    try:
        path, handle = reserve_download_path(download_dir, file_name)
    except OSError as e:
        raise LocalIOError(
            "Cannot write to the download directory",
            details={"directory": str(download_dir), "reason": str(e)},
        ) from e

    deadline = time.monotonic() + timeout
    logger.info("Downloading recording %s to %s", file_id, path)

    try:
        with handle:
            size = drive.download_file(file_id, handle, chunk_size=chunk_size, deadline=deadline)
    except OSError as e:
        _discard(path)
        raise LocalIOError(
            "Failed to write recording",
            details={"filePath": str(path), "reason": str(e)},
        ) from e
    except Exception:
        _discard(path)
        raise

    return path, size


async def download_recording(
    user: User,
    request: DownloadRecordingRequest,
    download_dir: Path,
) -> DownloadRecordingResponse:
    """
    Download a recording into ``download_dir`` under a synthesized name.

    Raises:
        UnauthorizedError: If Google Drive is not connected
        NotFoundError: If the recording cannot be found
        LocalIOError: If the file cannot be written
        UpstreamError: If the Drive API fails or times out
    """
    drive = get_drive(user.id)
    await _call("Google Drive credentials", drive.require_credentials)

    recording = await _resolve_recording(drive, request)

    event = None
    if request.calendar_event_id:
        event = await _calendar_event_details(user, request.calendar_event_id)

    extracted_meeting_id = extract_recording_meeting_id(recording)
    final_meeting_id = request.meeting_id or extracted_meeting_id
    final_title = (
        (event.title if event else None)
        or request.meeting_title
        or recording.name
        or MEETING_PLACEHOLDER
    )
    final_host_email = (
        request.host_email
        or (event.organizer_email if event else None)
        or user.email
    )
    final_event_id = event.id if event else request.calendar_event_id
    timestamp = recording.created_time or request.recording_date

    file_name = synthesize_file_name(
        final_title,
        meeting_id=final_meeting_id,
        calendar_event_id=final_event_id,
        host_email=final_host_email,
        timestamp=timestamp,
    )

    path, size = await asyncio.to_thread(
        save_recording,
        drive,
        recording.id,
        download_dir,
        file_name,
        settings.download_chunk_size,
        settings.download_timeout_seconds,
    )
    logger.info("Recording %s downloaded to %s (%d bytes)", recording.id, path, size)

    return DownloadRecordingResponse(
        file_name=path.name,
        file_path=str(path),
        file_size=size,
        recording_info=RecordingInfo(
            id=recording.id,
            name=recording.name,
            created_time=_iso(recording.created_time),
            meeting_id=final_meeting_id,
            description=recording.description,
            calendar_event_id=final_event_id,
            event_title=event.title if event else None,
            event_start_time=_iso(event.start) if event else None,
            event_end_time=_iso(event.end) if event else None,
            host_email=final_host_email,
            host_name=event.organizer_name if event else None,
            meeting_metadata=MeetingMetadata(
                original_title=request.meeting_title or None,
                final_title=final_title,
                original_meeting_id=request.meeting_id,
                extracted_meeting_id=extracted_meeting_id,
                final_meeting_id=final_meeting_id,
                timestamp=_iso(recording.created_time),
            ),
        ),
    )
