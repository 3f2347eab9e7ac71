"""
Deterministic file names for downloaded recordings.

Names look like ``<Title>_<YYYY-MM-DD>[_<host>][_<eventId>][_<meetingId>].mp4``
and are reserved in the download directory by exclusive creation, so two
concurrent downloads never end up writing the same file.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Optional, Tuple, Union

from ..models import parse_google_datetime

logger = logging.getLogger(__name__)


VIDEO_EXTENSION = ".mp4"
MAX_TITLE_LENGTH = 30
# Keeps the longest name (title, date, three segments, "_<n>" suffix) under
# the 255 byte file name limit
MAX_SEGMENT_LENGTH = 60

MEETING_PLACEHOLDER = "Meeting"
RECORDING_PLACEHOLDER = "Recording"

_TITLE_UNSAFE = re.compile(r"[^A-Za-z0-9]")
_SEGMENT_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


def _date_segment(timestamp: Union[str, datetime, None]) -> str:
    moment = parse_google_datetime(timestamp) or datetime.now(timezone.utc)
    iso = moment.astimezone(timezone.utc).isoformat()
    return re.sub(r"[:.]", "-", iso).split("T")[0]


def _title_segment(title: Optional[str], placeholder: str) -> str:
    if not title:
        return placeholder
    return _TITLE_UNSAFE.sub("_", title)[:MAX_TITLE_LENGTH]


def _optional_segment(value: Optional[str]) -> str:
    if not value:
        return ""
    return f"_{_SEGMENT_UNSAFE.sub('_', value)[:MAX_SEGMENT_LENGTH]}"


def synthesize_file_name(
    title: Optional[str],
    meeting_id: Optional[str] = None,
    calendar_event_id: Optional[str] = None,
    host_email: Optional[str] = None,
    timestamp: Union[str, datetime, None] = None,
    placeholder: str = MEETING_PLACEHOLDER,
) -> str:
    """
    Build the file name for a recording from whatever metadata is known.

    Host, event ID and meeting ID segments are sanitized and cut to
    ``MAX_SEGMENT_LENGTH`` characters.

    Args:
        title: Meeting title; characters outside [A-Za-z0-9] become "_"
        meeting_id: Meet room code
        calendar_event_id: Calendar event ID
        host_email: Organizer email, only the local part is used
        timestamp: Recording time (datetime or ISO string), defaults to now
        placeholder: Title used when ``title`` is empty

    Returns:
        A non-empty file name ending in ``.mp4``
    """
    host = host_email.split("@")[0] if host_email else None

    return (
        f"{_title_segment(title, placeholder)}_{_date_segment(timestamp)}"
        f"{_optional_segment(host)}"
        f"{_optional_segment(calendar_event_id)}"
        f"{_optional_segment(meeting_id)}"
        f"{VIDEO_EXTENSION}"
    )


def with_collision_suffix(file_name: str, counter: int) -> str:
    """Insert ``_<counter>`` right before the extension."""
    path = Path(file_name)
    return f"{path.stem}_{counter}{path.suffix}"


def reserve_download_path(directory: Path, file_name: str) -> Tuple[Path, BinaryIO]:
    """
    Atomically claim a free path for ``file_name`` inside ``directory``.

    The base name is tried first, then ``_1``, ``_2``, ... The winning path
    is created with exclusive mode so no other writer can claim it.

    Returns:
        The reserved path and the binary file handle opened on it. The
        caller owns the handle and must remove the file if writing fails.

    Raises:
        OSError: If the directory cannot be created or written to
    """
    directory.mkdir(parents=True, exist_ok=True)

    candidate = file_name
    counter = 0
    while True:
        path = directory / candidate
        try:
            handle = open(path, "xb")
        except FileExistsError:
            counter += 1
            candidate = with_collision_suffix(file_name, counter)
            continue
        if counter:
            logger.info("%s already exists, using %s", file_name, candidate)
        return path, handle
