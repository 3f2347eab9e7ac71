"""
Google Meet room code extraction.

A room code is the ``abc-defg-hij`` token Meet uses to address a call. It
shows up in join URLs, in the names Meet gives to recordings and sometimes
in a file's description or custom properties. Every extracted code is
lowercased so codes recovered from different sources compare equal.
"""
from __future__ import annotations

import re
from typing import Optional, Sequence

from ..models import DriveRecordingFile


# Not preceded or followed by another letter, so "xabc-defg-hijk" is no code
ROOM_CODE = r"(?<![a-z])[a-z]{3}-[a-z]{4}-[a-z]{3}(?![a-z])"

# Drive custom property that, when present, names the room code directly
MEETING_ID_PROPERTY = "meetingId"

MEET_URL_PATTERN = re.compile(rf"meet\.google\.com/({ROOM_CODE})", re.IGNORECASE)
MEET_LOOKUP_PATTERN = re.compile(r"meet\.google\.com/lookup/([a-z0-9_-]+)", re.IGNORECASE)
LABELED_PATTERN = re.compile(rf"meeting[\s_-]?id[\s_:-]*({ROOM_CODE})", re.IGNORECASE)
BARE_CODE_PATTERN = re.compile(rf"({ROOM_CODE})", re.IGNORECASE)
LOOSE_MEET_PATTERN = re.compile(r"meet[_-]([a-z0-9-]{10,})", re.IGNORECASE)

URL_PATTERNS: Sequence[re.Pattern] = (MEET_URL_PATTERN, MEET_LOOKUP_PATTERN)

# Order matters: the first pattern that matches wins.
TEXT_PATTERNS: Sequence[re.Pattern] = (
    MEET_URL_PATTERN,
    MEET_LOOKUP_PATTERN,
    LABELED_PATTERN,
    BARE_CODE_PATTERN,
    LOOSE_MEET_PATTERN,
)


def _first_match(text: Optional[str], patterns: Sequence[re.Pattern]) -> Optional[str]:
    if not text:
        return None
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(1).lower()
    return None


def extract_meeting_id(text: Optional[str]) -> Optional[str]:
    """
    Extract a meeting identifier from arbitrary text.

    Tries, in order: a Meet join URL, a Meet lookup URL, a labeled
    "meeting id" phrase, a bare room code and a looser ``meet-<token>``
    form.

    Args:
        text: File name, description or URL. None and empty are allowed.

    Returns:
        The lowercased identifier, or None when nothing matches
    """
    return _first_match(text, TEXT_PATTERNS)


def extract_meeting_id_from_url(uri: Optional[str]) -> Optional[str]:
    """Extract a meeting identifier from a Meet join or lookup URL only."""
    return _first_match(uri, URL_PATTERNS)


def extract_recording_meeting_id(recording: DriveRecordingFile) -> Optional[str]:
    """
    Extract the meeting identifier of a Drive recording.

    A ``meetingId`` custom property is authoritative and bypasses pattern
    matching. Otherwise the file name is searched, then the description.
    """
    explicit = (recording.properties.get(MEETING_ID_PROPERTY) or "").strip()
    if explicit:
        return explicit.lower()

    for text in (recording.name, recording.description):
        meeting_id = extract_meeting_id(text)
        if meeting_id:
            return meeting_id
    return None


def same_meeting(first: Optional[str], second: Optional[str]) -> bool:
    """Case-insensitive identifier equality; absent identifiers never match."""
    if not first or not second:
        return False
    return first.lower() == second.lower()
