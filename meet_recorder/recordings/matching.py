"""
Association of Drive recordings with the Calendar events that produced them.

An event whose Meet link names the same room as the recording is always
preferred. Only when no candidate matches by identifier do we fall back to
an event that started close to the recording's creation time and whose
title shares a significant word with the file name.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Iterable, List, Optional, Sequence

from ..models import CalendarEvent, DriveRecordingFile
from .identifiers import (
    extract_meeting_id_from_url,
    extract_recording_meeting_id,
    same_meeting,
)

logger = logging.getLogger(__name__)


DEFAULT_MATCH_WINDOW = timedelta(hours=4)

# Shorter title words ("the", "and", "1:1") do not count as lexical support
MIN_TOKEN_LENGTH = 4


def event_meeting_ids(event: CalendarEvent) -> List[str]:
    """Identifiers of every video entry point of an event (hangoutLink if none)."""
    uris = event.video_uris or ([event.hangout_link] if event.hangout_link else [])
    ids = []
    for uri in uris:
        meeting_id = extract_meeting_id_from_url(uri)
        if meeting_id:
            ids.append(meeting_id)
    return ids


def significant_tokens(title: str) -> List[str]:
    return [token for token in title.split() if len(token) >= MIN_TOKEN_LENGTH]


def has_lexical_support(event: CalendarEvent, file_name: str) -> bool:
    name = file_name.lower()
    return any(token.lower() in name for token in significant_tokens(event.title))


def time_distance(recording: DriveRecordingFile, event: CalendarEvent) -> Optional[timedelta]:
    if recording.created_time is None or event.start is None:
        return None
    return abs(recording.created_time - event.start)


def match_by_identifier(
    recording_meeting_id: Optional[str],
    events: Iterable[CalendarEvent],
) -> Optional[CalendarEvent]:
    """First event, in input order, whose Meet link names the same room."""
    if not recording_meeting_id:
        return None
    for event in events:
        if any(same_meeting(recording_meeting_id, mid) for mid in event_meeting_ids(event)):
            return event
    return None


def match_by_time_and_title(
    recording: DriveRecordingFile,
    events: Iterable[CalendarEvent],
    window: timedelta = DEFAULT_MATCH_WINDOW,
) -> Optional[CalendarEvent]:
    """
    Closest event within ``window`` of the recording's creation time whose
    title shares a significant word with the file name. Ties keep input
    order.
    """
    best: Optional[CalendarEvent] = None
    best_distance: Optional[timedelta] = None

    for event in events:
        distance = time_distance(recording, event)
        if distance is None or distance > window:
            continue
        if not has_lexical_support(event, recording.name):
            continue
        if best_distance is None or distance < best_distance:
            best, best_distance = event, distance

    return best


def match_recording(
    recording: DriveRecordingFile,
    candidate_events: Sequence[CalendarEvent],
    window: timedelta = DEFAULT_MATCH_WINDOW,
    meeting_id: Optional[str] = None,
) -> Optional[CalendarEvent]:
    """
    Find the Calendar event a recording was made from.

    Args:
        recording: The Drive file to match
        candidate_events: Events to consider, ideally sorted by start time
        window: Maximum distance between creation time and event start for
            the time-based fallback
        meeting_id: Identifier already extracted from the recording, if any

    Returns:
        The matching event, or None for an orphaned recording
    """
    if not candidate_events:
        return None

    if meeting_id is None:
        meeting_id = extract_recording_meeting_id(recording)

    event = match_by_identifier(meeting_id, candidate_events)
    if event is not None:
        logger.debug("Recording %s matched event %s by meeting id", recording.id, event.id)
        return event

    event = match_by_time_and_title(recording, candidate_events, window)
    if event is not None:
        logger.debug("Recording %s matched event %s by time and title", recording.id, event.id)
    return event
