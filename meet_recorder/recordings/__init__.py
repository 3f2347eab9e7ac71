"""
Recording metadata logic: meeting identifier extraction, recording-to-event
matching and download file naming.
"""
from .identifiers import (
    extract_meeting_id,
    extract_meeting_id_from_url,
    extract_recording_meeting_id,
    same_meeting,
)
from .matching import match_recording
from .naming import (
    reserve_download_path,
    synthesize_file_name,
    with_collision_suffix,
)

__all__ = [
    "extract_meeting_id",
    "extract_meeting_id_from_url",
    "extract_recording_meeting_id",
    "same_meeting",
    "match_recording",
    "reserve_download_path",
    "synthesize_file_name",
    "with_collision_suffix",
]
