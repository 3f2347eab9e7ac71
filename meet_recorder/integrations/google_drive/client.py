"""
Google Drive integration for Meet Recorder.

Lists Google Meet video recordings and streams their content to disk.

Setup:
1. Uses the same Google Cloud project and OAuth credentials as Calendar
2. Requires the drive.readonly scope
3. Users may need to re-authorize if they previously authorized without Drive scope
"""
from __future__ import annotations

import logging
import time
from typing import BinaryIO, List, Optional

from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload

from ...errors import UpstreamTimeoutError, from_http_error
from ...models import DriveRecordingFile
from ..google.oauth import GoogleOAuthClient

logger = logging.getLogger(__name__)


# --------------------------------------------------------------------------- #
# Configuration
# --------------------------------------------------------------------------- #

RECORDING_FIELDS = "id, name, mimeType, createdTime, size, description, properties"

VIDEO_QUERY = "mimeType contains 'video/' and trashed=false"

DEFAULT_CHUNK_SIZE = 8 * 1024 * 1024


def escape_query_value(value: str) -> str:
    """Escape a string for use inside a quoted Drive query literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


# --------------------------------------------------------------------------- #
# Google Drive Integration Class
# --------------------------------------------------------------------------- #

class DriveIntegration(GoogleOAuthClient):
    """
    Google Drive integration for Meet recordings.

    Extends GoogleOAuthClient to inherit OAuth flow and credential management.

    Usage:
        drive = DriveIntegration(user_id="user_id")
        drive.require_credentials()

        files = drive.list_video_files()
        with open(path, "xb") as handle:
            drive.download_file(files[0].id, handle)
    """

    # Google OAuth configuration
    SERVICE_NAME = "google_drive"
    DISPLAY_NAME = "Google Drive"
    API_NAME = "drive"
    API_VERSION = "v3"
    SCOPES = [
        "https://www.googleapis.com/auth/drive.readonly",
    ]

    def __init__(self, user_id: Optional[str] = None):
        """Initialize the Drive integration for a specific user."""
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
            about = service.about().get(fields="user").execute()
            return about.get("user", {}).get("emailAddress")
        except HttpError as e:
            logger.warning("Error getting drive user email: %s", e)
            return None

    # ----------------------------------------------------------------------- #
    # Recording Metadata
    # ----------------------------------------------------------------------- #

    def list_video_files(self, page_size: int = 50) -> List[DriveRecordingFile]:
        """
        List non-trashed video files, newest first.

        Args:
            page_size: Maximum number of files to return
        """
        return self._list_files(VIDEO_QUERY, page_size)

    def search_video_files(self, name: str, page_size: int = 10) -> List[DriveRecordingFile]:
        """
        List non-trashed video files whose name contains ``name``, newest first.
        """
        query = f"name contains '{escape_query_value(name)}' and {VIDEO_QUERY}"
        return self._list_files(query, page_size)

    def _list_files(self, query: str, page_size: int) -> List[DriveRecordingFile]:
        service = self._get_service()

        try:
            results = service.files().list(
                q=query,
                spaces="drive",
                fields=f"files({RECORDING_FIELDS})",
                orderBy="createdTime desc",
                pageSize=page_size,
            ).execute()
        except HttpError as e:
            raise from_http_error(e, "Drive files") from e

        return [DriveRecordingFile.from_api(f) for f in results.get("files", [])]

    def get_file(self, file_id: str) -> DriveRecordingFile:
        """
        Get metadata for a specific file.

        Raises:
            NotFoundError: If the file does not exist or is not shared with the user
        """
        service = self._get_service()

        try:
            data = service.files().get(
                fileId=file_id,
                fields=RECORDING_FIELDS,
            ).execute()
        except HttpError as e:
            raise from_http_error(e, f"recording {file_id}") from e

        return DriveRecordingFile.from_api(data)

    # ----------------------------------------------------------------------- #
    # Recording Content
    # ----------------------------------------------------------------------- #

    def download_file(
        self,
        file_id: str,
        handle: BinaryIO,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        deadline: Optional[float] = None,
    ) -> int:
        """
        Stream a file's content into ``handle`` chunk by chunk.

        Args:
            file_id: The Google Drive file ID
            handle: Binary file object to write to
            chunk_size: Bytes requested per chunk
            deadline: ``time.monotonic()`` value after which the download is
                abandoned

        Returns:
            Number of bytes written

        Raises:
            UpstreamTimeoutError: If the deadline passes before completion
            RecorderError: If Drive rejects the request
        """
        service = self._get_service()
        request = service.files().get_media(fileId=file_id)
        downloader = MediaIoBaseDownload(handle, request, chunksize=chunk_size)

        done = False
        try:
            while not done:
                if deadline is not None and time.monotonic() > deadline:
                    raise UpstreamTimeoutError(
                        "Timed out downloading recording",
                        details={"fileId": file_id},
                    )
                status, done = downloader.next_chunk()
                if status:
                    logger.debug("Download %s: %d%%", file_id, int(status.progress() * 100))
        except HttpError as e:
            raise from_http_error(e, f"recording {file_id}") from e

        return handle.tell()


# --------------------------------------------------------------------------- #
# User-Specific Instance Helper
# --------------------------------------------------------------------------- #

def get_drive(user_id: str) -> DriveIntegration:
    """
    Get a Drive integration instance for a specific user.

    Args:
        user_id: The user's ID

    Returns:
        DriveIntegration configured for the user
    """
    return DriveIntegration(user_id=user_id)
