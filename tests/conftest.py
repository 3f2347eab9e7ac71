"""
Pytest configuration and shared fixtures.

Settings are validated when ``meet_recorder.config`` is imported, so the
environment is seeded here before any test module imports the package.
"""

import json
import os
import tempfile
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from googleapiclient.errors import HttpError

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault(
    "GOOGLE_CREDENTIALS_JSON",
    json.dumps({
        "web": {
            "client_id": "client-id.apps.googleusercontent.com",
            "client_secret": "client-secret",
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
        }
    }),
)
os.environ.setdefault("DOWNLOADS_DIR", tempfile.mkdtemp(prefix="meet-recorder-tests-"))

from meet_recorder.auth import User  # noqa: E402
from meet_recorder.models import CalendarEvent, DriveRecordingFile, EntryPoint  # noqa: E402


UTC = timezone.utc


def make_http_error(status: int, message: str = "error", reason: str = "") -> HttpError:
    """HttpError as raised by googleapiclient for a JSON error response."""
    body = {"error": {"code": status, "message": message, "errors": [{"reason": reason}]}}
    resp = MagicMock(status=status, reason=message)
    return HttpError(resp, json.dumps(body).encode("utf-8"))


@pytest.fixture
def http_error():
    return make_http_error


@pytest.fixture
def user() -> User:
    return User(id="user-123", email="owner@example.com", full_name="Owner")


@pytest.fixture
def make_recording():
    """Factory for DriveRecordingFile instances."""

    def _make(
        name: str = "Weekly Sync (2024-03-01 10:05 GMT) - Recording",
        created_time: datetime = datetime(2024, 3, 1, 11, 0, tzinfo=UTC),
        **kwargs,
    ) -> DriveRecordingFile:
        data = {
            "id": "file-1",
            "name": name,
            "mime_type": "video/mp4",
            "created_time": created_time,
            "size": 1048576,
        }
        data.update(kwargs)
        return DriveRecordingFile(**data)

    return _make


@pytest.fixture
def make_event():
    """Factory for CalendarEvent instances with an optional Meet link."""

    def _make(
        event_id: str = "evt-1",
        title: str = "Weekly Sync",
        start: datetime = datetime(2024, 3, 1, 10, 0, tzinfo=UTC),
        meet_link=None,
        **kwargs,
    ) -> CalendarEvent:
        entry_points = []
        if meet_link:
            entry_points.append(EntryPoint(entry_point_type="video", uri=meet_link))
        return CalendarEvent(
            id=event_id,
            title=title,
            start=start,
            entry_points=entry_points,
            **kwargs,
        )

    return _make
