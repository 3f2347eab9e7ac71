"""
Tests for GoogleOAuthClient credential handling.

All tests patch token storage and the discovery client -- no Supabase or
Google access needed.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest
from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials

from meet_recorder.errors import UnauthorizedError
from meet_recorder.integrations.google_drive.client import DriveIntegration


OAUTH = "meet_recorder.integrations.google.oauth"


def _naive_utc(delta: timedelta) -> str:
    return (datetime.now(timezone.utc) + delta).replace(tzinfo=None).isoformat()


def _token(expiry_delta: timedelta, refresh_token="refresh-token") -> dict:
    return {
        "token": "access-token",
        "refresh_token": refresh_token,
        "token_uri": "https://oauth2.googleapis.com/token",
        "client_id": "client-id",
        "client_secret": "client-secret",
        "scopes": DriveIntegration.SCOPES,
        "expiry": _naive_utc(expiry_delta),
    }


@pytest.fixture
def storage():
    """Patch the token storage functions used by the OAuth base class."""
    with patch(f"{OAUTH}.get_token") as get_token, \
            patch(f"{OAUTH}.has_token") as has_token, \
            patch(f"{OAUTH}.save_token") as save_token, \
            patch(f"{OAUTH}.delete_token") as delete_token:
        yield MagicMock(
            get_token=get_token,
            has_token=has_token,
            save_token=save_token,
            delete_token=delete_token,
        )


class TestRequireCredentials:
    """Tests for require_credentials."""

    def test_no_token(self, storage):
        storage.get_token.return_value = None

        with pytest.raises(UnauthorizedError) as exc_info:
            DriveIntegration("user-1").require_credentials()

        assert exc_info.value.status_code == 401
        assert exc_info.value.details["reason"] == "not connected"
        assert "Google Drive" in exc_info.value.message

    def test_valid_token(self, storage):
        storage.get_token.return_value = _token(timedelta(hours=1))

        creds = DriveIntegration("user-1").require_credentials()

        assert creds.token == "access-token"
        storage.save_token.assert_not_called()

    def test_refresh_failure_is_unauthorized(self, storage):
        storage.get_token.return_value = _token(timedelta(hours=-1))

        with patch.object(Credentials, "refresh", side_effect=RefreshError("invalid_grant")):
            with pytest.raises(UnauthorizedError) as exc_info:
                DriveIntegration("user-1").require_credentials()

        assert exc_info.value.details["reason"] == "refresh failed"
        storage.save_token.assert_not_called()

    def test_expired_token_is_refreshed_and_saved(self, storage):
        storage.get_token.return_value = _token(timedelta(hours=-1))

        def fake_refresh(self, request):
            self.token = "new-access-token"
            self.expiry = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(hours=1)

        with patch.object(Credentials, "refresh", autospec=True, side_effect=fake_refresh):
            creds = DriveIntegration("user-1").require_credentials()

        assert creds.token == "new-access-token"
        saved = storage.save_token.call_args.args
        assert saved[0] == "user-1"
        assert saved[1] == "google_drive"
        assert saved[2]["token"] == "new-access-token"

    def test_expired_without_refresh_token(self, storage):
        storage.get_token.return_value = _token(timedelta(hours=-1), refresh_token=None)

        with pytest.raises(UnauthorizedError):
            DriveIntegration("user-1").require_credentials()


class TestConnection:
    def test_is_connected_without_token(self, storage):
        storage.has_token.return_value = False

        assert DriveIntegration("user-1").is_connected() is False
        storage.get_token.assert_not_called()

    def test_service_is_not_built_without_credentials(self, storage):
        storage.get_token.return_value = None

        with patch(f"{OAUTH}.build") as build:
            with pytest.raises(UnauthorizedError):
                DriveIntegration("user-1")._get_service()

        build.assert_not_called()

    def test_service_built_once(self, storage):
        storage.get_token.return_value = _token(timedelta(hours=1))
        drive = DriveIntegration("user-1")

        with patch(f"{OAUTH}.build") as build:
            first = drive._get_service()
            second = drive._get_service()

        assert first is second
        build.assert_called_once()
        assert build.call_args.args[:2] == ("drive", "v3")

    def test_disconnect(self, storage):
        storage.delete_token.return_value = True

        assert DriveIntegration("user-1").disconnect() is True
        storage.delete_token.assert_called_once_with("user-1", "google_drive")

    def test_user_id_required(self):
        with pytest.raises(ValueError):
            DriveIntegration("")
