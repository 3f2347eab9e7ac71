"""
Tests for per-user token rows in Supabase.
"""

from unittest.mock import MagicMock, patch

import pytest

from meet_recorder.integrations import token_storage


@pytest.fixture
def table():
    db = MagicMock()
    with patch("meet_recorder.integrations.token_storage.get_db", return_value=db):
        yield db.table.return_value


class TestTokenStorage:
    def test_save_upserts_on_user_and_service(self, table):
        token_storage.save_token("user-1", "google_drive", {"token": "abc"})

        row = table.upsert.call_args.args[0]
        assert row["user_id"] == "user-1"
        assert row["service"] == "google_drive"
        assert row["token_data"]["token"] == "abc"
        assert table.upsert.call_args.kwargs["on_conflict"] == "user_id,service"

    def test_get_token(self, table):
        table.select.return_value.eq.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[{"token_data": {"token": "abc"}}]
        )

        assert token_storage.get_token("user-1", "google_drive") == {"token": "abc"}

    def test_missing_token(self, table):
        table.select.return_value.eq.return_value.eq.return_value.execute.return_value = MagicMock(data=[])

        assert token_storage.get_token("user-1", "google_drive") is None
        assert token_storage.has_token("user-1", "google_drive") is False

    def test_delete_reports_whether_a_row_existed(self, table):
        table.delete.return_value.eq.return_value.eq.return_value.execute.return_value = MagicMock(data=[])

        assert token_storage.delete_token("user-1", "google_calendar") is False
