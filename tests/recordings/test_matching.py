"""
Tests for recording-to-event matching.

Test coverage:
- Identifier matches, including priority over closer events
- Time window boundaries of the fallback
- Lexical support requirements
- Degraded inputs (no events, no timestamps)
"""

from datetime import datetime, timedelta, timezone

from meet_recorder.models import CalendarEvent, EntryPoint
from meet_recorder.recordings.matching import (
    event_meeting_ids,
    has_lexical_support,
    match_recording,
    significant_tokens,
)


UTC = timezone.utc
T = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


class TestIdentifierMatch:
    """Rule 1: matching Meet room codes."""

    def test_matches_by_meet_link(self, make_recording, make_event):
        recording = make_recording(name="abc-defg-hij (2024-03-01) - Recording", created_time=T)
        event = make_event(
            title="Unrelated title",
            start=T - timedelta(days=3),
            meet_link="https://meet.google.com/ABC-DEFG-HIJ",
        )

        assert match_recording(recording, [event]) == event

    def test_identifier_beats_closer_event(self, make_recording, make_event):
        """An identifier match wins over an event that is closer in time."""
        recording = make_recording(name="Weekly Sync abc-defg-hij - Recording", created_time=T)
        closer = make_event(
            event_id="closer",
            title="Weekly Sync",
            start=T - timedelta(minutes=5),
            meet_link="https://meet.google.com/zzz-yyyy-xxx",
        )
        linked = make_event(
            event_id="linked",
            title="Weekly Sync",
            start=T - timedelta(hours=3),
            meet_link="https://meet.google.com/abc-defg-hij",
        )

        assert match_recording(recording, [closer, linked]).id == "linked"

    def test_first_identifier_match_in_input_order(self, make_recording, make_event):
        recording = make_recording(name="abc-defg-hij", created_time=T)
        first = make_event(event_id="first", meet_link="https://meet.google.com/abc-defg-hij")
        second = make_event(event_id="second", meet_link="https://meet.google.com/abc-defg-hij")

        assert match_recording(recording, [first, second]).id == "first"

    def test_uses_property_identifier(self, make_recording, make_event):
        recording = make_recording(name="Recording.mp4", properties={"meetingId": "abc-defg-hij"})
        event = make_event(title="x", start=None, meet_link="https://meet.google.com/abc-defg-hij")

        assert match_recording(recording, [event]) == event

    def test_hangout_link_fallback(self, make_recording):
        recording = make_recording(name="abc-defg-hij")
        event = CalendarEvent(id="legacy", hangout_link="https://meet.google.com/abc-defg-hij")

        assert event_meeting_ids(event) == ["abc-defg-hij"]
        assert match_recording(recording, [event]) == event

    def test_non_video_entry_points_ignored(self):
        event = CalendarEvent(
            id="evt",
            entry_points=[
                EntryPoint(entry_point_type="more", uri="https://meet.google.com/abc-defg-hij"),
                EntryPoint(entry_point_type="phone", uri="tel:+1-555-0100"),
            ],
        )

        assert event_meeting_ids(event) == []


class TestTimeAndTitleMatch:
    """Rule 2: time window plus a shared significant word."""

    def test_inside_window(self, make_recording, make_event):
        recording = make_recording(name="Weekly Sync - Recording", created_time=T)
        event = make_event(title="Weekly Sync", start=T + timedelta(hours=3, minutes=59))

        assert match_recording(recording, [event]) == event

    def test_outside_window(self, make_recording, make_event):
        recording = make_recording(name="Weekly Sync - Recording", created_time=T)
        event = make_event(title="Weekly Sync", start=T + timedelta(hours=4, minutes=1))

        assert match_recording(recording, [event]) is None

    def test_window_boundary_is_inclusive(self, make_recording, make_event):
        recording = make_recording(name="Weekly Sync - Recording", created_time=T)
        event = make_event(title="Weekly Sync", start=T - timedelta(hours=4))

        assert match_recording(recording, [event]) == event

    def test_requires_lexical_support(self, make_recording, make_event):
        recording = make_recording(name="Recording 2024-03-01", created_time=T)
        event = make_event(title="Weekly Sync", start=T)

        assert match_recording(recording, [event]) is None

    def test_short_words_do_not_count(self, make_recording, make_event):
        recording = make_recording(name="The 1:1 - Recording", created_time=T)
        event = make_event(title="The 1:1", start=T)

        assert match_recording(recording, [event]) is None

    def test_closest_qualifying_event_wins(self, make_recording, make_event):
        recording = make_recording(name="Design Review - Recording", created_time=T)
        earlier = make_event(event_id="earlier", title="Design Review", start=T - timedelta(hours=3))
        nearer = make_event(event_id="nearer", title="Design Review", start=T - timedelta(minutes=30))

        assert match_recording(recording, [earlier, nearer]).id == "nearer"

    def test_custom_window(self, make_recording, make_event):
        recording = make_recording(name="Weekly Sync - Recording", created_time=T)
        event = make_event(title="Weekly Sync", start=T + timedelta(hours=2))

        assert match_recording(recording, [event], window=timedelta(hours=1)) is None


class TestDegradedInputs:
    """Missing data yields no match instead of an error."""

    def test_no_candidates(self, make_recording):
        assert match_recording(make_recording(), []) is None

    def test_recording_without_created_time(self, make_recording, make_event):
        recording = make_recording(name="Weekly Sync - Recording", created_time=None)

        assert match_recording(recording, [make_event()]) is None

    def test_event_without_start(self, make_recording, make_event):
        recording = make_recording(name="Weekly Sync - Recording", created_time=T)

        assert match_recording(recording, [make_event(start=None)]) is None


class TestLexicalHelpers:
    def test_significant_tokens(self):
        assert significant_tokens("The Q1 planning sync") == ["planning", "sync"]

    def test_has_lexical_support_is_case_insensitive(self, make_event):
        assert has_lexical_support(make_event(title="PLANNING"), "quarterly planning.mp4")
