"""Tests for models module."""

from __future__ import annotations

import dataclasses
from datetime import date, datetime, timedelta, timezone

import pytest

from timesheet_insights.models import (
    CalendarDay,
    RankedUser,
    Screenshot,
    Session,
    SummaryStats,
    User,
    WeekRange,
    _coerce_minutes,
    parse_date,
)


class TestHelperFunctions:
    """Tests for module-level helper functions."""

    def test_coerce_minutes_accepts_int(self) -> None:
        assert _coerce_minutes(45) == 45

    def test_coerce_minutes_accepts_numeric_string(self) -> None:
        assert _coerce_minutes("45") == 45

    def test_coerce_minutes_truncates_float(self) -> None:
        assert _coerce_minutes(44.9) == 44

    def test_coerce_minutes_negative_becomes_zero(self) -> None:
        assert _coerce_minutes(-3) == 0

    def test_coerce_minutes_garbage_becomes_zero(self) -> None:
        """None, text and booleans all collapse to 0."""
        for value in (None, "abc", True, [], {}):
            assert _coerce_minutes(value) == 0

    def test_parse_date_from_string(self) -> None:
        assert parse_date("2024-01-10") == date(2024, 1, 10)

    def test_parse_date_drops_time_component(self) -> None:
        """A full timestamp string is truncated to its date part."""
        assert parse_date("2024-01-10T23:59:00Z") == date(2024, 1, 10)

    def test_parse_date_from_datetime(self) -> None:
        assert parse_date(datetime(2024, 1, 10, 9, 0)) == date(2024, 1, 10)

    def test_parse_date_invalid_returns_none(self) -> None:
        assert parse_date("not a date") is None
        assert parse_date("") is None
        assert parse_date(None) is None


class TestSessionFromDict:
    """Tests for Session.from_dict normalization."""

    def test_reads_camel_case_document(self) -> None:
        """from_dict() maps tracking-client keys onto fields."""
        session = Session.from_dict(
            {
                "id": "s1",
                "userId": "u1",
                "userName": "Uma",
                "date": "2024-01-10",
                "clockIn": "2024-01-10T09:00:00Z",
                "clockOut": "2024-01-10T16:30:00Z",
                "totalMinutes": 450,
                "idleMinutes": 50,
                "status": "approved",
                "managerComment": "ok",
                "lessHoursComment": "left early",
                "managerId": "m1",
            }
        )
        assert session.user_id == "u1"
        assert session.user_name == "Uma"
        assert session.date == date(2024, 1, 10)
        assert session.clock_in == datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)
        assert session.clock_out - session.clock_in == timedelta(minutes=450)
        assert (session.total_minutes, session.idle_minutes) == (450, 50)
        assert session.status == "approved"
        assert session.manager_comment == "ok"
        assert session.employee_comment == "left early"
        assert session.manager_id == "m1"

    def test_reads_snake_case_document(self) -> None:
        """from_dict() also accepts snake_case keys."""
        session = Session.from_dict(
            {"id": "s1", "user_id": "u1", "date": "2024-01-10", "total_minutes": 60, "idle_minutes": 5}
        )
        assert session.user_id == "u1"
        assert (session.total_minutes, session.idle_minutes) == (60, 5)

    def test_missing_status_defaults_to_submitted(self) -> None:
        session = Session.from_dict({"id": "s1"})
        assert session.status == "submitted"

    def test_status_falls_back_to_approval_status(self) -> None:
        session = Session.from_dict({"id": "s1", "approvalStatus": "disapproved"})
        assert session.status == "disapproved"

    def test_unknown_status_is_kept_verbatim(self) -> None:
        """Unrecognized statuses are preserved, not rewritten."""
        session = Session.from_dict({"id": "s1", "status": "pending"})
        assert session.status == "pending"

    def test_bad_minutes_become_zero(self) -> None:
        session = Session.from_dict({"id": "s1", "totalMinutes": None, "idleMinutes": -10})
        assert session.total_minutes == 0
        assert session.idle_minutes == 0

    def test_idle_above_total_is_kept_for_consumers_to_clamp(self) -> None:
        """from_dict() does not clamp idle to total; the aggregator does."""
        session = Session.from_dict({"id": "s1", "totalMinutes": 60, "idleMinutes": 90})
        assert session.idle_minutes == 90

    def test_unparseable_timestamps_become_none(self) -> None:
        session = Session.from_dict({"id": "s1", "clockIn": "yesterday", "clockOut": ""})
        assert session.clock_in is None
        assert session.is_open is True

    def test_screenshots_are_parsed(self) -> None:
        session = Session.from_dict(
            {
                "id": "s1",
                "screenshots": [
                    {"id": "a", "timestamp": "2024-01-10T10:00:00Z", "image": "data:..."},
                    "not-a-dict",
                ],
            }
        )
        assert len(session.screenshots) == 1
        assert isinstance(session.screenshots[0], Screenshot)
        assert session.screenshots[0].id == "a"

    def test_missing_id_raises_key_error(self) -> None:
        with pytest.raises(KeyError):
            Session.from_dict({"userId": "u1"})

    def test_session_is_frozen(self) -> None:
        session = Session.from_dict({"id": "s1"})
        with pytest.raises(dataclasses.FrozenInstanceError):
            session.status = "approved"  # type: ignore[misc]


class TestSessionSerialization:
    """Tests for Session.to_dict and helpers."""

    def test_to_dict_uses_document_shape(self) -> None:
        session = Session(
            id="s1",
            user_id="u1",
            date=date(2024, 1, 10),
            total_minutes=450,
            idle_minutes=50,
            clock_in=datetime(2024, 1, 10, 9, 0),
        )
        data = session.to_dict()
        assert data["userId"] == "u1"
        assert data["date"] == "2024-01-10"
        assert data["totalMinutes"] == 450
        assert data["clockIn"] == "2024-01-10T09:00:00"
        assert data["clockOut"] is None
        assert data["status"] == "submitted"

    def test_date_key_empty_without_date(self) -> None:
        assert Session(id="s1", user_id="u1", date=None).date_key == ""


class TestUser:
    """Tests for User dataclass."""

    def test_from_dict_prefers_full_name(self) -> None:
        user = User.from_dict({"id": "u1", "fullName": "Uma", "displayName": "U", "email": "u@x"})
        assert user.display_name == "Uma"

    def test_from_dict_falls_back_to_email(self) -> None:
        user = User.from_dict({"id": "u1", "email": "uma@example.com"})
        assert user.display_name == "uma@example.com"

    def test_from_dict_defaults(self) -> None:
        """Missing role means employee; missing isActive means active."""
        user = User.from_dict({"id": "u1"})
        assert user.role == "employee"
        assert user.is_active is True
        assert user.manager_id is None

    def test_only_explicit_false_revokes(self) -> None:
        assert User.from_dict({"id": "u1", "isActive": False}).is_active is False
        assert User.from_dict({"id": "u1", "isActive": None}).is_active is True

    def test_to_dict_round_trips_through_from_dict(self) -> None:
        user = User(id="u1", display_name="Uma", role="manager", manager_id="a1")
        assert User.from_dict(user.to_dict()) == user


class TestDerivedRecords:
    """Tests for derived record helpers."""

    def test_week_range_contains_is_inclusive(self) -> None:
        week = WeekRange(start=date(2024, 1, 7), end=date(2024, 1, 13))
        assert week.contains(date(2024, 1, 7))
        assert week.contains(date(2024, 1, 13))
        assert not week.contains(date(2024, 1, 14))

    def test_summary_stats_default_to_zero(self) -> None:
        stats = SummaryStats()
        assert stats.total_sessions == 0
        assert stats.productivity_rate == 0
        assert stats.average_session_minutes == 0.0

    def test_ranked_user_total_hours(self) -> None:
        row = RankedUser(
            rank=1,
            user=User(id="u1", display_name="Uma"),
            summary=SummaryStats(total_sessions=2, total_minutes=90, productivity_rate=80),
        )
        assert row.total_hours == 1.5
        assert row.productivity_rate == 80
        assert row.to_dict()["total_hours"] == 1.5

    def test_calendar_day_to_dict_lists_session_ids(self) -> None:
        day = CalendarDay(
            date=date(2024, 1, 10),
            is_current_period=True,
            is_today=False,
            sessions=(Session(id="s1", user_id="u1", date=date(2024, 1, 10)),),
            total_minutes=0,
        )
        assert day.to_dict()["session_ids"] == ["s1"]
