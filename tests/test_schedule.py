"""Tests for the watering schedule calculator."""

from datetime import date, datetime, timedelta, timezone

import pytest

from greenhearts.services import schedule
from conftest import TODAY, make_plant


class TestToCalendarDay:
    def test_accepts_date(self):
        assert schedule.to_calendar_day(date(2025, 3, 14)) == date(2025, 3, 14)

    def test_drops_time_of_day_from_datetime(self):
        assert schedule.to_calendar_day(datetime(2025, 3, 14, 23, 59)) == date(2025, 3, 14)

    @pytest.mark.parametrize("value", [
        "2025-03-14",
        "2025-03-14T08:30:00Z",
        "2025-03-14T08:30:00+02:00",
        "2025-03-14 21:15:00",
        "2025-03-14T08:30:00.123456789Z",
    ])
    def test_parses_iso_strings(self, value):
        assert schedule.to_calendar_day(value) == date(2025, 3, 14)

    @pytest.mark.parametrize("value", [None, "", "not a date", "2025-13-40", 42, []])
    def test_malformed_values_are_none(self, value):
        assert schedule.to_calendar_day(value) is None


class TestDueStatus:
    def test_future_due_date_is_neither_overdue_nor_due_today(self):
        plant = make_plant(due_in=3)
        assert schedule.days_overdue(plant, TODAY) == 0
        assert schedule.is_due_today(plant, TODAY) is False
        assert schedule.days_until_due(plant, TODAY) == 3

    def test_due_today(self):
        plant = make_plant(due_in=0)
        assert schedule.is_due_today(plant, TODAY) is True
        assert schedule.days_overdue(plant, TODAY) == 0
        assert schedule.days_until_due(plant, TODAY) == 0

    def test_past_due_counts_whole_days(self):
        plant = make_plant(due_in=-4)
        assert schedule.days_overdue(plant, TODAY) == 4
        assert schedule.is_due_today(plant, TODAY) is False
        assert schedule.days_until_due(plant, TODAY) == 0

    def test_time_of_day_is_ignored(self):
        plant = {"next_watering_date": datetime(2025, 3, 12, 23, 0, tzinfo=timezone.utc).isoformat()}
        assert schedule.is_due_today(plant, TODAY) is True

    def test_missing_or_malformed_date_is_not_due(self):
        for plant in ({}, {"next_watering_date": None}, {"next_watering_date": "soon"}):
            assert schedule.days_overdue(plant, TODAY) == 0
            assert schedule.is_due_today(plant, TODAY) is False
            assert schedule.days_until_due(plant, TODAY) is None

    def test_due_today_and_overdue_are_mutually_exclusive(self):
        for offset in range(-10, 11):
            plant = make_plant(due_in=offset)
            assert not (schedule.is_due_today(plant, TODAY) and schedule.days_overdue(plant, TODAY) > 0)


class TestStatusText:
    @pytest.mark.parametrize("due_in,expected", [
        (None, "No watering schedule"),
        (0, "Water today"),
        (-1, "1 day overdue"),
        (-5, "5 days overdue"),
        (1, "Water tomorrow"),
        (6, "6 days to water"),
    ])
    def test_branches(self, due_in, expected):
        assert schedule.status_text(make_plant(due_in=due_in), TODAY) == expected

    def test_watered_ten_days_ago_weekly_is_three_days_overdue(self):
        last = TODAY - timedelta(days=10)
        plant = {"last_watered": last.isoformat(), "next_watering_date": schedule.next_watering_date(last, 7)}
        assert schedule.days_overdue(plant, TODAY) == 3
        assert schedule.status_text(plant, TODAY) == "3 days overdue"


class TestUrgencyBand:
    def test_bands(self):
        assert schedule.urgency_band(make_plant(due_in=0), TODAY) == schedule.BAND_DUE_TODAY
        assert schedule.urgency_band(make_plant(due_in=-2), TODAY) == schedule.BAND_OVERDUE
        assert schedule.urgency_band(make_plant(due_in=2), TODAY) == schedule.BAND_UPCOMING
        assert schedule.urgency_band(make_plant(due_in=None), TODAY) == schedule.BAND_UPCOMING

    def test_needs_water(self):
        assert schedule.needs_water(make_plant(due_in=0), TODAY)
        assert schedule.needs_water(make_plant(due_in=-1), TODAY)
        assert not schedule.needs_water(make_plant(due_in=1), TODAY)
        assert not schedule.needs_water(make_plant(due_in=None), TODAY)


class TestNextWateringDate:
    def test_adds_frequency(self):
        assert schedule.next_watering_date("2025-03-01", 7) == date(2025, 3, 8)

    def test_never_watered_has_no_due_date(self):
        assert schedule.next_watering_date(None, 7) is None

    @pytest.mark.parametrize("frequency", [0, -3, None, "abc"])
    def test_invalid_frequency_clamps_to_one_day(self, frequency):
        assert schedule.next_watering_date("2025-03-01", frequency) == date(2025, 3, 2)


def test_annotate_adds_status_without_mutating_input():
    plant = make_plant(due_in=-2)
    annotated = schedule.annotate(plant, TODAY)

    assert annotated["days_overdue"] == 2
    assert annotated["is_due_today"] is False
    assert annotated["days_until_due"] == 0
    assert annotated["status_text"] == "2 days overdue"
    assert "status_text" not in plant
