"""Tests for the plant organizer views."""

from datetime import datetime

import pytest

from greenhearts.services import organizer
from conftest import TODAY, make_plant


def _titles(groups):
    return [g["title"] for g in groups]


def _names(group):
    return [p["name"] for p in group["plants"]]


def _ids(groups):
    return sorted(p["id"] for g in groups for p in g["plants"])


@pytest.fixture
def collection():
    return [
        make_plant("a", "Monstera", due_in=-5, location="Living Room", health="good"),
        make_plant("b", "basil", due_in=-1, location="Kitchen", health="poor"),
        make_plant("c", "Aloe", due_in=0, location="Patio", health="excellent"),
        make_plant("d", "Cactus", due_in=1, location="", health=None),
        make_plant("e", "Daisy", due_in=4, location="Front Yard Garden", health="fair"),
        make_plant("f", "Zamioculcas", due_in=20, location=None, health="unknown"),
        make_plant("g", "Ivy", due_in=None, location="Kitchen", health="Good"),
    ]


@pytest.mark.parametrize("view", organizer.VIEWS)
def test_every_view_partitions_the_input(collection, view):
    groups = organizer.organize(collection, view, TODAY)
    assert _ids(groups) == sorted(p["id"] for p in collection)
    assert all(g["plants"] for g in groups)


@pytest.mark.parametrize("view", organizer.VIEWS)
def test_empty_collection_has_no_groups(view):
    assert organizer.organize([], view, TODAY) == []
    assert organizer.organize(None, view, TODAY) == []


def test_unknown_view_raises():
    with pytest.raises(ValueError):
        organizer.organize([make_plant()], "by_color")


class TestByLocation:
    def test_kitchen_before_patio(self):
        groups = organizer.organize(
            [make_plant("1", "Rose", location="Patio"), make_plant("2", "Mint", location="Kitchen")],
            organizer.VIEW_LOCATION,
        )
        assert _titles(groups) == ["Kitchen", "Patio"]

    def test_indoor_then_outdoor_then_unassigned(self, collection):
        groups = organizer.organize(collection, organizer.VIEW_LOCATION)
        assert _titles(groups) == ["Kitchen", "Living Room", "Front Yard Garden", "Patio", "Unassigned"]
        assert _names(groups[-1]) == ["Cactus", "Zamioculcas"]

    def test_plants_sorted_case_insensitively(self, collection):
        groups = organizer.organize(collection, organizer.VIEW_LOCATION)
        assert _names(groups[0]) == ["basil", "Ivy"]

    @pytest.mark.parametrize("label", ["Back Yard", "sunny BALCONY", " porch ", "Rooftop garden"])
    def test_outdoor_vocabulary(self, label):
        assert organizer.is_outdoor_location(label)

    def test_indoor_labels(self):
        assert not organizer.is_outdoor_location("Bedroom")
        assert not organizer.is_outdoor_location(None)


def test_alphabetical_single_group(collection):
    groups = organizer.organize(collection, organizer.VIEW_ALPHABETICAL)
    assert _titles(groups) == ["All Plants"]
    assert _names(groups[0]) == ["Aloe", "basil", "Cactus", "Daisy", "Ivy", "Monstera", "Zamioculcas"]


def test_name_ties_break_on_id():
    plants = [make_plant("2", "Fern"), make_plant("1", "Fern"), make_plant("3", "fern")]
    groups = organizer.organize(plants, organizer.VIEW_ALPHABETICAL)
    assert [p["id"] for p in groups[0]["plants"]] == ["1", "2", "3"]


class TestByWateringPriority:
    def test_bucket_order(self, collection):
        groups = organizer.organize(collection, organizer.VIEW_WATERING_PRIORITY, TODAY)
        # TODAY is a Wednesday: due_in=4 is Sunday, due_in=20 is April 1
        assert _titles(groups) == [
            "Overdue", "Water Today", "Water Tomorrow", "Sunday", "Apr 1", "No Watering Schedule",
        ]

    def test_most_overdue_first(self):
        plants = [
            make_plant("1", "Aster", due_in=-1),
            make_plant("2", "Begonia", due_in=-7),
            make_plant("3", "Canna", due_in=-3),
            make_plant("4", "Abelia", due_in=-3),
        ]
        overdue = organizer.organize(plants, organizer.VIEW_WATERING_PRIORITY, TODAY)[0]
        assert overdue["title"] == "Overdue"
        assert _names(overdue) == ["Begonia", "Abelia", "Canna", "Aster"]

    def test_weekday_buckets_run_sunday_to_saturday(self):
        # due_in 2..7 from a Wednesday: Fri, Sat, Sun, Mon, Tue, Wed
        plants = [make_plant(str(i), f"Plant {i}", due_in=i) for i in range(2, 8)]
        groups = organizer.organize(plants, organizer.VIEW_WATERING_PRIORITY, TODAY)
        assert _titles(groups) == ["Sunday", "Monday", "Tuesday", "Wednesday", "Friday", "Saturday"]

    def test_far_dates_are_chronological_with_year_when_different(self):
        plants = [
            make_plant("1", "Later", due_in=300),
            make_plant("2", "Sooner", due_in=8),
        ]
        groups = organizer.organize(plants, organizer.VIEW_WATERING_PRIORITY, TODAY)
        assert _titles(groups) == ["Mar 20", "Jan 6, 2026"]

    def test_no_due_date_goes_to_no_schedule_bucket(self):
        groups = organizer.organize([make_plant(due_in=None)], organizer.VIEW_WATERING_PRIORITY, TODAY)
        assert _titles(groups) == ["No Watering Schedule"]


def test_by_health(collection):
    groups = organizer.organize(collection, organizer.VIEW_HEALTH)
    assert _titles(groups) == ["Poor", "Fair", "Good", "Excellent", "Health Not Set"]
    assert _names(groups[2]) == ["Ivy", "Monstera"]
    assert _names(groups[-1]) == ["Cactus", "Zamioculcas"]


def test_group_counts(collection):
    groups = organizer.organize(collection, organizer.VIEW_HEALTH)
    assert organizer.group_counts(groups) == {
        "Poor": 1, "Fair": 1, "Good": 2, "Excellent": 1, "Health Not Set": 2,
    }


def test_watering_priority_accepts_datetime_today():
    plants = [make_plant("1", "Aster", due_in=-1), make_plant("2", "Begonia", due_in=0)]
    now = datetime(TODAY.year, TODAY.month, TODAY.day, 9, 30)
    groups = organizer.organize(plants, organizer.VIEW_WATERING_PRIORITY, now)
    assert _titles(groups) == ["Overdue", "Water Today"]


class TestWateringCalendar:
    def test_days_with_plants_only(self, collection):
        events = organizer.watering_calendar(collection, 14, TODAY)

        # TODAY + 4 is Sunday, March 16; Zamioculcas (due in 20 days) is out of range
        assert [e["title"] for e in events] == ["Today", "Tomorrow", "Sun, Mar 16"]
        assert [e["offset"] for e in events] == [0, 1, 4]
        assert events[2]["date"].isoformat() == "2025-03-16"

    def test_today_includes_overdue_most_overdue_first(self, collection):
        today = organizer.watering_calendar(collection, 1, TODAY)[0]
        assert _names(today) == ["Monstera", "basil", "Aloe"]

    def test_longer_range_reaches_later_plants(self, collection):
        events = organizer.watering_calendar(collection, organizer.MAX_CALENDAR_DAYS, TODAY)
        assert events[-1]["title"] == "Tue, Apr 1"
        assert _names(events[-1]) == ["Zamioculcas"]

    @pytest.mark.parametrize("days", [0, organizer.MAX_CALENDAR_DAYS + 1])
    def test_range_is_bounded(self, collection, days):
        with pytest.raises(ValueError):
            organizer.watering_calendar(collection, days, TODAY)

    def test_plants_due_on_future_day_is_exact(self, collection):
        assert _names({"plants": organizer.plants_due_on(collection, 4, TODAY)}) == ["Daisy"]
        assert organizer.plants_due_on(collection, 2, TODAY) == []

    def test_unscheduled_plants_never_appear(self, collection):
        events = organizer.watering_calendar(collection, organizer.MAX_CALENDAR_DAYS, TODAY)
        assert "Ivy" not in [p["name"] for e in events for p in e["plants"]]
