"""
Plant organizer for the dashboard views.

Splits a user's plant collection into titled groups for one of four views:

- location:           indoor rooms, then outdoor spaces, then "Unassigned"
- alphabetical:       a single "All Plants" group
- watering_priority:  Overdue, Water Today, Water Tomorrow, weekdays, later dates,
                      then "No Watering Schedule"
- health:             Poor, Fair, Good, Excellent, then "Health Not Set"

Every group is {"title": str, "plants": [plant, ...]}. Groups are rebuilt on
each call and every plant lands in exactly one group. Ordering never depends
on the order plants came back from the database: plants sort by name
(case-insensitive, then exact name, then id).

The watering calendar (watering_calendar / plants_due_on) lists the plants to
water on each of the coming days, with overdue plants folded into today.
"""

from __future__ import annotations
from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from . import schedule
from ..constants import HEALTH_ORDER, OUTDOOR_LOCATION_KEYWORDS

VIEW_LOCATION = "location"
VIEW_ALPHABETICAL = "alphabetical"
VIEW_WATERING_PRIORITY = "watering_priority"
VIEW_HEALTH = "health"

VIEWS = (VIEW_LOCATION, VIEW_ALPHABETICAL, VIEW_WATERING_PRIORITY, VIEW_HEALTH)

VIEW_LABELS = {
    VIEW_LOCATION: "By location",
    VIEW_ALPHABETICAL: "A-Z",
    VIEW_WATERING_PRIORITY: "Watering priority",
    VIEW_HEALTH: "By health",
}

GROUP_UNASSIGNED = "Unassigned"
GROUP_ALL_PLANTS = "All Plants"
GROUP_OVERDUE = "Overdue"
GROUP_WATER_TODAY = "Water Today"
GROUP_WATER_TOMORROW = "Water Tomorrow"
GROUP_NO_SCHEDULE = "No Watering Schedule"
GROUP_HEALTH_NOT_SET = "Health Not Set"

# Python's weekday(): Monday=0 ... Sunday=6. Display order is Sunday -> Saturday.
_WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_WEEKDAY_DISPLAY_ORDER = (6, 0, 1, 2, 3, 4, 5)

# Due dates within this many days (after tomorrow) get a weekday bucket
_WEEK_WINDOW_DAYS = 7


def _name_key(plant: Dict[str, Any]) -> Tuple[str, str, str]:
    name = plant.get("name") or ""
    return (name.casefold(), name, str(plant.get("id") or ""))


def _sorted_by_name(plants: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(plants, key=_name_key)


def _label_key(label: str) -> Tuple[str, str]:
    return (label.casefold(), label)


def _group(title: str, plants: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    return {"title": title, "plants": list(plants)}


def is_outdoor_location(location: Optional[str]) -> bool:
    """True when a location label names an outdoor space (patio, garden, porch, ...)."""
    if not location:
        return False
    label = location.strip().lower()
    return any(keyword in label for keyword in OUTDOOR_LOCATION_KEYWORDS)


def _clean_location(plant: Dict[str, Any]) -> Optional[str]:
    location = plant.get("location")
    if not isinstance(location, str) or not location.strip():
        return None
    return location


def organize_by_location(plants: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Indoor location groups, then outdoor location groups, then Unassigned."""
    indoor: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    outdoor: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    unassigned: List[Dict[str, Any]] = []

    for plant in plants:
        location = _clean_location(plant)
        if location is None:
            unassigned.append(plant)
        elif is_outdoor_location(location):
            outdoor[location].append(plant)
        else:
            indoor[location].append(plant)

    groups = []
    for side in (indoor, outdoor):
        for location in sorted(side, key=_label_key):
            groups.append(_group(location, _sorted_by_name(side[location])))

    if unassigned:
        groups.append(_group(GROUP_UNASSIGNED, _sorted_by_name(unassigned)))

    return groups


def organize_alphabetically(plants: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Single "All Plants" group sorted by name."""
    if not plants:
        return []
    return [_group(GROUP_ALL_PLANTS, _sorted_by_name(plants))]


def _month_day_title(due: date, today: date) -> str:
    """Format a far-off due date as 'Nov 3' (with the year when it differs from today's)."""
    title = f"{due.strftime('%b')} {due.day}"
    if due.year != today.year:
        title = f"{title}, {due.year}"
    return title


def organize_by_watering_priority(
    plants: List[Dict[str, Any]],
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """
    Bucket plants by when they next need water.

    Order: Overdue (most overdue first), Water Today, Water Tomorrow, one
    bucket per weekday for the rest of the coming week (Sunday -> Saturday),
    later dates in chronological order, then plants without a schedule.
    """
    current = schedule.to_calendar_day(today) or date.today()
    tomorrow = current + timedelta(days=1)
    week_end = current + timedelta(days=_WEEK_WINDOW_DAYS)

    overdue: List[Tuple[date, Dict[str, Any]]] = []
    due_today: List[Dict[str, Any]] = []
    due_tomorrow: List[Dict[str, Any]] = []
    by_weekday: Dict[int, List[Dict[str, Any]]] = defaultdict(list)
    by_date: Dict[date, List[Dict[str, Any]]] = defaultdict(list)
    unscheduled: List[Dict[str, Any]] = []

    for plant in plants:
        due = schedule.get_due_date(plant)
        if due is None:
            unscheduled.append(plant)
        elif due < current:
            overdue.append((due, plant))
        elif due == current:
            due_today.append(plant)
        elif due == tomorrow:
            due_tomorrow.append(plant)
        elif due <= week_end:
            by_weekday[due.weekday()].append(plant)
        else:
            by_date[due].append(plant)

    groups = []
    if overdue:
        overdue.sort(key=lambda item: (item[0], _name_key(item[1])))
        groups.append(_group(GROUP_OVERDUE, (plant for _, plant in overdue)))
    if due_today:
        groups.append(_group(GROUP_WATER_TODAY, _sorted_by_name(due_today)))
    if due_tomorrow:
        groups.append(_group(GROUP_WATER_TOMORROW, _sorted_by_name(due_tomorrow)))

    for weekday in _WEEKDAY_DISPLAY_ORDER:
        if by_weekday.get(weekday):
            groups.append(_group(_WEEKDAY_NAMES[weekday], _sorted_by_name(by_weekday[weekday])))

    for due in sorted(by_date):
        groups.append(_group(_month_day_title(due, current), _sorted_by_name(by_date[due])))

    if unscheduled:
        groups.append(_group(GROUP_NO_SCHEDULE, _sorted_by_name(unscheduled)))

    return groups


def organize_by_health(plants: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Health groups from worst to best, then plants without a health rating."""
    by_health: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    not_set: List[Dict[str, Any]] = []

    for plant in plants:
        health = plant.get("health")
        health = health.strip().lower() if isinstance(health, str) else None
        if health in HEALTH_ORDER:
            by_health[health].append(plant)
        else:
            not_set.append(plant)

    groups = [
        _group(health.capitalize(), _sorted_by_name(by_health[health]))
        for health in HEALTH_ORDER
        if by_health.get(health)
    ]
    if not_set:
        groups.append(_group(GROUP_HEALTH_NOT_SET, _sorted_by_name(not_set)))

    return groups


def organize(
    plants: Optional[Iterable[Dict[str, Any]]],
    view: str,
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """
    Organize plants into display groups for the given view.

    Args:
        plants: Plant dicts (as returned by the plant store)
        view: One of VIEWS
        today: Override the current day (watering_priority view only)

    Returns:
        Ordered list of {"title", "plants"} groups; empty list for no plants

    Raises:
        ValueError: Unknown view name
    """
    if view not in VIEWS:
        raise ValueError(f"Unknown organizer view: {view!r}")

    plant_list = list(plants or [])
    if not plant_list:
        return []

    if view == VIEW_LOCATION:
        return organize_by_location(plant_list)
    if view == VIEW_ALPHABETICAL:
        return organize_alphabetically(plant_list)
    if view == VIEW_WATERING_PRIORITY:
        return organize_by_watering_priority(plant_list, today)
    return organize_by_health(plant_list)


def group_counts(groups: List[Dict[str, Any]]) -> Dict[str, int]:
    """Map each group title to its plant count (for summary badges)."""
    return {group["title"]: len(group["plants"]) for group in groups}


# ----------------------------------------------------------------------
# Upcoming watering calendar
# ----------------------------------------------------------------------

DEFAULT_CALENDAR_DAYS = 14
MAX_CALENDAR_DAYS = 31

CALENDAR_TODAY = "Today"
CALENDAR_TOMORROW = "Tomorrow"


def _calendar_title(day: date, today: date) -> str:
    """'Today', 'Tomorrow', otherwise a short date such as 'Fri, Mar 14'."""
    offset = (day - today).days
    if offset == 0:
        return CALENDAR_TODAY
    if offset == 1:
        return CALENDAR_TOMORROW
    return f"{day.strftime('%a')}, {day.strftime('%b')} {day.day}"


def plants_due_on(
    plants: Optional[Iterable[Dict[str, Any]]],
    offset: int,
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """
    Plants to water `offset` days from today.

    Day 0 also picks up overdue plants (they still need water today); later
    days only match plants whose due date is exactly that day. Plants sort by
    due date (most overdue first), then by name.
    """
    current = schedule.to_calendar_day(today) or date.today()
    target = current + timedelta(days=offset)

    matched = []
    for plant in plants or []:
        due = schedule.get_due_date(plant)
        if due is None:
            continue
        if due == target or (offset == 0 and due < current):
            matched.append((due, plant))

    matched.sort(key=lambda item: (item[0], _name_key(item[1])))
    return [plant for _, plant in matched]


def watering_calendar(
    plants: Optional[Iterable[Dict[str, Any]]],
    days: int = DEFAULT_CALENDAR_DAYS,
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """
    Day-by-day watering events for the next `days` days (today included).

    Days without plants are left out. Each event is
    {"date": date, "offset": int, "title": str, "plants": [plant, ...]}.

    Raises:
        ValueError: days outside 1..MAX_CALENDAR_DAYS
    """
    if days < 1 or days > MAX_CALENDAR_DAYS:
        raise ValueError(f"Calendar length must be between 1 and {MAX_CALENDAR_DAYS} days")

    current = schedule.to_calendar_day(today) or date.today()
    plant_list = list(plants or [])

    events = []
    for offset in range(days):
        due_plants = plants_due_on(plant_list, offset, current)
        if not due_plants:
            continue
        day = current + timedelta(days=offset)
        events.append({
            "date": day,
            "offset": offset,
            "title": _calendar_title(day, current),
            "plants": due_plants,
        })
    return events
