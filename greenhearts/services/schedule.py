"""
Watering schedule calculator.

Pure helpers that turn a plant's stored watering dates into display-ready
status: days overdue, due-today checks, days until the next watering and the
short status line shown on plant cards.

All comparisons happen on calendar days. Stored values may be `date`,
`datetime` or ISO strings (Supabase returns strings); time-of-day is dropped
before comparing so a plant watered at 9pm is not "due" a few hours early.

Nothing here raises: a missing or unparseable date falls into the
"No watering schedule" branch.
"""

from __future__ import annotations
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional

# Urgency bands (also used to pick fallback reminder templates)
BAND_DUE_TODAY = "due_today"
BAND_OVERDUE = "overdue"
BAND_UPCOMING = "upcoming"

STATUS_NO_SCHEDULE = "No watering schedule"
STATUS_WATER_TODAY = "Water today"
STATUS_WATER_TOMORROW = "Water tomorrow"

MIN_FREQUENCY_DAYS = 1


def to_calendar_day(value: Any) -> Optional[date]:
    """
    Normalize a stored date value to a calendar day.

    Accepts date, datetime (naive or aware) and ISO 8601 strings such as
    "2025-03-14", "2025-03-14T08:30:00Z" or "2025-03-14 08:30:00+02:00".
    Returns None for empty or malformed values.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, str):
        s = value.strip()
        try:
            return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
        except ValueError:
            pass
        # Bare date prefix, e.g. "2025-03-14T08:30:00.123456789Z" from other clients
        try:
            return date.fromisoformat(s[:10])
        except ValueError:
            return None

    return None


def _today(today: Optional[date]) -> date:
    if today is None:
        return date.today()
    return to_calendar_day(today) or date.today()


def get_due_date(plant: Dict[str, Any]) -> Optional[date]:
    """Return the plant's next watering day, or None when it has no schedule."""
    if not plant:
        return None
    return to_calendar_day(plant.get("next_watering_date"))


def days_overdue(plant: Dict[str, Any], today: Optional[date] = None) -> int:
    """
    Number of whole days the plant is past its due date.

    Returns 0 when there is no due date or when the plant is due today or
    later. Never negative.
    """
    due = get_due_date(plant)
    if due is None:
        return 0

    current = _today(today)
    if due >= current:
        return 0

    return max((current - due).days, 0)


def is_due_today(plant: Dict[str, Any], today: Optional[date] = None) -> bool:
    """True only when the due day is today (overdue plants are not 'due today')."""
    due = get_due_date(plant)
    if due is None:
        return False
    return due == _today(today)


def days_until_due(plant: Dict[str, Any], today: Optional[date] = None) -> Optional[int]:
    """Days until the next watering (0 when due today or overdue), None without a schedule."""
    due = get_due_date(plant)
    if due is None:
        return None
    return max((due - _today(today)).days, 0)


def status_text(plant: Dict[str, Any], today: Optional[date] = None) -> str:
    """
    Short watering status for a plant card.

    Branches are checked in order: no date, due today, overdue, future.

    Examples:
        >>> status_text({"next_watering_date": None})
        'No watering schedule'
        >>> status_text({"next_watering_date": "2025-03-11"}, today=date(2025, 3, 14))
        '3 days overdue'
    """
    due = get_due_date(plant)
    if due is None:
        return STATUS_NO_SCHEDULE

    current = _today(today)
    if due == current:
        return STATUS_WATER_TODAY

    overdue = days_overdue(plant, current)
    if overdue > 0:
        return "1 day overdue" if overdue == 1 else f"{overdue} days overdue"

    days_left = max((due - current).days, 1)
    return STATUS_WATER_TOMORROW if days_left == 1 else f"{days_left} days to water"


def urgency_band(plant: Dict[str, Any], today: Optional[date] = None) -> str:
    """Classify the plant as due_today, overdue or upcoming (no schedule counts as upcoming)."""
    if is_due_today(plant, today):
        return BAND_DUE_TODAY
    if days_overdue(plant, today) > 0:
        return BAND_OVERDUE
    return BAND_UPCOMING


def needs_water(plant: Dict[str, Any], today: Optional[date] = None) -> bool:
    """Due today or overdue."""
    return urgency_band(plant, today) != BAND_UPCOMING


def clamp_frequency(frequency_days: Any) -> int:
    """Coerce a stored watering frequency to a valid whole number of days (>= 1)."""
    try:
        days = int(frequency_days)
    except (TypeError, ValueError):
        return MIN_FREQUENCY_DAYS
    return max(days, MIN_FREQUENCY_DAYS)


def next_watering_date(last_watered: Any, frequency_days: Any) -> Optional[date]:
    """
    Compute the next due day from the last watering and the frequency.

    Returns None when the plant has never been watered.
    """
    last = to_calendar_day(last_watered)
    if last is None:
        return None
    return last + timedelta(days=clamp_frequency(frequency_days))


def annotate(plant: Dict[str, Any], today: Optional[date] = None) -> Dict[str, Any]:
    """Return a copy of the plant with computed schedule fields for rendering."""
    current = _today(today)
    annotated = dict(plant)
    annotated["days_overdue"] = days_overdue(plant, current)
    annotated["is_due_today"] = is_due_today(plant, current)
    annotated["days_until_due"] = days_until_due(plant, current)
    annotated["status_text"] = status_text(plant, current)
    return annotated
