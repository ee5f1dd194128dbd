"""
Input validation for route parameters and JSON bodies.

Checks IDs before they reach Postgres and coerces the few user-supplied
values the watering endpoints accept (dates, frequencies, view names).
"""

from __future__ import annotations
import re
from datetime import date
from typing import Any, Optional, Tuple

from greenhearts.constants import MAX_WATERING_FREQUENCY_DAYS
from greenhearts.services.schedule import MIN_FREQUENCY_DAYS, to_calendar_day

# UUID validation pattern (RFC 4122 compliant)
_UUID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$',
    re.IGNORECASE
)


def is_valid_uuid(value: str) -> bool:
    """
    Validate UUID format (RFC 4122).

    Args:
        value: String to validate

    Returns:
        True if valid UUID format, False otherwise

    Examples:
        >>> is_valid_uuid("550e8400-e29b-41d4-a716-446655440000")
        True
        >>> is_valid_uuid("not-a-uuid")
        False
    """
    if not value or not isinstance(value, str):
        return False
    return bool(_UUID_PATTERN.match(value))


def validate_frequency_days(value: Any) -> Tuple[Optional[int], Optional[str]]:
    """
    Validate a watering frequency from user input.

    Returns:
        (days, None) on success or (None, error_message)
    """
    if isinstance(value, bool):
        return None, "Watering frequency must be a whole number of days."
    try:
        days = int(value)
    except (TypeError, ValueError):
        return None, "Watering frequency must be a whole number of days."

    if isinstance(value, float) and not value.is_integer():
        return None, "Watering frequency must be a whole number of days."

    if days < MIN_FREQUENCY_DAYS or days > MAX_WATERING_FREQUENCY_DAYS:
        return None, f"Watering frequency must be between {MIN_FREQUENCY_DAYS} and {MAX_WATERING_FREQUENCY_DAYS} days."

    return days, None


def validate_day_count(
    value: Any,
    default: int,
    minimum: int,
    maximum: int,
    label: str = "days",
) -> Tuple[Optional[int], Optional[str]]:
    """
    Validate a whole-number day parameter from a query string.

    Missing or empty values use the default.

    Returns:
        (days, None) on success or (None, error_message)
    """
    if value in (None, ""):
        return default, None

    if isinstance(value, bool):
        return None, f"'{label}' must be a whole number."
    try:
        days = int(value)
    except (TypeError, ValueError):
        return None, f"'{label}' must be a whole number."

    if days < minimum or days > maximum:
        return None, f"'{label}' must be between {minimum} and {maximum}."
    return days, None


def validate_watered_date(value: Any, today: date) -> Tuple[Optional[date], Optional[str]]:
    """
    Validate an optional "watered on" date (defaults to today, no future dates).

    Returns:
        (day, None) on success or (None, error_message)
    """
    if value in (None, ""):
        return today, None

    day = to_calendar_day(value) if isinstance(value, str) else None
    if day is None:
        return None, "Date must be in YYYY-MM-DD format."
    if day > today:
        return None, "Watering date can't be in the future."
    return day, None
