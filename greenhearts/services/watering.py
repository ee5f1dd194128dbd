"""
Watering actions.

The only code that writes a plant's `last_watered` / `next_watering_date`.
Both dates are always written together so the stored due date stays equal
to last watering + frequency.

Store failures are not swallowed here: PlantStoreError propagates to the
route, which answers with a retry message.
"""

from __future__ import annotations
from datetime import date
from typing import Any, Dict, List, Optional

from . import schedule
from . import supabase_client
from .supabase_client import PlantStoreError
from ..constants import DEFAULT_WATERING_FREQUENCY_DAYS, MAX_WATERING_FREQUENCY_DAYS

__all__ = [
    "PlantStoreError",
    "water_plant",
    "update_watering_frequency",
    "select_due_plants",
    "get_due_plants",
]


def _require_plant(plant_id: str, user_id: str) -> Dict[str, Any]:
    plant = supabase_client.get_plant_by_id(plant_id, user_id)
    if not plant:
        raise LookupError(f"Plant {plant_id} not found")
    return plant


def water_plant(plant_id: str, user_id: str, when: Optional[date] = None) -> Dict[str, Any]:
    """
    Record a watering and move the next due date forward.

    Args:
        plant_id: Plant UUID
        user_id: Owner UUID
        when: Day the plant was watered (defaults to today)

    Returns:
        Updated plant dict

    Raises:
        LookupError: Plant missing or not owned by the user
        PlantStoreError: The write failed
    """
    plant = _require_plant(plant_id, user_id)
    watered_on = when or date.today()
    frequency = schedule.clamp_frequency(plant.get("watering_frequency_days") or DEFAULT_WATERING_FREQUENCY_DAYS)

    fields = {
        "last_watered": watered_on.isoformat(),
        "next_watering_date": schedule.next_watering_date(watered_on, frequency).isoformat(),
    }
    return supabase_client.update_watering_fields(plant_id, user_id, fields)


def update_watering_frequency(plant_id: str, user_id: str, frequency_days: int) -> Dict[str, Any]:
    """
    Change how often a plant is watered.

    The due date is recomputed from the existing last watering; a plant that
    was never watered keeps no due date.

    Raises:
        ValueError: Frequency outside 1..365 days
        LookupError: Plant missing or not owned by the user
        PlantStoreError: The write failed
    """
    if not isinstance(frequency_days, int) or isinstance(frequency_days, bool):
        raise ValueError("frequency_days must be an integer")
    if frequency_days < schedule.MIN_FREQUENCY_DAYS or frequency_days > MAX_WATERING_FREQUENCY_DAYS:
        raise ValueError(f"frequency_days must be between {schedule.MIN_FREQUENCY_DAYS} and {MAX_WATERING_FREQUENCY_DAYS}")

    plant = _require_plant(plant_id, user_id)
    next_due = schedule.next_watering_date(plant.get("last_watered"), frequency_days)

    fields = {
        "watering_frequency_days": frequency_days,
        "next_watering_date": next_due.isoformat() if next_due else None,
    }
    return supabase_client.update_watering_fields(plant_id, user_id, fields)


def select_due_plants(
    plants: List[Dict[str, Any]],
    owner_name: Optional[str],
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """Due/overdue plants, most overdue first, each tagged with `owner_display_name`."""
    due = [p for p in plants if schedule.needs_water(p, today)]
    due.sort(key=lambda p: (-schedule.days_overdue(p, today), (p.get("name") or "").casefold(), str(p.get("id"))))
    return [dict(p, owner_display_name=owner_name) for p in due]


def get_due_plants(user_id: str, today: Optional[date] = None, use_cache: bool = True) -> List[Dict[str, Any]]:
    """
    Plants that need water today (due today or overdue), most overdue first.

    Each plant carries `owner_display_name` from the user's profile so the
    reminder cache can address the owner by name.
    """
    plants = supabase_client.get_user_plants(user_id, use_cache=use_cache)
    if not any(schedule.needs_water(p, today) for p in plants):
        return []

    return select_due_plants(plants, supabase_client.get_owner_display_name(user_id), today)
