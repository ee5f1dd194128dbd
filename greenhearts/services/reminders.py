"""
Reminder warm-up jobs.

Pre-generates today's reminder messages so the first page view of the day
already has text instead of "pending" placeholders. Used by the daily
scheduler job and the `flask warm-reminders` command.
"""

from __future__ import annotations
import logging
from datetime import date
from typing import Any, Dict, Optional

from . import supabase_client
from .reminder_cache import ReminderCache
from .watering import select_due_plants

logger = logging.getLogger(__name__)


def warm_user_reminders(cache: ReminderCache, user_id: str, today: Optional[date] = None) -> Dict[str, int]:
    """
    Generate today's messages for one user's due plants (admin client, no session).

    Returns:
        ensure_messages_for summary: {"generated": n, "fallback": n, "skipped": n}
    """
    today = today or cache.today()
    plants = supabase_client.get_user_plants_admin(user_id)
    due = select_due_plants(plants, None, today)
    if not due:
        return {"generated": 0, "fallback": 0, "skipped": 0}

    owner_name = supabase_client.get_owner_display_name(user_id, admin=True)
    for plant in due:
        plant["owner_display_name"] = owner_name

    return cache.ensure_messages_for(due)


def batch_warm_all_users_reminders(cache: ReminderCache) -> Dict[str, Any]:
    """
    Daily cron job: warm reminder messages for every user with scheduled plants.

    Returns:
        Dict with stats:
        {
            "total_users": 100,
            "users_processed": 98,
            "generated": 40,
            "fallback": 12,
            "errors": 2
        }
    """
    logger.info("[Reminder Warmup] Starting daily warm-up job")

    stats = {
        "total_users": 0,
        "users_processed": 0,
        "generated": 0,
        "fallback": 0,
        "errors": 0,
    }

    user_ids = supabase_client.get_user_ids_with_plants()
    stats["total_users"] = len(user_ids)
    today = cache.today()

    for user_id in user_ids:
        try:
            summary = warm_user_reminders(cache, user_id, today)
        except Exception as e:
            logger.error(f"[Reminder Warmup] Error processing user {user_id}: {e}")
            stats["errors"] += 1
            continue

        stats["generated"] += summary["generated"]
        stats["fallback"] += summary["fallback"]
        stats["users_processed"] += 1

    logger.info(
        f"[Reminder Warmup] Completed: "
        f"{stats['users_processed']}/{stats['total_users']} users processed, "
        f"{stats['generated']} generated, {stats['fallback']} fallback, "
        f"{stats['errors']} errors"
    )
    return stats
