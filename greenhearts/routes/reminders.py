"""
Watering reminder routes.

Plants that need water today, each with a message written in its voice.
Messages are produced at most once per plant per day; the first request of
the day gets "pending" results while a background batch fills them in.

`GET /reminders/?day=N` previews the plants due N days ahead (up to a week);
those have no message yet and are reported as "upcoming".
"""

from __future__ import annotations
from datetime import timedelta
from flask import Blueprint, current_app, jsonify, request
from ..extensions import limiter
from ..services import organizer, schedule, supabase_client
from ..services.reminder_cache import get_reminder_cache
from ..services.watering import get_due_plants
from ..utils.auth import enforce_ajax_for_mutations, get_current_user_id, require_auth
from ..utils.errors import json_error
from ..utils.validation import validate_day_count

reminders_bp = Blueprint("reminders", __name__, url_prefix="/reminders")
reminders_bp.before_request(enforce_ajax_for_mutations)

# Day selector on the reminders page: today plus the next six days
MAX_REMINDER_DAY_OFFSET = 6

STATUS_UPCOMING = "upcoming"


def _reminder_payload(cache, plants, today):
    items = []
    for plant in plants:
        result = cache.get_result(plant)
        items.append({
            "plant": schedule.annotate(plant, today),
            "status": result["status"],
            "message": result["message"],
        })
    return items


def _upcoming_payload(plants, today):
    return [
        {"plant": schedule.annotate(plant, today), "status": STATUS_UPCOMING, "message": None}
        for plant in plants
    ]


@reminders_bp.route("/", methods=["GET"])
@require_auth
def due_today():
    """
    Due and overdue plants with their reminder message results.

    Any plant without today's message is queued for background generation;
    poll again to pick up the results.

    Query params:
        day: days ahead to list (0-6, default 0); only day 0 carries messages
    """
    user_id = get_current_user_id()

    day, error = validate_day_count(
        request.args.get("day"), default=0, minimum=0, maximum=MAX_REMINDER_DAY_OFFSET, label="day",
    )
    if error:
        return json_error(error, 400)

    cache = get_reminder_cache()
    today = cache.today()

    if day > 0:
        plants = organizer.plants_due_on(supabase_client.get_user_plants(user_id), day, today)
        return jsonify({
            "success": True,
            "day": day,
            "date": (today + timedelta(days=day)).isoformat(),
            "count": len(plants),
            "pending": 0,
            "reminders": _upcoming_payload(plants, today),
        })

    plants = get_due_plants(user_id, today)
    pending = [p for p in plants if cache.needs_message(p)]
    if pending:
        cache.schedule_messages_for(pending)

    return jsonify({
        "success": True,
        "day": 0,
        "date": today.isoformat(),
        "count": len(plants),
        "pending": len(pending),
        "reminders": _reminder_payload(cache, plants, today),
    })


@reminders_bp.route("/refresh", methods=["POST"])
@require_auth
@limiter.limit(lambda: current_app.config.get("RATELIMIT_REMINDER_REFRESH", "6 per minute"))
def refresh():
    """Generate today's messages for due plants now and return them."""
    user_id = get_current_user_id()
    cache = get_reminder_cache()
    today = cache.today()

    plants = get_due_plants(user_id, today, use_cache=False)
    summary = cache.ensure_messages_for(plants)

    return jsonify({
        "success": True,
        "summary": summary,
        "reminders": _reminder_payload(cache, plants, today),
    })


@reminders_bp.route("/clear", methods=["POST"])
@require_auth
def clear():
    """Drop the cached reminder messages for the signed-in user's plants."""
    user_id = get_current_user_id()
    plants = supabase_client.get_user_plants(user_id, use_cache=False)

    removed = get_reminder_cache().forget_many(p["id"] for p in plants if p.get("id") is not None)
    current_app.logger.info(f"[ReminderCache] User {user_id} cleared {removed} reminder message(s)")
    return jsonify({"success": True, "cleared": removed, "message": "Reminder messages cleared"})
