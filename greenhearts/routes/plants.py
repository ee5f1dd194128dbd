"""
Plant schedule routes.

JSON endpoints for the plant dashboard:
- GET    /plants/?view=<view>       organized groups with watering status
- GET    /plants/schedule?days=<n>  day-by-day watering calendar
- POST   /plants/<id>/water         record a watering
- POST   /plants/<id>/frequency     change watering frequency
- DELETE /plants/<id>               delete a plant
"""

from __future__ import annotations
from flask import Blueprint, request, jsonify
from ..extensions import limiter
from ..services import organizer, schedule, supabase_client, watering
from ..services.reminder_cache import get_reminder_cache
from ..services.supabase_client import PlantStoreError
from ..utils.auth import enforce_ajax_for_mutations, get_current_user_id, require_auth
from ..utils.errors import GENERIC_MESSAGES, json_error, log_info, log_warning, sanitize_error
from ..utils.validation import is_valid_uuid, validate_day_count, validate_frequency_days, validate_watered_date

plants_bp = Blueprint("plants", __name__, url_prefix="/plants")
plants_bp.before_request(enforce_ajax_for_mutations)

DEFAULT_VIEW = organizer.VIEW_WATERING_PRIORITY


def _serialize_groups(groups, today):
    return [
        {
            "title": group["title"],
            "count": len(group["plants"]),
            "plants": [schedule.annotate(p, today) for p in group["plants"]],
        }
        for group in groups
    ]


@plants_bp.route("/", methods=["GET"])
@require_auth
def list_plants():
    """Organized plant collection for the selected view."""
    user_id = get_current_user_id()

    view = (request.args.get("view") or DEFAULT_VIEW).strip().lower()
    if view not in organizer.VIEWS:
        return json_error(f"Unknown view. Choose one of: {', '.join(organizer.VIEWS)}", 400)

    today = get_reminder_cache().today()
    plants = supabase_client.get_user_plants(user_id)
    groups = organizer.organize(plants, view, today)

    return jsonify({
        "success": True,
        "view": view,
        "view_label": organizer.VIEW_LABELS[view],
        "total": len(plants),
        "counts": organizer.group_counts(groups),
        "groups": _serialize_groups(groups, today),
    })


@plants_bp.route("/schedule", methods=["GET"])
@require_auth
def watering_schedule():
    """
    Upcoming watering calendar.

    Query params:
        days: number of days to cover, today included (1-31, default 14)
    """
    user_id = get_current_user_id()

    days, error = validate_day_count(
        request.args.get("days"),
        default=organizer.DEFAULT_CALENDAR_DAYS,
        minimum=1,
        maximum=organizer.MAX_CALENDAR_DAYS,
        label="days",
    )
    if error:
        return json_error(error, 400)

    today = get_reminder_cache().today()
    events = organizer.watering_calendar(supabase_client.get_user_plants(user_id), days, today)

    return jsonify({
        "success": True,
        "start": today.isoformat(),
        "days": days,
        "total": sum(len(event["plants"]) for event in events),
        "events": [
            {
                "date": event["date"].isoformat(),
                "offset": event["offset"],
                "title": event["title"],
                "count": len(event["plants"]),
                "plants": [schedule.annotate(p, today) for p in event["plants"]],
            }
            for event in events
        ],
    })


@plants_bp.route("/<plant_id>/water", methods=["POST"])
@require_auth
@limiter.limit("30 per minute")
def water(plant_id):
    """
    Record a watering.

    Request body (optional):
        {"date": "2025-03-14"}   // defaults to today, no future dates
    """
    user_id = get_current_user_id()

    if not is_valid_uuid(plant_id):
        return json_error("Invalid plant ID", 400)

    data = request.get_json(silent=True) or {}
    today = get_reminder_cache().today()
    watered_on, error = validate_watered_date(data.get("date"), today)
    if error:
        return json_error(error, 400)

    try:
        plant = watering.water_plant(plant_id, user_id, watered_on)
    except LookupError:
        log_warning("Watering requested for unknown plant", user_id=user_id, plant_id=plant_id)
        return json_error(GENERIC_MESSAGES["not_found"], 404)
    except PlantStoreError as e:
        return json_error(sanitize_error(e, "retry", "Failed to record watering"), 503)

    log_info("Plant watered", user_id=user_id, plant_id=plant_id)
    return jsonify({
        "success": True,
        "message": f"{plant.get('name') or 'Plant'} watered!",
        "plant": schedule.annotate(plant, today),
    })


@plants_bp.route("/<plant_id>/frequency", methods=["POST"])
@require_auth
@limiter.limit("30 per minute")
def update_frequency(plant_id):
    """
    Change watering frequency and recompute the next due date.

    Request body:
        {"frequency_days": 7}
    """
    user_id = get_current_user_id()

    if not is_valid_uuid(plant_id):
        return json_error("Invalid plant ID", 400)

    data = request.get_json(silent=True) or {}
    if "frequency_days" not in data:
        return json_error("Missing 'frequency_days' parameter", 400)

    frequency_days, error = validate_frequency_days(data["frequency_days"])
    if error:
        return json_error(error, 400)

    try:
        plant = watering.update_watering_frequency(plant_id, user_id, frequency_days)
    except LookupError:
        return json_error(GENERIC_MESSAGES["not_found"], 404)
    except PlantStoreError as e:
        return json_error(sanitize_error(e, "retry", "Failed to update watering frequency"), 503)

    return jsonify({
        "success": True,
        "plant": schedule.annotate(plant, get_reminder_cache().today()),
    })


@plants_bp.route("/<plant_id>", methods=["DELETE"])
@require_auth
def delete(plant_id):
    """Delete a plant and drop its cached reminder message."""
    user_id = get_current_user_id()

    if not is_valid_uuid(plant_id):
        return json_error("Invalid plant ID", 400)

    try:
        deleted = supabase_client.delete_plant(plant_id, user_id)
    except PlantStoreError as e:
        return json_error(sanitize_error(e, "retry", "Failed to delete plant"), 503)

    if not deleted:
        log_warning("Delete requested for unknown plant", user_id=user_id, plant_id=plant_id)
        return json_error(GENERIC_MESSAGES["not_found"], 404)

    get_reminder_cache().forget(plant_id)
    return jsonify({"success": True, "message": "Plant deleted"})
