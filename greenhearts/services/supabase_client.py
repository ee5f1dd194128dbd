"""
Supabase client initialization and helper functions.

Provides centralized access to Supabase for:
- Authentication (session verification)
- Plant records (list, fetch, update, delete)
- Profiles (owner display name used in reminder messages)
"""

from __future__ import annotations
from typing import Optional, Dict, Any, List
from flask import current_app, has_app_context
from supabase import create_client, Client
from greenhearts.utils.cache import cache_plant_list, invalidate_user_plant_cache
from greenhearts.utils.validation import is_valid_uuid


class PlantStoreError(Exception):
    """Raised when a plant write could not be persisted."""


def _safe_log_error(message: str) -> None:
    """
    Log error message only if Flask app context is available.

    This allows functions to be called from tests without app context.
    In production, errors are logged to current_app.logger.
    In tests without app context, errors are silently ignored.
    """
    try:
        if has_app_context():
            current_app.logger.error(message)
    except (ImportError, RuntimeError):
        pass  # Ignore if no app context available (e.g., in tests)


# Global client instances (initialized once per app)
_supabase_client: Optional[Client] = None  # User client (anon key)
_supabase_admin: Optional[Client] = None   # Admin client (service role key)

# Columns the schedule/organizer/reminder code reads
PLANT_FIELDS = (
    "id,user_id,name,species,location,health,personality_type,notes,"
    "watering_frequency_days,last_watered,next_watering_date,created_at"
)


def init_supabase(app) -> None:
    """
    Initialize Supabase clients with app config.
    Creates two clients:
    - Regular client with anon key (for user operations)
    - Admin client with service role key (for background jobs across users)

    Call this from the Flask app factory.
    """
    global _supabase_client, _supabase_admin

    url = app.config.get("SUPABASE_URL", "")
    anon_key = app.config.get("SUPABASE_ANON_KEY", "")
    service_key = app.config.get("SUPABASE_SERVICE_ROLE_KEY", "")

    if not url or not anon_key:
        app.logger.warning("Supabase URL or ANON_KEY not configured. Supabase features will be disabled.")
        _supabase_client = None
        _supabase_admin = None
        return

    try:
        _supabase_client = create_client(url, anon_key)
        app.logger.info("Supabase client initialized successfully")

        if service_key:
            _supabase_admin = create_client(url, service_key)
            app.logger.info("Supabase admin client initialized successfully")
        else:
            app.logger.warning("SUPABASE_SERVICE_ROLE_KEY not configured. Admin operations will be limited.")

    except Exception as e:
        app.logger.error(f"Failed to initialize Supabase client: {e}")
        _supabase_client = None
        _supabase_admin = None


def get_admin_client() -> Optional[Client]:
    """Get the admin Supabase client instance (admin client with service role key)."""
    return _supabase_admin


# ============================================================================
# Auth Helpers
# ============================================================================

def verify_session(access_token: str, refresh_token: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Verify a user session token and return user data.

    This establishes the session in Supabase using the provided tokens,
    which is required for RLS-protected database queries to work.

    Args:
        access_token: JWT access token from Supabase Auth
        refresh_token: Optional refresh token (recommended for session refresh)

    Returns:
        User dict with id, email, etc. or None if invalid
    """
    if not _supabase_client:
        return None

    try:
        session_response = _supabase_client.auth.set_session(
            access_token=access_token,
            refresh_token=refresh_token or ""
        )

        if session_response and session_response.user:
            return session_response.user.model_dump()
        return None

    except Exception as e:
        _safe_log_error(f"Error verifying session: {e}")
        return None


# ============================================================================
# Profile Helpers
# ============================================================================

def get_user_profile(user_id: str, admin: bool = False) -> Optional[Dict[str, Any]]:
    """
    Get user profile by user ID.

    Args:
        user_id: Supabase user UUID
        admin: Use the service role client (background jobs, no user session)

    Returns:
        Profile dict (display_name, email, ...) or None if not found
    """
    client = _supabase_admin if admin else _supabase_client
    if not client:
        return None

    # Validate UUID format before sending to Postgres
    if not is_valid_uuid(user_id):
        _safe_log_error(f"Invalid UUID passed to get_user_profile: {user_id!r}")
        return None

    try:
        # Use maybe_single() instead of single() to handle 0 rows gracefully
        response = client.table("profiles").select("*").eq("id", user_id).maybe_single().execute()
        return response.data if response else None
    except Exception as e:
        _safe_log_error(f"Error fetching user profile: {e}")
        return None


def get_owner_display_name(user_id: str, admin: bool = False) -> Optional[str]:
    """Display name used when a plant addresses its owner (None if unset)."""
    profile = get_user_profile(user_id, admin=admin)
    if not profile:
        return None
    name = (profile.get("display_name") or "").strip()
    return name or None


def get_user_ids_with_plants() -> List[str]:
    """
    All user IDs that own at least one plant with a watering schedule.

    Uses the admin client (bypasses RLS); returns an empty list when the
    service role key is not configured.
    """
    admin = get_admin_client()
    if not admin:
        return []

    try:
        response = (admin
                    .table("plants")
                    .select("user_id")
                    .not_.is_("next_watering_date", "null")
                    .execute())
        rows = response.data or []
        return sorted({row["user_id"] for row in rows if row.get("user_id")})
    except Exception as e:
        _safe_log_error(f"Error listing users with plants: {e}")
        return []


# ============================================================================
# Plant Helpers
# ============================================================================

@cache_plant_list
def get_user_plants(user_id: str) -> list[dict]:
    """
    Get all plants for a user.

    Results are cached for 5 minutes per user (see utils/cache.py); pass
    use_cache=False for fresh data right after an update.

    Args:
        user_id: Supabase user UUID

    Returns:
        List of plant dictionaries, empty list if error
    """
    client = _supabase_client or _supabase_admin
    if not client:
        return []

    try:
        response = (client
                    .table("plants")
                    .select(PLANT_FIELDS)
                    .eq("user_id", user_id)
                    .order("created_at", desc=True)
                    .execute())
        return response.data or []
    except Exception as e:
        _safe_log_error(f"Error getting user plants: {e}")
        return []


def get_user_plants_admin(user_id: str) -> list[dict]:
    """
    Get all plants for a user with the admin client (background jobs).

    Not cached: jobs run once a day and should see current data.
    """
    if not _supabase_admin:
        return []

    try:
        response = (_supabase_admin
                    .table("plants")
                    .select(PLANT_FIELDS)
                    .eq("user_id", user_id)
                    .execute())
        return response.data or []
    except Exception as e:
        _safe_log_error(f"Error getting plants for user {user_id} (admin): {e}")
        return []


def get_plant_by_id(plant_id: str, user_id: str) -> dict | None:
    """
    Get a single plant by ID, verifying ownership.

    Args:
        plant_id: Plant UUID
        user_id: User UUID (for ownership verification)

    Returns:
        Plant dictionary if found and owned by user, None otherwise
    """
    if not _supabase_client:
        return None

    try:
        response = (_supabase_client
                    .table("plants")
                    .select(PLANT_FIELDS)
                    .eq("id", plant_id)
                    .eq("user_id", user_id)
                    .maybe_single()
                    .execute())
        return response.data if response else None
    except Exception as e:
        _safe_log_error(f"Error getting plant {plant_id}: {e}")
        return None


def update_watering_fields(plant_id: str, user_id: str, fields: Dict[str, Any]) -> dict:
    """
    Persist watering schedule fields for a plant (with ownership verification).

    Unlike the other helpers this raises, so the watering action can tell the
    user to retry instead of pretending the write succeeded.

    Args:
        plant_id: Plant UUID
        user_id: User UUID (for ownership verification)
        fields: Subset of last_watered, next_watering_date, watering_frequency_days

    Returns:
        Updated plant dictionary

    Raises:
        PlantStoreError: Database not configured, query failed, or no row updated
    """
    if not _supabase_client:
        raise PlantStoreError("Database not configured")

    allowed = {"last_watered", "next_watering_date", "watering_frequency_days"}
    data = {k: v for k, v in fields.items() if k in allowed}
    if not data:
        raise PlantStoreError("No watering fields to update")

    try:
        response = (_supabase_client
                    .table("plants")
                    .update(data)
                    .eq("id", plant_id)
                    .eq("user_id", user_id)  # Ownership check
                    .execute())
    except Exception as e:
        _safe_log_error(f"Error updating watering fields for plant {plant_id}: {e}")
        raise PlantStoreError(f"Error updating plant: {e}") from e

    if not response.data:
        raise PlantStoreError("Plant not found or unauthorized")

    invalidate_user_plant_cache(user_id)
    return response.data[0]


def delete_plant(plant_id: str, user_id: str) -> bool:
    """
    Delete a plant (with ownership verification).

    Args:
        plant_id: Plant UUID
        user_id: User UUID (for ownership verification)

    Returns:
        True if a row was deleted, False if no plant with that ID belongs to the user

    Raises:
        PlantStoreError: Database not configured or query failed
    """
    if not _supabase_client:
        raise PlantStoreError("Database not configured")

    try:
        response = (_supabase_client
                    .table("plants")
                    .delete()
                    .eq("id", plant_id)
                    .eq("user_id", user_id)  # Ownership check
                    .execute())
    except Exception as e:
        _safe_log_error(f"Error deleting plant {plant_id}: {e}")
        raise PlantStoreError(f"Error deleting plant: {e}") from e

    # Ownership filter matched nothing: missing or someone else's plant
    if not response.data:
        return False

    invalidate_user_plant_cache(user_id)
    return True
