"""
Simple caching utilities for performance optimization.

Provides a short-lived, per-user cache of plant lists so dashboard views that
switch between organizer modes don't hit Supabase on every click.
"""

from __future__ import annotations
from cachetools import TTLCache
from typing import Callable, Any
from functools import wraps
import threading

# Cache configuration constants
PLANT_LIST_CACHE_TTL_SECONDS = 300  # 5 minutes
PLANT_LIST_CACHE_MAX_ENTRIES = 500

# Thread-safe plant list cache (5-minute TTL, max 500 users)
# Key format: "plants:{user_id}"
_plant_list_cache = TTLCache(maxsize=PLANT_LIST_CACHE_MAX_ENTRIES, ttl=PLANT_LIST_CACHE_TTL_SECONDS)
_cache_lock = threading.Lock()


def _cache_key(user_id: str) -> str:
    return f"plants:{user_id}"


def cache_plant_list(func: Callable) -> Callable:
    """
    Decorator to cache a user's plant list for 5 minutes.

    Pass use_cache=False to bypass the cache (e.g., right after an update).

    Usage:
        @cache_plant_list
        def get_user_plants(user_id):
            # Expensive database query...
            return plants
    """
    @wraps(func)
    def wrapper(user_id: str, use_cache: bool = True) -> Any:
        cache_key = _cache_key(user_id)

        if use_cache:
            with _cache_lock:
                if cache_key in _plant_list_cache:
                    return _plant_list_cache[cache_key]

        result = func(user_id)

        # Empty results are usually errors or brand-new accounts; don't pin them
        if result:
            with _cache_lock:
                _plant_list_cache[cache_key] = result

        return result

    return wrapper


def invalidate_user_plant_cache(user_id: str) -> None:
    """
    Invalidate the cached plant list for a specific user.

    Called when:
    - A plant is watered (dates change)
    - A plant's watering frequency changes
    - A plant is deleted
    """
    with _cache_lock:
        _plant_list_cache.pop(_cache_key(user_id), None)


def clear_all_plant_cache() -> None:
    """
    Clear the entire plant list cache.

    Useful for:
    - Testing
    - Manual cache invalidation
    """
    with _cache_lock:
        _plant_list_cache.clear()


def configure_plant_cache(ttl_seconds: int) -> None:
    """Rebuild the plant list cache with a new TTL (called from create_app)."""
    global _plant_list_cache
    with _cache_lock:
        _plant_list_cache = TTLCache(maxsize=PLANT_LIST_CACHE_MAX_ENTRIES, ttl=max(int(ttl_seconds), 1))
