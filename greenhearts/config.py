"""
Centralized configuration for all environments.

Select a config by setting:
  APP_CONFIG=greenhearts.config.DevConfig      # local dev
  APP_CONFIG=greenhearts.config.ProdConfig     # production (default if unset)
  APP_CONFIG=greenhearts.config.TestConfig     # pytest

Notes:
- SECRET_KEY is read from FLASK_SECRET_KEY
- Rate limiting uses Flask-Limiter v3 keys (RATELIMIT_*).
"""

from __future__ import annotations
import os
import secrets
from datetime import timedelta


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


class BaseConfig:
    # Secrets & basics: random key if env var is missing so dev/test never
    # runs with an empty string (production enforces a real key at startup)
    SECRET_KEY = os.getenv("FLASK_SECRET_KEY") or secrets.token_hex(32)
    DEBUG = False
    TESTING = False

    # Session configuration
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)
    SESSION_COOKIE_SECURE = True  # Only send cookies over HTTPS (overridden in dev)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    # Third-party keys
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")

    # Supabase (Database + Auth)
    SUPABASE_URL = os.getenv("SUPABASE_URL", "")
    SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
    SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")

    # Flask-Limiter v3
    RATELIMIT_ENABLED = os.getenv("RATELIMIT_ENABLED", "true").lower() == "true"
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "40 per minute; 2000 per day")
    RATELIMIT_REMINDER_REFRESH = os.getenv("RATELIMIT_REMINDER_REFRESH", "6 per minute; 100 per day")

    # Reminder message cache
    REMINDER_CACHE_PATH = os.getenv(
        "REMINDER_CACHE_PATH",
        os.path.join(os.getcwd(), "instance", "reminder_messages.json"),
    )
    REMINDER_OWNER_NAME_PROBABILITY = float(os.getenv("REMINDER_OWNER_NAME_PROBABILITY", "0.4"))

    # Morning job that pre-generates today's reminders for every user
    REMINDER_DAILY_WARM_ENABLED = _env_flag("REMINDER_DAILY_WARM_ENABLED", "true")
    REMINDER_DAILY_WARM_HOUR = int(os.getenv("REMINDER_DAILY_WARM_HOUR", "6"))  # UTC

    # Per-user plant list cache (see utils/cache.py)
    PLANT_LIST_CACHE_TTL_SECONDS = int(os.getenv("PLANT_LIST_CACHE_TTL_SECONDS", "300"))

    # Misc
    PREFERRED_URL_SCHEME = os.getenv("PREFERRED_URL_SCHEME", "https")


class ProdConfig(BaseConfig):
    """Production settings (selected by default if APP_CONFIG is unset)."""
    pass


class DevConfig(BaseConfig):
    """Developer-friendly settings."""
    DEBUG = True
    PREFERRED_URL_SCHEME = "http"
    # Allow cookies over HTTP in dev
    SESSION_COOKIE_SECURE = False
    # Don't run the morning job from every reloader process
    REMINDER_DAILY_WARM_ENABLED = _env_flag("REMINDER_DAILY_WARM_ENABLED", "false")


class TestConfig(BaseConfig):
    """CI/pytest settings."""
    TESTING = True
    DEBUG = True
    # Usually disable the limiter in tests to avoid flakiness
    RATELIMIT_ENABLED = False
    SESSION_COOKIE_SECURE = False
    REMINDER_DAILY_WARM_ENABLED = False
    # Tests override this with a tmp_path file
    REMINDER_CACHE_PATH = os.path.join(os.getcwd(), "instance", "test_reminder_messages.json")
