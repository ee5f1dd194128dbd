"""
Application factory and global configuration.

Creates the Flask app, applies security headers, configures rate limiting,
builds the reminder message cache, registers blueprints and CLI commands and
starts the daily reminder warm-up job. This file keeps startup/config
concerns together and avoids domain logic here.
"""

from __future__ import annotations
import atexit
import os
from flask import Flask, Response
from dotenv import load_dotenv  # <-- ensure .env is loaded for local dev
from .extensions import limiter
from .routes.plants import plants_bp
from .routes.reminders import reminders_bp
from .services import supabase_client
from .services.reminder_cache import init_reminder_cache
from .utils.cache import configure_plant_cache


def _validate_production_security(app: Flask, cfg_path: str) -> None:
    """
    Validate critical security settings in production environments.

    Raises RuntimeError if production security requirements are not met.

    Checks:
    - SESSION_COOKIE_SECURE must be True (cookies only over HTTPS)
    - SECRET_KEY must be set and strong (>= 32 characters)
    - DEBUG must be False (no debug mode in production)
    """
    is_production = "ProdConfig" in cfg_path
    is_test = app.config.get("TESTING", False)

    if not is_production or is_test:
        return

    errors = []

    if not app.config.get("SESSION_COOKIE_SECURE", False):
        errors.append(
            "SESSION_COOKIE_SECURE must be True in production. "
            "Cookies must only be sent over HTTPS to prevent session hijacking."
        )

    secret_key = app.config.get("SECRET_KEY", "")
    if not secret_key:
        errors.append(
            "SECRET_KEY is not set. Set FLASK_SECRET_KEY environment variable. "
            "Generate with: python -c 'import secrets; print(secrets.token_hex(32))'"
        )
    elif len(secret_key) < 32:
        errors.append(
            f"SECRET_KEY is too weak ({len(secret_key)} chars). "
            "Must be at least 32 characters for production security."
        )

    if app.config.get("DEBUG", False):
        errors.append("DEBUG must be False in production.")

    if errors:
        error_msg = "\n\n[ERROR] PRODUCTION SECURITY VALIDATION FAILED:\n\n" + "\n\n".join(f"  * {err}" for err in errors)
        raise RuntimeError(error_msg)

    app.logger.info("[OK] Production security validation passed")


def _start_reminder_scheduler(app: Flask) -> None:
    """Schedule the morning reminder warm-up (APScheduler, UTC cron)."""
    try:
        from apscheduler.schedulers.background import BackgroundScheduler
        from .services.reminders import batch_warm_all_users_reminders

        scheduler = BackgroundScheduler()
        hour = app.config.get("REMINDER_DAILY_WARM_HOUR", 6)

        # APScheduler runs jobs in background threads without app context
        def run_reminder_warmup():
            with app.app_context():
                batch_warm_all_users_reminders(app.extensions["reminder_cache"])

        scheduler.add_job(
            func=run_reminder_warmup,
            trigger="cron",
            hour=hour,
            minute=0,
            id="daily_reminder_warmup",
            name="Daily Reminder Message Warm-up",
            replace_existing=True
        )

        scheduler.start()
        app.logger.info(f"[Scheduler] Daily reminder warm-up scheduled for {hour:02d}:00 UTC")

        atexit.register(lambda: scheduler.shutdown())

    except Exception as e:
        app.logger.warning(f"[Scheduler] Failed to initialize reminder warm-up scheduler: {e}")


def create_app() -> Flask:
    # override=False so production env vars are not overwritten by a stale .env file
    load_dotenv(override=False)

    app = Flask(__name__)

    # Allow APP_CONFIG to override (e.g., greenhearts.config.ProdConfig)
    cfg_path = os.getenv("APP_CONFIG", "greenhearts.config.ProdConfig")
    try:
        app.config.from_object(cfg_path)
    except (ImportError, AttributeError) as e:
        app.logger.warning(f"Could not load config object {cfg_path}: {e}")

    _validate_production_security(app, cfg_path)

    limiter.init_app(app)

    if not app.config.get("RATELIMIT_ENABLED", True):
        limiter.enabled = False

    if not app.secret_key:
        app.secret_key = app.config.get("SECRET_KEY", "")

    supabase_client.init_supabase(app)
    configure_plant_cache(app.config.get("PLANT_LIST_CACHE_TTL_SECONDS", 300))

    reminder_cache = init_reminder_cache(app)
    atexit.register(reminder_cache.shutdown)

    @app.after_request
    def apply_security_headers(resp: Response) -> Response:
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        resp.headers["X-Frame-Options"] = "DENY"

        if app.config.get("SESSION_COOKIE_SECURE", False):
            resp.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains; preload"

        return resp

    # Blueprints
    app.register_blueprint(plants_bp)
    app.register_blueprint(reminders_bp)

    if not app.config.get("TESTING", False) and app.config.get("REMINDER_DAILY_WARM_ENABLED", False):
        _start_reminder_scheduler(app)

    # Register CLI commands
    from .cli import clear_reminder_cache_command, warm_reminders_command
    app.cli.add_command(clear_reminder_cache_command)
    app.cli.add_command(warm_reminders_command)

    return app
