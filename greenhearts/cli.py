"""
Flask CLI commands for one-off administrative tasks.

Usage:
    flask clear-reminder-cache                 # Drop every cached reminder message
    flask warm-reminders --user <uuid>         # Generate today's messages for one user
    flask warm-reminders --all                 # Same for every user with scheduled plants
"""

from __future__ import annotations

import click
from flask.cli import with_appcontext


@click.command("clear-reminder-cache")
@with_appcontext
def clear_reminder_cache_command() -> None:
    """Empty the reminder message cache (memory and JSON file)."""
    from greenhearts.services.reminder_cache import get_reminder_cache

    cache = get_reminder_cache()
    count = len(cache)
    cache.clear()
    click.echo(f"Cleared {count} cached reminder message(s).")


@click.command("warm-reminders")
@click.option("--user", "user_id", default=None,
              help="User UUID whose due plants should get today's messages.")
@click.option("--all", "all_users", is_flag=True, default=False,
              help="Warm messages for every user with scheduled plants.")
@with_appcontext
def warm_reminders_command(user_id: str | None, all_users: bool) -> None:
    """Generate today's reminder messages ahead of time."""
    from greenhearts.services import supabase_client
    from greenhearts.services.reminder_cache import get_reminder_cache
    from greenhearts.services.reminders import batch_warm_all_users_reminders, warm_user_reminders
    from greenhearts.utils.validation import is_valid_uuid

    if not user_id and not all_users:
        raise click.UsageError("Pass --user <uuid> or --all.")

    if not supabase_client.get_admin_client():
        click.echo("Error: Supabase admin client not configured (SUPABASE_SERVICE_ROLE_KEY missing).")
        raise SystemExit(1)

    cache = get_reminder_cache()

    if all_users:
        stats = batch_warm_all_users_reminders(cache)
        click.echo(
            f"Done. Users: {stats['users_processed']}/{stats['total_users']}, "
            f"Generated: {stats['generated']}, Fallback: {stats['fallback']}, Errors: {stats['errors']}"
        )
        return

    if not is_valid_uuid(user_id):
        raise click.BadParameter("must be a UUID", param_hint="--user")

    summary = warm_user_reminders(cache, user_id)
    click.echo(
        f"Done. Generated: {summary['generated']}, Fallback: {summary['fallback']}, "
        f"Skipped (already cached): {summary['skipped']}"
    )
