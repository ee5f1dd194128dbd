"""
Error handling utilities for sanitizing user-facing messages and logging.

Provides consistent error handling across the application:
- Sanitizes error messages to prevent information leakage
- Logs detailed error information for debugging
- Builds JSON error responses for the API blueprints
"""

from __future__ import annotations
from flask import current_app, jsonify

# User-friendly generic error messages
GENERIC_MESSAGES = {
    "database": "We're experiencing technical difficulties. Please try again.",
    "retry": "We couldn't save that change. Please try again in a moment.",
    "validation": "The information provided is invalid. Please check and try again.",
    "permission": "You don't have permission to perform this action.",
    "not_found": "The requested item was not found.",
    "network": "Network error occurred. Please check your connection and try again.",
}


def sanitize_error(
    error: Exception,
    error_type: str = "database",
    log_prefix: str = ""
) -> str:
    """
    Sanitize error message for user display and log full details.

    Security: Prevents exposing internal error messages, stack traces, or
    database schema information to end users. Full details are logged for debugging.

    Args:
        error: The exception that occurred
        error_type: Type of error (database, retry, validation, permission, not_found, network)
        log_prefix: Optional prefix for log message context

    Returns:
        User-friendly error message

    Examples:
        >>> try:
        ...     plant = watering.water_plant(plant_id, user_id)
        ... except PlantStoreError as e:
        ...     user_msg = sanitize_error(e, "retry", "Failed to water plant")
    """
    # Log the full error details for debugging (not shown to user)
    error_message = str(error)
    log_message = f"{log_prefix}: {error_message}" if log_prefix else error_message

    # Use different log levels based on error type
    if error_type in ["validation", "not_found"]:
        # These are expected errors (user mistakes), log as info
        current_app.logger.info(f"Expected error - {log_message}")
    else:
        # Unexpected errors (bugs, system issues), log as error with stack trace
        current_app.logger.error(f"Unexpected error - {log_message}", exc_info=True)

    # Return sanitized user-friendly message
    return GENERIC_MESSAGES.get(error_type, GENERIC_MESSAGES["database"])


def json_error(message: str, status: int):
    """JSON error body used by the API blueprints: {"success": false, "error": message}."""
    return jsonify({"success": False, "error": message}), status


def log_warning(message: str, **context) -> None:
    """
    Log a warning with optional context.

    Args:
        message: Warning message
        **context: Additional context key-value pairs

    Examples:
        >>> log_warning("Rate limit exceeded", user_id="123", endpoint="/plants/")
    """
    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        message = f"{message} | Context: {context_str}"

    current_app.logger.warning(message)


def log_info(message: str, **context) -> None:
    """
    Log an info message with optional context.

    Args:
        message: Info message
        **context: Additional context key-value pairs

    Examples:
        >>> log_info("Plant watered", user_id="123", plant_id="abc")
    """
    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        message = f"{message} | Context: {context_str}"

    current_app.logger.info(message)
