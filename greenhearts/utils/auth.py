"""
Authentication utilities and decorators for route protection.

Provides:
- @require_auth: Decorator to require an authenticated user (JSON 401 otherwise)
- Session management helpers
"""

from __future__ import annotations
from functools import wraps
from typing import Optional, Dict, Any
from flask import session, g, request
from greenhearts.services import supabase_client
from greenhearts.utils.errors import json_error


# ============================================================================
# Session Management
# ============================================================================

SESSION_ACCESS_TOKEN_KEY = "access_token"
SESSION_REFRESH_TOKEN_KEY = "refresh_token"


def get_current_user() -> Optional[Dict[str, Any]]:
    """
    Get currently logged-in user from session.

    Returns:
        User dict with id, email, etc. or None if not logged in
    """
    # Check if user already loaded in request context
    if hasattr(g, 'user'):
        return g.user

    access_token = session.get(SESSION_ACCESS_TOKEN_KEY)
    refresh_token = session.get(SESSION_REFRESH_TOKEN_KEY)

    if not access_token:
        g.user = None
        return None

    # Verify token with Supabase (pass both tokens)
    user = supabase_client.verify_session(access_token, refresh_token)
    if not user:
        # Token invalid/expired, clear session
        clear_session()
        g.user = None
        return None

    g.user = user
    return user


def get_current_user_id() -> Optional[str]:
    """
    Get current user's ID.

    Returns:
        User UUID or None if not logged in
    """
    user = get_current_user()
    return user.get("id") if user else None


def clear_session() -> None:
    """Clear user session data."""
    session.pop(SESSION_ACCESS_TOKEN_KEY, None)
    session.pop(SESSION_REFRESH_TOKEN_KEY, None)


def is_authenticated() -> bool:
    """Check if user is currently authenticated."""
    return get_current_user() is not None


# ============================================================================
# Decorators
# ============================================================================

def require_auth(f):
    """
    Decorator to require authentication for an API route.

    If user not logged in, responds with a JSON 401.

    Usage:
        @bp.route('/plants/')
        @require_auth
        def list_plants():
            user_id = get_current_user_id()
            ...
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not is_authenticated():
            return json_error("Please sign in to continue.", 401)

        return f(*args, **kwargs)

    return decorated_function


def enforce_ajax_for_mutations():
    """Enforce X-Requested-With header on all state-changing requests.

    Register on a JSON blueprint with bp.before_request(enforce_ajax_for_mutations).
    Custom headers cannot be set by cross-origin requests without CORS and
    HTML forms cannot set them at all, so only same-origin JavaScript passes.
    """
    if request.method in ("POST", "PUT", "DELETE", "PATCH"):
        if request.headers.get("X-Requested-With") != "XMLHttpRequest":
            return json_error("Invalid request. Please refresh the page and try again.", 403)
    return None
