"""
Reminder message generation (AI provider access).

Asks the configured LLM for a short, in-character reminder written from the
plant's point of view. OpenAI is used when available with Gemini as the
fallback provider, both through a cached LiteLLM Router.

Any failure (missing keys, provider error, empty reply) raises GenerationError;
callers decide how to degrade (see reminder_cache / reminder_messages).
"""

from __future__ import annotations
import os
from typing import Any, Dict, Optional

from flask import current_app, has_app_context

# Most recent AI error (shown in logs/CLI to help diagnose model/key issues)
AI_LAST_ERROR: Optional[str] = None

# Track which AI provider was actually used for the last successful response
AI_LAST_PROVIDER: Optional[str] = None

# Cache for LiteLLM Router to avoid recreating on every request
_ROUTER_CACHE: Optional[object] = None

# Replies longer than this are cut at the last sentence boundary
MAX_MESSAGE_LENGTH = 280


class GenerationError(Exception):
    """Raised when no AI provider could produce a reminder message."""


def _clear_router_cache():
    """Clear the router cache. Used for testing and when API keys change."""
    global _ROUTER_CACHE
    _ROUTER_CACHE = None


def _get_api_key(name: str) -> Optional[str]:
    key = os.getenv(name)
    if not key and has_app_context():
        key = current_app.config.get(name)
    return key or None


def _get_litellm_router():
    """
    Returns a LiteLLM Router configured with OpenAI (primary) and Gemini (fallback),
    or (None, error) if neither API key is available.

    Reads API keys from environment first; if a Flask app context is active,
    also checks current_app.config.

    PERFORMANCE: Router is cached to avoid recreation on every request.
    """
    global _ROUTER_CACHE

    if _ROUTER_CACHE is not None:
        return _ROUTER_CACHE, None

    openai_key = _get_api_key("OPENAI_API_KEY")
    gemini_key = _get_api_key("GEMINI_API_KEY")

    if not openai_key and not gemini_key:
        return None, "Neither OPENAI_API_KEY nor GEMINI_API_KEY configured"

    try:
        from litellm import Router

        model_list = []
        fallbacks = {}

        if openai_key:
            model_list.append({
                "model_name": "primary-gpt",
                "litellm_params": {
                    "model": "gpt-4o-mini",
                    "api_key": openai_key,
                    "temperature": 0.9,  # Playful variety between days
                    "max_tokens": 120,
                }
            })

        if gemini_key:
            model_list.append({
                "model_name": "fallback-gemini",
                "litellm_params": {
                    "model": "gemini/gemini-flash-latest",
                    "api_key": gemini_key,
                    "temperature": 0.9,
                    "max_tokens": 120,
                }
            })

        # Configure fallback chain: OpenAI -> Gemini
        if openai_key and gemini_key:
            fallbacks = [{"primary-gpt": ["fallback-gemini"]}]

        router = Router(
            model_list=model_list,
            fallbacks=fallbacks if fallbacks else None,
            num_retries=2,
            timeout=30,
        )

        _ROUTER_CACHE = router
        return router, None
    except Exception as e:
        return None, f"LiteLLM Router initialization error: {e}"


def build_water_message_prompt(context: Dict[str, Any]) -> str:
    """
    Build the user prompt for a thirsty-plant reminder.

    Args:
        context: Dict with name, species, personality_type, days_overdue and
                 optional owner_name / location

    Returns:
        Prompt text
    """
    name = (context.get("name") or "").strip() or "a plant"
    species = (context.get("species") or "").strip() or "plant"
    personality = (context.get("personality_type") or "friendly").strip()
    days = int(context.get("days_overdue") or 0)

    if days > 0:
        situation = f"You are {days} day{'s' if days != 1 else ''} overdue for watering."
    else:
        situation = "Today is your watering day."

    lines = [
        f"You are {name}, a {species} with a {personality.lower()} personality.",
        situation,
    ]

    location = (context.get("location") or "").strip()
    if location:
        lines.append(f"You live in the {location.lower()}.")

    owner = (context.get("owner_name") or "").strip()
    if owner:
        lines.append(f"Address your owner, {owner}, by name.")

    lines.append(
        "Write one short, playful message (1-2 sentences, under 200 characters) "
        "asking to be watered, in character. No quotes, no hashtags, no markdown."
    )
    return "\n".join(lines)


def _trim_message(text: str) -> str:
    text = text.strip().strip('"').strip()
    if len(text) <= MAX_MESSAGE_LENGTH:
        return text
    cut = text[:MAX_MESSAGE_LENGTH]
    end = max(cut.rfind("."), cut.rfind("!"), cut.rfind("?"))
    return cut[:end + 1] if end > 0 else cut.rstrip() + "..."


def generate_water_message(context: Dict[str, Any]) -> str:
    """
    Generate an in-character watering reminder for one plant.

    Args:
        context: Plant context (name, species, personality_type, days_overdue,
                 optional owner_name, optional location)

    Returns:
        Message text (never empty)

    Raises:
        GenerationError: No provider configured, provider failure, or empty reply
    """
    global AI_LAST_ERROR, AI_LAST_PROVIDER
    AI_LAST_ERROR = None
    AI_LAST_PROVIDER = None

    router, err = _get_litellm_router()
    if not router:
        AI_LAST_ERROR = err or "AI Router initialization failed"
        raise GenerationError(AI_LAST_ERROR)

    model_to_use = "primary-gpt" if _get_api_key("OPENAI_API_KEY") else "fallback-gemini"

    try:
        resp = router.completion(
            model=model_to_use,
            messages=[
                {
                    "role": "system",
                    "content": "You write short, warm, funny reminders in the voice of a houseplant.",
                },
                {"role": "user", "content": build_water_message_prompt(context)},
            ],
        )
        txt = _trim_message(resp.choices[0].message.content or "")
    except Exception as e:
        AI_LAST_ERROR = str(e)[:300]
        raise GenerationError(AI_LAST_ERROR) from e

    if not txt:
        AI_LAST_ERROR = "Empty response from AI providers"
        raise GenerationError(AI_LAST_ERROR)

    model_used = getattr(resp, "model", None) or model_to_use
    AI_LAST_PROVIDER = "gemini" if "gemini" in model_used.lower() else "openai"
    return txt
