"""
Shared constants used across the application.

This module contains constants that need to be consistent across
different parts of the application (organizer views, reminder templates,
validation, etc.).
"""

# Location labels containing any of these words are treated as outdoor spaces
OUTDOOR_LOCATION_KEYWORDS = (
    "patio",
    "balcony",
    "front yard",
    "back yard",
    "garden",
    "porch",
)

# Plant health values, worst first (display order for the health view)
HEALTH_ORDER = ("poor", "fair", "good", "excellent")

# Personality archetypes a plant can be assigned
PERSONALITY_TYPES = (
    "cheerful",
    "dramatic",
    "zen",
    "sassy",
    "royal",
    "shy",
    "adventurous",
    "wise",
    "grumpy",
    "friendly",
)

DEFAULT_PERSONALITY = "friendly"

# Default watering frequency for plants created without one
DEFAULT_WATERING_FREQUENCY_DAYS = 7
MAX_WATERING_FREQUENCY_DAYS = 365
