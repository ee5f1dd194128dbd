"""
Fallback reminder messages.

When the AI provider is unavailable (no key, quota, network error) or a plant
has no personality assigned, reminders fall back to a fixed template table
keyed by personality archetype and urgency band. Unknown archetypes use the
"friendly" set.

Template placeholders:
    {name}      plant display name
    {days}      "1 day" / "3 days" (overdue band)
    {location}  " in the kitchen" or "" when the plant has no location
    {owner}     owner display name; templates using it are only eligible
                when the owner's name was chosen for this message

Selection is deterministic: the same plant on the same day always gets the
same template, so re-rendering a page never reshuffles the text.
"""

from __future__ import annotations
import zlib
from datetime import date
from typing import Any, Dict, List, Optional

from ..constants import DEFAULT_PERSONALITY
from .schedule import BAND_DUE_TODAY, BAND_OVERDUE, BAND_UPCOMING

FALLBACK_TEMPLATES: Dict[str, Dict[str, List[str]]] = {
    "cheerful": {
        BAND_DUE_TODAY: [
            "It's my special day{location}! Time for my refreshing drink!",
            "Today's the day! Ready for my spa treatment{location}!",
            "{owner}, I'm so excited for my water break today! Let's grow together!",
        ],
        BAND_OVERDUE: [
            "*Wilting dramatically{location}* {days} without water... but I'm staying positive!",
            "A little parched over here{location}, but I know you're doing your best!",
            "Hey {owner}! I'm feeling a bit parched. A drink would be lovely!",
        ],
        BAND_UPCOMING: [
            "Feeling great{location}! Water time is coming up soon!",
            "Soaking up the good vibes until my next drink!",
            "Thanks for keeping me happy, {owner}! See you at water time!",
        ],
    },
    "dramatic": {
        BAND_DUE_TODAY: [
            "TODAY is the day I finally get water{location}! I can hardly bear the wait!",
            "The moment has arrived! Water me now or forever hold your peace!",
            "{owner}, my destiny awaits! Today is watering day!",
        ],
        BAND_OVERDUE: [
            "I'm DYING of thirst over here! It's been {days} too many!",
            "{location_title} has become my desert of despair! {days} without water!",
            "{owner}, I'm DYING of thirst over here! It's been {days} too many!",
        ],
        BAND_UPCOMING: [
            "I shall endure{location} until my next glorious drink!",
            "The wait for water is agony, but I am strong!",
        ],
    },
    "zen": {
        BAND_DUE_TODAY: [
            "Today the water flows to me{location}. I am ready.",
            "Balance is restored today, with water.",
            "{owner}, today we share a quiet moment of watering.",
        ],
        BAND_OVERDUE: [
            "One cannot flourish without water. I seek hydration.",
            "Even in tranquility{location}, a plant needs water to find balance.",
            "{owner}, one cannot flourish without water. I seek hydration.",
        ],
        BAND_UPCOMING: [
            "I rest{location}, content until the water returns.",
            "Patience is its own nourishment.",
        ],
    },
    "sassy": {
        BAND_DUE_TODAY: [
            "Finally! My scheduled pampering session{location}! Don't keep a queen waiting!",
            "Today's forecast: 100% chance of fabulous hydration!",
            "Darling {owner}, today's MY day! Ready for my hydration appointment!",
        ],
        BAND_OVERDUE: [
            "Excuse me? Did you forget about me for {days}? I'm thirsty!",
            "Oh, NOW you remember I exist{location}? How generous...",
            "{days} late? I'm writing this down in my diary, {owner}...",
        ],
        BAND_UPCOMING: [
            "Looking fabulous{location}, as usual. Don't be late with my water.",
            "I'm hydrated and iconic. Keep it that way.",
        ],
    },
    "royal": {
        BAND_DUE_TODAY: [
            "Your Majesty {name} shall receive the royal watering today{location}.",
            "By royal decree, today is watering day!",
            "{owner}, the crown requests your presence at today's watering.",
        ],
        BAND_OVERDUE: [
            "Your Majesty {name} requests the royal water treatment, post-haste.",
            "Your Majesty {name}{location} demands water for the royal roots immediately!",
            "Your Majesty {name} requests the royal water treatment from {owner}, post-haste.",
        ],
        BAND_UPCOMING: [
            "The royal court{location} is well watered. Carry on.",
            "Your Majesty {name} is pleased with the kingdom's hydration.",
        ],
    },
    "shy": {
        BAND_DUE_TODAY: [
            "Um... today's my watering day{location}... I'm kind of excited...",
            "Water day is here... feeling special and a tiny bit brave...",
            "{owner}... I've been looking forward to our water time today...",
        ],
        BAND_OVERDUE: [
            "Um... sorry to bother you, but... I'm a little thirsty...",
            "I don't want to be a bother{location}, but... I could use some water...",
            "Um... {owner}... sorry to bother you, but... I'm a little thirsty...",
        ],
        BAND_UPCOMING: [
            "I'm doing okay{location}... thank you for asking...",
            "Just quietly growing over here...",
        ],
    },
    "adventurous": {
        BAND_DUE_TODAY: [
            "Today's expedition: the great watering{location}! Let's go!",
            "Refuel day! Ready for the next adventure!",
            "{owner}, gear up! Today we water!",
        ],
        BAND_OVERDUE: [
            "I've been exploring the desert of neglect for {days}! Water, please!",
            "{days} of expedition{location} with no supplies! Time to refuel!",
            "{owner}! I've been exploring the desert of neglect for {days}! Water, please!",
        ],
        BAND_UPCOMING: [
            "Still exploring{location}! Supplies holding up fine.",
            "Onward! Water stop coming up soon.",
        ],
    },
    "wise": {
        BAND_DUE_TODAY: [
            "The wise gardener waters on the appointed day. Today is that day{location}.",
            "Water given at the right time is worth twice as much.",
            "{owner}, today the roots await their due.",
        ],
        BAND_OVERDUE: [
            "A wise gardener knows that water brings life. I've been waiting patiently.",
            "Patience teaches much, but after {days}, even the wisest plant needs water.",
            "{owner}, a wise gardener knows that water brings life. I've been waiting patiently.",
        ],
        BAND_UPCOMING: [
            "All things in their season{location}. Water will come.",
            "A well-tended plant needs little. I am content.",
        ],
    },
    "grumpy": {
        BAND_DUE_TODAY: [
            "Well, well, it's watering day{location}. At least you're on time today...",
            "*checking calendar* Ah yes, water day. Let's get on with it...",
            "{owner}, I suppose we should get this watering business over with...",
        ],
        BAND_OVERDUE: [
            "{days} late? I'm not even surprised anymore{location}...",
            "I've known cacti more reliable than you...",
            "Oh look who finally remembered I exist, {owner}! How thoughtful...",
        ],
        BAND_UPCOMING: [
            "I'm fine{location}. Leave me alone until water day.",
            "Yes, yes, I'm watered. Stop hovering.",
        ],
    },
    "friendly": {
        BAND_DUE_TODAY: [
            "Today's the big day{location}! Can't wait for our watering session!",
            "It's water o'clock! Perfect timing for our care routine!",
            "{owner}, I've been looking forward to our water date today!",
        ],
        BAND_OVERDUE: [
            "Just a reminder - I'm {days} overdue for water{location}!",
            "I'm thirsty! I need water, please!",
            "{owner}, I'm thirsty! I need water, please!",
        ],
        BAND_UPCOMING: [
            "Doing well{location}! Thanks for taking such good care of me!",
            "All good here! See you on water day!",
        ],
    },
}


def normalize_personality(personality: Optional[str]) -> str:
    """Lowercase archetype name, falling back to 'friendly' for unknown values."""
    if not isinstance(personality, str):
        return DEFAULT_PERSONALITY
    key = personality.strip().lower()
    return key if key in FALLBACK_TEMPLATES else DEFAULT_PERSONALITY


def templates_for(personality: Optional[str], band: str) -> List[str]:
    """Template list for an archetype and urgency band (upcoming when band is unknown)."""
    archetype = FALLBACK_TEMPLATES[normalize_personality(personality)]
    return archetype.get(band) or archetype[BAND_UPCOMING]


def _days_phrase(days: int) -> str:
    days = max(days, 1)
    return "1 day" if days == 1 else f"{days} days"


def _pick_index(plant_id: str, band: str, day: date, count: int) -> int:
    seed = f"{plant_id}:{band}:{day.isoformat()}".encode("utf-8")
    return zlib.crc32(seed) % count


def fallback_message(
    plant: Dict[str, Any],
    days_overdue: int,
    band: str,
    owner_name: Optional[str] = None,
    today: Optional[date] = None,
) -> str:
    """
    Build a templated reminder for a plant.

    Args:
        plant: Plant dict (name, location, personality_type, id)
        days_overdue: Days past due (only used by overdue templates)
        band: Urgency band (due_today, overdue, upcoming)
        owner_name: Owner display name when it should appear in the message
        today: Day used to pick a template (defaults to today)

    Returns:
        Non-empty message text
    """
    templates = templates_for(plant.get("personality_type"), band)
    if not owner_name:
        templates = [t for t in templates if "{owner}" not in t]

    location = (plant.get("location") or "").strip()
    location_phrase = f" in the {location.lower()}" if location else ""
    location_title = f"The {location.lower()}" if location else "This pot"

    index = _pick_index(str(plant.get("id") or plant.get("name") or ""), band, today or date.today(), len(templates))
    return templates[index].format(
        name=(plant.get("name") or "your plant").strip(),
        days=_days_phrase(days_overdue),
        location=location_phrase,
        location_title=location_title,
        owner=owner_name or "",
    )
