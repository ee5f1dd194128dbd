"""Tests for fallback reminder templates."""

import pytest

from greenhearts.constants import PERSONALITY_TYPES
from greenhearts.services import reminder_messages
from greenhearts.services.schedule import BAND_DUE_TODAY, BAND_OVERDUE, BAND_UPCOMING
from conftest import TODAY, make_plant

BANDS = (BAND_DUE_TODAY, BAND_OVERDUE, BAND_UPCOMING)


def test_every_archetype_has_every_band():
    assert set(reminder_messages.FALLBACK_TEMPLATES) == set(PERSONALITY_TYPES)
    for archetype, bands in reminder_messages.FALLBACK_TEMPLATES.items():
        for band in BANDS:
            without_owner = [t for t in bands[band] if "{owner}" not in t]
            assert without_owner, f"{archetype}/{band} needs a template without the owner's name"


@pytest.mark.parametrize("value,expected", [
    ("Sassy", "sassy"),
    ("  ZEN ", "zen"),
    ("pirate", "friendly"),
    (None, "friendly"),
    ("", "friendly"),
])
def test_normalize_personality(value, expected):
    assert reminder_messages.normalize_personality(value) == expected


@pytest.mark.parametrize("archetype", PERSONALITY_TYPES)
@pytest.mark.parametrize("band", BANDS)
def test_fallback_is_non_empty_and_formatted(archetype, band):
    plant = make_plant(personality_type=archetype, name="Basil", location="Kitchen")
    message = reminder_messages.fallback_message(plant, 3, band, today=TODAY)

    assert message.strip()
    assert "{" not in message and "}" not in message


def test_owner_templates_need_an_owner_name():
    plant = make_plant(personality_type="friendly")
    for day_offset in range(30):
        message = reminder_messages.fallback_message(plant, 2, BAND_OVERDUE, today=TODAY.replace(day=1 + day_offset % 28))
        assert message in [
            t.format(name="Fern", days="2 days", location=" in the kitchen", location_title="The kitchen", owner="")
            for t in reminder_messages.templates_for("friendly", BAND_OVERDUE)
            if "{owner}" not in t
        ]


def test_selection_is_stable_for_a_plant_and_day():
    plant = make_plant(personality_type="grumpy")
    first = reminder_messages.fallback_message(plant, 4, BAND_OVERDUE, owner_name="Sam", today=TODAY)
    second = reminder_messages.fallback_message(plant, 4, BAND_OVERDUE, owner_name="Sam", today=TODAY)
    assert first == second


def test_unknown_archetype_uses_friendly_set():
    plant = make_plant(personality_type="pirate", name="Polly", location=None)
    message = reminder_messages.fallback_message(plant, 1, BAND_DUE_TODAY, today=TODAY)
    expected = [
        t.format(name="Polly", days="1 day", location="", location_title="This pot", owner="")
        for t in reminder_messages.FALLBACK_TEMPLATES["friendly"][BAND_DUE_TODAY]
        if "{owner}" not in t
    ]
    assert message in expected


def test_unknown_band_uses_upcoming_templates():
    assert reminder_messages.templates_for("zen", "someday") == reminder_messages.FALLBACK_TEMPLATES["zen"][BAND_UPCOMING]
