"""
Shared test fixtures for the greenhearts test suite.

Provides:
- A pinned "today" and a plant factory with due dates relative to it
- In-memory message store and scripted generator for ReminderCache tests
- Flask app/client built with TestConfig and a temp reminder cache file
- A logged-in client (session token verified through a patched Supabase call)
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, List, Optional
from unittest.mock import patch

import pytest

from greenhearts.services.reminder_cache import ReminderCache
from greenhearts.utils.cache import clear_all_plant_cache

# Wednesday
TODAY = date(2025, 3, 12)
USER_ID = "11111111-2222-4333-8444-555555555555"


class InMemoryStore:
    """Durable-store double: records every save."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None, fail_save: bool = False, fail_load: bool = False):
        self.data = dict(initial or {})
        self.saves: List[Dict[str, Any]] = []
        self.fail_save = fail_save
        self.fail_load = fail_load

    def load(self):
        if self.fail_load:
            raise ValueError("corrupt file")
        return dict(self.data)

    def save(self, entries):
        if self.fail_save:
            raise OSError("disk full")
        self.saves.append(dict(entries))
        self.data = dict(entries)


class ScriptedGenerator:
    """Generator double: returns canned text (or raises) and records every context."""

    def __init__(self, reply: Any = "Water me, please!"):
        self.reply = reply
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, context):
        self.calls.append(dict(context))
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


class FixedRandom:
    def __init__(self, value: float):
        self.value = value

    def random(self):
        return self.value


def make_plant(plant_id: str = "p1", name: str = "Fern", due_in: Optional[int] = 0, **fields) -> Dict[str, Any]:
    """Plant dict whose next_watering_date is `due_in` days from TODAY (None = no schedule)."""
    plant = {
        "id": plant_id,
        "name": name,
        "species": "Boston fern",
        "location": "Kitchen",
        "health": "good",
        "personality_type": "dramatic",
        "watering_frequency_days": 7,
        "last_watered": None,
        "next_watering_date": None,
    }
    if due_in is not None:
        due = TODAY + timedelta(days=due_in)
        plant["next_watering_date"] = due.isoformat()
        plant["last_watered"] = (due - timedelta(days=7)).isoformat()
    plant.update(fields)
    return plant


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def generator():
    return ScriptedGenerator()


@pytest.fixture
def make_cache(store, generator):
    """Factory for a ReminderCache pinned to TODAY (owner name never drawn by default)."""
    caches = []

    def _make(rng_value: float = 0.99, clock=None, **kwargs):
        cache = ReminderCache(
            kwargs.pop("store", store),
            kwargs.pop("generator", generator),
            rng=FixedRandom(rng_value),
            clock=clock or (lambda: TODAY),
            **kwargs,
        )
        caches.append(cache)
        return cache

    yield _make

    for cache in caches:
        cache.shutdown()


@pytest.fixture
def app(tmp_path, monkeypatch):
    from greenhearts.config import TestConfig

    monkeypatch.setenv("APP_CONFIG", "greenhearts.config.TestConfig")
    monkeypatch.setattr(TestConfig, "REMINDER_CACHE_PATH", str(tmp_path / "reminder_messages.json"))
    monkeypatch.setattr(TestConfig, "SUPABASE_URL", "")
    monkeypatch.setattr(TestConfig, "SUPABASE_ANON_KEY", "")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    clear_all_plant_cache()

    from greenhearts import create_app

    app = create_app()
    yield app

    app.extensions["reminder_cache"].shutdown()
    clear_all_plant_cache()


@pytest.fixture
def pinned_cache(app, make_cache, generator):
    """Swap the app's reminder cache for one pinned to TODAY with a scripted generator."""
    cache = make_cache()
    app.extensions["reminder_cache"] = cache
    return cache


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(app, pinned_cache):
    """Test client with a session whose token verifies as USER_ID."""
    client = app.test_client()
    with client.session_transaction() as sess:
        sess["access_token"] = "test-access-token"
        sess["refresh_token"] = "test-refresh-token"

    with patch("greenhearts.services.supabase_client.verify_session", return_value={"id": USER_ID}):
        yield client


AJAX = {"X-Requested-With": "XMLHttpRequest"}
