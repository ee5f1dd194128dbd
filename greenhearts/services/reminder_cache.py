"""
Daily reminder message cache.

Keeps one reminder message per plant per calendar day:

    {plant_id: {"message": str, "generated_on": "YYYY-MM-DD", "source": "ai" | "fallback"}}

An entry is valid only on the day it was generated; the next day the plant
gets a fresh message the first time it is requested. Messages come from the
AI provider when possible and from the fallback template table otherwise, so
every due plant always ends up with something to show.

The cache is an explicit object created by the app factory
(init_reminder_cache) and stored in app.extensions. It mirrors every change to
a local JSON file so messages survive restarts.

Generation is strictly sequential: one provider request at a time, and
background batches run on a single worker thread so two pages asking for
overlapping plants never trigger duplicate requests.
"""

from __future__ import annotations
import json
import logging
import os
import random
import tempfile
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional

from flask import current_app, has_app_context

from . import schedule
from .reminder_messages import fallback_message

logger = logging.getLogger(__name__)

# Message result states
STATUS_PENDING = "pending"
STATUS_GENERATED = "generated"
STATUS_FALLBACK = "fallback"

SOURCE_AI = "ai"
SOURCE_FALLBACK = "fallback"

DEFAULT_OWNER_NAME_PROBABILITY = 0.4


def _safe_log_error(message: str) -> None:
    """Safely log an error, handling cases where no app context exists (e.g., background thread)."""
    if has_app_context():
        current_app.logger.error(message)
    else:
        logger.error(message)


def _safe_log_warning(message: str) -> None:
    if has_app_context():
        current_app.logger.warning(message)
    else:
        logger.warning(message)


class JsonFileMessageStore:
    """Durable mirror of the reminder cache as a single JSON file."""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> Dict[str, Dict[str, Any]]:
        """Read all entries. A missing file is an empty cache."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}

        if not isinstance(data, dict):
            raise ValueError(f"Reminder cache file {self.path} does not contain an object")
        return data

    def save(self, entries: Dict[str, Dict[str, Any]]) -> None:
        """Replace the file contents atomically (write temp file, then rename)."""
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(prefix=".reminders-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(entries, f, ensure_ascii=False, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


def _valid_entry(entry: Any) -> bool:
    return (
        isinstance(entry, dict)
        and isinstance(entry.get("message"), str)
        and bool(entry["message"])
        and schedule.to_calendar_day(entry.get("generated_on")) is not None
    )


class ReminderCache:
    """
    Per-plant, per-day reminder messages with AI generation and template fallback.

    Args:
        store: Durable store with load() and save(entries)
        generator: Callable taking a plant context dict and returning message text;
                   any exception means "use the fallback"
        rng: Random source with random(); decides whether the owner's name is used
        clock: Callable returning today's date
        owner_name_probability: Chance the owner's display name is included
    """

    def __init__(
        self,
        store,
        generator: Callable[[Dict[str, Any]], str],
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], date]] = None,
        owner_name_probability: float = DEFAULT_OWNER_NAME_PROBABILITY,
    ):
        self._store = store
        self._generator = generator
        self._rng = rng or random.Random()
        self._clock = clock or date.today
        self._owner_name_probability = min(max(owner_name_probability, 0.0), 1.0)

        self._entries: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()        # guards self._entries
        self._batch_lock = threading.Lock()  # one generation batch at a time
        self._executor: Optional[ThreadPoolExecutor] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> int:
        """
        Load entries from the durable store (call once at startup).

        Unreadable files are logged and treated as an empty cache.

        Returns:
            Number of entries loaded
        """
        try:
            raw = self._store.load()
        except Exception as e:
            _safe_log_error(f"[ReminderCache] Failed to load message cache: {e}")
            raw = {}

        entries = {str(pid): dict(entry) for pid, entry in raw.items() if _valid_entry(entry)}
        with self._lock:
            self._entries = entries
        return len(entries)

    def shutdown(self) -> None:
        """Stop the background worker (waits for a running batch to finish)."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def today(self) -> date:
        return self._clock()

    def _entry_for_today(self, plant_id: str, day: Optional[date] = None) -> Optional[Dict[str, Any]]:
        with self._lock:
            entry = self._entries.get(plant_id)
        if not entry:
            return None
        if schedule.to_calendar_day(entry.get("generated_on")) != (day or self.today()):
            return None
        return entry

    def needs_message(self, plant: Dict[str, Any]) -> bool:
        """True when the plant has no message generated today."""
        return self._entry_for_today(str(plant.get("id"))) is None

    def get_message(self, plant: Dict[str, Any]) -> Optional[str]:
        """Today's message for the plant, or None if nothing has been generated yet."""
        entry = self._entry_for_today(str(plant.get("id")))
        return entry["message"] if entry else None

    def get_result(self, plant: Dict[str, Any]) -> Dict[str, Optional[str]]:
        """
        Message plus its state for rendering.

        Returns:
            {"status": "pending" | "generated" | "fallback", "message": str | None}
        """
        entry = self._entry_for_today(str(plant.get("id")))
        if not entry:
            return {"status": STATUS_PENDING, "message": None}
        status = STATUS_GENERATED if entry.get("source") == SOURCE_AI else STATUS_FALLBACK
        return {"status": status, "message": entry["message"]}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _persist(self) -> None:
        with self._lock:
            snapshot = {pid: dict(entry) for pid, entry in self._entries.items()}
        try:
            self._store.save(snapshot)
        except Exception as e:
            _safe_log_error(f"[ReminderCache] Failed to save message cache: {e}")

    def _put(self, plant_id: str, message: str, source: str, day: date) -> None:
        with self._lock:
            self._entries[plant_id] = {
                "message": message,
                "generated_on": day.isoformat(),
                "source": source,
            }
        self._persist()

    def clear(self) -> None:
        """Drop every cached message (explicit reset, logout)."""
        with self._lock:
            self._entries = {}
        self._persist()

    def forget(self, plant_id: str) -> None:
        """Drop the message for one plant (plant deleted)."""
        with self._lock:
            removed = self._entries.pop(str(plant_id), None)
        if removed is not None:
            self._persist()

    def forget_many(self, plant_ids: Iterable[Any]) -> int:
        """
        Drop the messages for several plants (one user's collection).

        Returns:
            Number of entries removed
        """
        with self._lock:
            removed = [pid for pid in {str(p) for p in plant_ids} if self._entries.pop(pid, None) is not None]
        if removed:
            self._persist()
        return len(removed)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def _build_context(self, plant: Dict[str, Any], overdue: int, include_owner: bool) -> Dict[str, Any]:
        context = {
            "name": plant.get("name") or "",
            "species": plant.get("species") or "plant",
            "personality_type": plant.get("personality_type"),
            "days_overdue": overdue,
            "location": plant.get("location") or None,
        }
        if include_owner:
            context["owner_name"] = plant.get("owner_display_name")
        return context

    def _message_for(self, plant: Dict[str, Any], day: date) -> tuple[str, str]:
        """Produce (message, source) for one plant. Never raises."""
        overdue = schedule.days_overdue(plant, day)
        band = schedule.urgency_band(plant, day)

        owner_name = (plant.get("owner_display_name") or "").strip()
        # Drawn on every attempt, so regenerations may or may not use the name
        include_owner = bool(owner_name) and self._rng.random() < self._owner_name_probability

        if plant.get("personality_type"):
            try:
                text = self._generator(self._build_context(plant, overdue, include_owner))
                if isinstance(text, str) and text.strip():
                    return text.strip(), SOURCE_AI
                _safe_log_warning(f"[ReminderCache] Empty generated message for plant {plant.get('id')}")
            except Exception as e:
                _safe_log_warning(f"[ReminderCache] Generation failed for plant {plant.get('id')}: {e}")

        message = fallback_message(
            plant,
            overdue,
            band,
            owner_name=owner_name if include_owner else None,
            today=day,
        )
        return message, SOURCE_FALLBACK

    def ensure_messages_for(self, plants: Iterable[Dict[str, Any]]) -> Dict[str, int]:
        """
        Make sure every plant has a message for today.

        Plants that already have today's message are skipped without any
        provider call or store write. The rest are processed one at a time;
        a failure for one plant never stops the batch.

        Args:
            plants: Plant dicts (usually the ones due today or overdue)

        Returns:
            Counts: {"generated": n, "fallback": n, "skipped": n}
        """
        summary = {"generated": 0, "fallback": 0, "skipped": 0}
        plant_list: List[Dict[str, Any]] = [p for p in plants or [] if p and p.get("id") is not None]

        if all(not self.needs_message(p) for p in plant_list):
            summary["skipped"] = len(plant_list)
            return summary

        with self._batch_lock:
            day = self.today()
            seen = set()
            for plant in plant_list:
                plant_id = str(plant["id"])
                # Re-check inside the lock against the batch day: an earlier batch may have filled it
                if plant_id in seen or self._entry_for_today(plant_id, day) is not None:
                    summary["skipped"] += 1
                    continue
                seen.add(plant_id)

                message, source = self._message_for(plant, day)
                self._put(plant_id, message, source, day)
                summary["generated" if source == SOURCE_AI else "fallback"] += 1

        return summary

    def schedule_messages_for(self, plants: Iterable[Dict[str, Any]]) -> Future:
        """
        Run ensure_messages_for on the background worker.

        Returns immediately with a Future resolving to the batch summary.
        Batches queue behind each other on a single worker thread.
        """
        plant_list = [dict(p) for p in plants or []]
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="reminder-cache")
        future = self._executor.submit(self.ensure_messages_for, plant_list)
        future.add_done_callback(_log_batch_failure)
        return future


def _log_batch_failure(future: Future) -> None:
    error = future.exception()
    if error is not None:
        logger.error(f"[ReminderCache] Background batch failed: {error}")


# ----------------------------------------------------------------------
# App wiring
# ----------------------------------------------------------------------

def init_reminder_cache(app) -> ReminderCache:
    """
    Create the app's reminder cache, load it from disk and register it.

    Call this from the Flask app factory.
    """
    from .ai import generate_water_message

    # Batches run on a worker thread without app context; provider keys live in app config
    def generate_with_app_context(context: Dict[str, Any]) -> str:
        with app.app_context():
            return generate_water_message(context)

    cache = ReminderCache(
        JsonFileMessageStore(app.config["REMINDER_CACHE_PATH"]),
        generate_with_app_context,
        owner_name_probability=app.config.get("REMINDER_OWNER_NAME_PROBABILITY", DEFAULT_OWNER_NAME_PROBABILITY),
    )
    loaded = cache.load()
    app.extensions["reminder_cache"] = cache
    app.logger.info(f"[ReminderCache] Loaded {loaded} cached reminder message(s)")
    return cache


def get_reminder_cache() -> ReminderCache:
    """The reminder cache registered on the current app."""
    return current_app.extensions["reminder_cache"]
