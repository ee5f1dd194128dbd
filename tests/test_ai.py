"""Tests for reminder message generation through the LiteLLM router."""

from unittest.mock import MagicMock, patch

import pytest

from greenhearts.services import ai
from greenhearts.services.ai import GenerationError

CONTEXT = {
    "name": "Fern",
    "species": "Boston fern",
    "personality_type": "Dramatic",
    "days_overdue": 3,
    "location": "Kitchen",
}


def _router_reply(content, model="gpt-4o-mini"):
    router = MagicMock()
    resp = MagicMock()
    resp.choices[0].message.content = content
    resp.model = model
    router.completion.return_value = resp
    return router


@pytest.fixture(autouse=True)
def _reset_router(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    ai._clear_router_cache()
    yield
    ai._clear_router_cache()


class TestPrompt:
    def test_overdue_prompt(self):
        prompt = ai.build_water_message_prompt(CONTEXT)
        assert "You are Fern, a Boston fern with a dramatic personality." in prompt
        assert "3 days overdue" in prompt
        assert "kitchen" in prompt
        assert "Address your owner" not in prompt

    def test_due_today_prompt_with_owner(self):
        prompt = ai.build_water_message_prompt(dict(CONTEXT, days_overdue=0, owner_name="Sam"))
        assert "Today is your watering day." in prompt
        assert "Address your owner, Sam, by name." in prompt

    def test_one_day_is_singular(self):
        assert "1 day overdue" in ai.build_water_message_prompt(dict(CONTEXT, days_overdue=1))


class TestGenerateWaterMessage:
    def test_no_keys_raises(self):
        with pytest.raises(GenerationError):
            ai.generate_water_message(CONTEXT)
        assert "OPENAI_API_KEY" in ai.AI_LAST_ERROR

    def test_returns_trimmed_text_and_records_provider(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        router = _router_reply('  "I am PARCHED, darling!"  ')
        with patch("greenhearts.services.ai._get_litellm_router", return_value=(router, None)):
            text = ai.generate_water_message(CONTEXT)

        assert text == "I am PARCHED, darling!"
        assert ai.AI_LAST_PROVIDER == "openai"
        assert router.completion.call_args.kwargs["model"] == "primary-gpt"

    def test_gemini_only_uses_fallback_model(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "g-test")
        router = _router_reply("Water, please.", model="gemini/gemini-flash-latest")
        with patch("greenhearts.services.ai._get_litellm_router", return_value=(router, None)):
            ai.generate_water_message(CONTEXT)

        assert router.completion.call_args.kwargs["model"] == "fallback-gemini"
        assert ai.AI_LAST_PROVIDER == "gemini"

    def test_provider_error_raises(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        router = MagicMock()
        router.completion.side_effect = RuntimeError("rate limited")
        with patch("greenhearts.services.ai._get_litellm_router", return_value=(router, None)):
            with pytest.raises(GenerationError):
                ai.generate_water_message(CONTEXT)
        assert ai.AI_LAST_ERROR == "rate limited"

    def test_empty_reply_raises(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        with patch("greenhearts.services.ai._get_litellm_router", return_value=(_router_reply(""), None)):
            with pytest.raises(GenerationError):
                ai.generate_water_message(CONTEXT)


def test_long_reply_is_cut_at_sentence_boundary():
    text = "Water me now. " * 40
    trimmed = ai._trim_message(text)
    assert len(trimmed) <= ai.MAX_MESSAGE_LENGTH
    assert trimmed.endswith(".")
