"""Unit tests for chatbot_service."""
from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from navaspurthi.services import chatbot_service
from navaspurthi.services.chatbot_service import (
    FALLBACK_TEXT,
    REPLY_AI,
    REPLY_FALLBACK,
    REPLY_QUICK,
    WorkingModelCache,
    answer_question,
    build_festival_context,
    find_quick_response,
    get_suggestions,
)

CHAT_URL = "https://api.openai.com/v1/chat/completions"


def completion(text):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = text
    return response


def not_found_error():
    response = httpx.Response(404, request=httpx.Request("POST", CHAT_URL))
    return openai.NotFoundError("model not found", response=response, body=None)


@pytest.fixture
def model_cache(monkeypatch):
    """Fresh model cache with two candidates."""
    cache = WorkingModelCache(["model-a", "model-b"])
    monkeypatch.setattr(chatbot_service, "_model_cache", cache)
    return cache


class TestWorkingModelCache:
    """Test WorkingModelCache."""

    def test_starts_empty(self):
        cache = WorkingModelCache(["a", "b"])
        assert cache.get() is None
        assert cache.ordered_candidates() == ["a", "b"]

    def test_remember_moves_model_first(self):
        cache = WorkingModelCache(["a", "b"])
        cache.remember("b")
        assert cache.get() == "b"
        assert cache.ordered_candidates() == ["b", "a"]

    def test_invalidate(self):
        cache = WorkingModelCache(["a"])
        cache.remember("a")
        cache.invalidate()
        assert cache.get() is None

    def test_duplicate_candidates_dropped(self):
        cache = WorkingModelCache(["a", "a", "", "b"])
        assert cache.candidates == ["a", "b"]


class TestQuickResponses:
    """Test keyword matching."""

    def test_venue_keyword(self):
        assert "Vidyanagar" in find_quick_response("Where is the venue?")

    def test_events_answer_lists_policy_table(self):
        answer = find_quick_response("What events are available?")
        assert "Cricket" in answer
        assert "Photography" in answer

    def test_keyword_must_start_a_word(self):
        assert find_quick_response("Which rules apply to cricket?") is None

    @pytest.mark.parametrize("message", [
        "What is the history of this fest?",
        "Is his entry valid?",
        "Are you hiring volunteers?",
    ])
    def test_keyword_must_end_a_word(self, message):
        assert find_quick_response(message) is None

    def test_plural_keywords(self):
        assert "prizes worth" in find_quick_response("What are the prizes?")
        assert find_quick_response("How many teams can join?") == find_quick_response("team size")

    def test_greeting_still_matches(self):
        assert find_quick_response("Hi!").startswith("Hi there")

    def test_no_match(self):
        assert find_quick_response("Tell me about cricket rules") is None

    def test_suggestions(self):
        assert "How do I register?" in get_suggestions()


class TestAnswerQuestion:
    """Test answer_question function."""

    def test_empty_message_raises(self):
        with pytest.raises(ValueError, match="Message is required"):
            answer_question("   ")

    def test_quick_reply(self):
        reply = answer_question("hello there")
        assert reply.type == REPLY_QUICK

    def test_fallback_without_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        reply = answer_question("Tell me about cricket rules")

        assert reply.type == REPLY_FALLBACK
        assert reply.text == FALLBACK_TEXT

    @patch('navaspurthi.services.chatbot_service.OpenAI')
    def test_ai_reply_remembers_model(self, mock_openai, monkeypatch, model_cache):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        client = mock_openai.return_value
        client.chat.completions.create.return_value = completion("Cricket needs 11 players.")

        reply = answer_question("Tell me about cricket rules")

        assert reply.type == REPLY_AI
        assert reply.text == "Cricket needs 11 players."
        assert reply.model == "model-a"
        assert model_cache.get() == "model-a"
        messages = client.chat.completions.create.call_args.kwargs["messages"]
        assert "Cricket" in messages[0]["content"]

    @patch('navaspurthi.services.chatbot_service.OpenAI')
    def test_missing_model_tries_next_candidate(self, mock_openai, monkeypatch, model_cache):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        client = mock_openai.return_value
        client.chat.completions.create.side_effect = [not_found_error(), completion("Answer")]

        reply = answer_question("Tell me about cricket rules")

        assert reply.model == "model-b"
        assert model_cache.get() == "model-b"

    @patch('navaspurthi.services.chatbot_service.OpenAI')
    def test_api_failure_invalidates_and_falls_back(self, mock_openai, monkeypatch, model_cache):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        model_cache.remember("model-a")
        client = mock_openai.return_value
        client.chat.completions.create.side_effect = openai.APIConnectionError(
            request=httpx.Request("POST", CHAT_URL)
        )

        reply = answer_question("Tell me about cricket rules")

        assert reply.type == REPLY_FALLBACK
        assert model_cache.get() is None

    @patch('navaspurthi.services.chatbot_service.OpenAI')
    def test_empty_completion_falls_back(self, mock_openai, monkeypatch, model_cache):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        mock_openai.return_value.chat.completions.create.return_value = completion("  ")

        reply = answer_question("Tell me about cricket rules")

        assert reply.type == REPLY_FALLBACK


class TestFestivalContext:
    def test_context_includes_team_sizes(self):
        context = build_festival_context()
        assert "Cricket" in context
        assert "team size exactly 11" in context
