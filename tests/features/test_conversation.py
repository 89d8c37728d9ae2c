"""Unit tests for the assistant conversation turn."""

import pytest
from unittest.mock import MagicMock

from assistant_engine.features.conversation import respond_to_conversation, ASSISTANT_SYSTEM_PROMPT
from assistant_engine.core.config import Settings
from assistant_engine.database.models import ChatMessage
from assistant_engine.interfaces.llm_interface import LLMInterface, LLMResponse, ContentSegment, LLMServiceError

@pytest.fixture
def mock_llm_service():
    return MagicMock(spec=LLMInterface)

@pytest.fixture(autouse=True)
def fixed_settings(monkeypatch):
    settings = Settings(_env_file=None)
    settings.assistant_max_tokens = 300
    settings.assistant_temperature = 0.4
    monkeypatch.setattr('assistant_engine.features.conversation.get_settings', lambda: settings)
    return settings

def test_respond_splits_reply_and_payload(mock_llm_service):
    mock_llm_service.chat.return_value = LLMResponse(segments=[
        ContentSegment(type="thinking", text="User wants a meeting."),
        ContentSegment(type="text", text='Got it, booked.\n```json\n{"actions":[{"type":"calendar","title":"Sync","description":"2pm","status":"scheduled"}]}\n```'),
    ])
    history = [ChatMessage(role="user", content="Book a sync with marketing at 2pm")]

    parsed = respond_to_conversation(history, mock_llm_service)

    assert parsed.reply_text == "Got it, booked."
    assert parsed.structured.actions[0].title == "Sync"

def test_respond_passes_prompt_and_generation_settings(mock_llm_service, fixed_settings):
    mock_llm_service.chat.return_value = LLMResponse(segments=[ContentSegment(text="What time works?")])
    history = [
        ChatMessage(role="user", content="Set up a call"),
        ChatMessage(role="assistant", content="With whom?"),
        ChatMessage(role="user", content="With Priya"),
    ]

    parsed = respond_to_conversation(history, mock_llm_service)

    assert parsed.reply_text == "What time works?"
    assert parsed.structured is None
    mock_llm_service.chat.assert_called_once_with(
        messages=history,
        system=ASSISTANT_SYSTEM_PROMPT,
        max_tokens=300,
        temperature=0.4,
    )

def test_respond_requires_messages(mock_llm_service):
    with pytest.raises(ValueError):
        respond_to_conversation([], mock_llm_service)
    mock_llm_service.chat.assert_not_called()

def test_respond_propagates_llm_errors(mock_llm_service):
    mock_llm_service.chat.side_effect = LLMServiceError("unreachable")
    with pytest.raises(LLMServiceError):
        respond_to_conversation([ChatMessage(role="user", content="hi")], mock_llm_service)
