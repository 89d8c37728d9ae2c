"""Unit tests for the action extraction service."""

import json
import pytest
from unittest.mock import MagicMock

from assistant_engine.features.action_extraction import extract_action_items, EXTRACTION_SYSTEM_PROMPT
from assistant_engine.core.config import Settings
from assistant_engine.interfaces.llm_interface import LLMInterface, LLMResponse, ContentSegment, LLMServiceError

WELL_FORMED = [
    {"type": "calendar", "title": "Marketing sync", "description": "Tomorrow at 2pm", "canAutomate": True},
    {"type": "email", "title": "Project update", "description": "Re: status to client@example.com", "canAutomate": False, "details": "Subject: Weekly update"},
    {"type": "task", "title": "Review report", "description": "By Friday"},
]

def text_response(text: str) -> LLMResponse:
    return LLMResponse(segments=[ContentSegment(type="text", text=text)])

@pytest.fixture
def mock_llm_service():
    """Fixture for a mocked LLMInterface."""
    return MagicMock(spec=LLMInterface)

@pytest.fixture(autouse=True)
def fixed_settings(monkeypatch):
    settings = Settings(_env_file=None)
    settings.extraction_max_tokens = 512
    monkeypatch.setattr('assistant_engine.features.action_extraction.get_settings', lambda: settings)
    return settings

def test_extract_empty_input_skips_model(mock_llm_service):
    assert extract_action_items("", mock_llm_service) == []
    assert extract_action_items("   \n\t ", mock_llm_service) == []
    assert extract_action_items(None, mock_llm_service) == []
    mock_llm_service.chat.assert_not_called()

def test_extract_well_formed_array_preserves_order(mock_llm_service):
    mock_llm_service.chat.return_value = text_response(json.dumps(WELL_FORMED))

    result = extract_action_items("Lots to do this week.", mock_llm_service)

    assert [action.title for action in result] == ["Marketing sync", "Project update", "Review report"]
    assert [action.type for action in result] == ["calendar", "email", "task"]
    assert result[1].can_automate is False
    assert result[1].details == "Subject: Weekly update"
    assert result[0].details is None
    mock_llm_service.chat.assert_called_once()

def test_extract_sends_prompt_and_trimmed_text(mock_llm_service, fixed_settings):
    mock_llm_service.chat.return_value = text_response("[]")

    extract_action_items("  email Dana about the budget  ", mock_llm_service)

    kwargs = mock_llm_service.chat.call_args.kwargs
    assert kwargs["system"] == EXTRACTION_SYSTEM_PROMPT
    assert kwargs["max_tokens"] == fixed_settings.extraction_max_tokens
    assert len(kwargs["messages"]) == 1
    assert kwargs["messages"][0].role == "user"
    assert kwargs["messages"][0].content == "Extract action items from this:\n\nemail Dana about the budget"

def test_extract_defaults_can_automate_to_true(mock_llm_service):
    mock_llm_service.chat.return_value = text_response(
        '[{"type": "task", "title": "Buy milk", "description": "On the way home"},'
        ' {"type": "task", "title": "Call mum", "description": "", "canAutomate": null}]'
    )

    result = extract_action_items("buy milk, call mum", mock_llm_service)

    assert len(result) == 2
    assert all(action.can_automate is True for action in result)

def test_extract_drops_unknown_types_only(mock_llm_service):
    items = [
        {"type": "reminder", "title": "Dry cleaning", "description": "Pick up"},
        {"type": "task", "title": "Finish slides", "description": "For Monday"},
        {"type": "Calendar", "title": "Wrong case", "description": "x"},
    ]
    mock_llm_service.chat.return_value = text_response(json.dumps(items))

    result = extract_action_items("stuff", mock_llm_service)

    assert len(result) == 1
    assert result[0].title == "Finish slides"

def test_extract_drops_malformed_elements(mock_llm_service):
    items = [
        "just a string",
        42,
        None,
        ["nested"],
        {"type": "task", "title": "No description"},
        {"type": "email", "title": "Good one", "description": "Send it"},
    ]
    mock_llm_service.chat.return_value = text_response(json.dumps(items))

    result = extract_action_items("stuff", mock_llm_service)

    assert len(result) == 1
    assert result[0].title == "Good one"

def test_extract_coerces_missing_values(mock_llm_service):
    mock_llm_service.chat.return_value = text_response(
        '[{"type": "task", "title": null, "description": 3, "details": 15}]'
    )

    result = extract_action_items("stuff", mock_llm_service)

    assert result[0].title == ""
    assert result[0].description == "3"
    assert result[0].details == "15"

def test_extract_fenced_response_matches_unwrapped(mock_llm_service):
    payload = json.dumps(WELL_FORMED)
    mock_llm_service.chat.return_value = text_response(payload)
    plain = extract_action_items("stuff", mock_llm_service)

    mock_llm_service.chat.return_value = text_response(f"```json\n{payload}\n```")
    fenced_json = extract_action_items("stuff", mock_llm_service)

    mock_llm_service.chat.return_value = text_response(f"```\n{payload}\n```")
    fenced_plain = extract_action_items("stuff", mock_llm_service)

    assert plain == fenced_json == fenced_plain
    assert len(plain) == 3

def test_extract_finds_array_after_prose(mock_llm_service):
    mock_llm_service.chat.return_value = text_response(
        'Sure! Here are your actions:\n[{"type": "task", "title": "Book flights", "description": "For March"}]\nLet me know.'
    )

    result = extract_action_items("book flights", mock_llm_service)

    assert len(result) == 1
    assert result[0].title == "Book flights"

def test_extract_prose_only_returns_empty(mock_llm_service):
    mock_llm_service.chat.return_value = text_response("I couldn't find anything actionable in that.")
    assert extract_action_items("hmm", mock_llm_service) == []

def test_extract_invalid_json_returns_empty(mock_llm_service):
    mock_llm_service.chat.return_value = text_response('[{"type": "task", "title": "Broken",]')
    assert extract_action_items("stuff", mock_llm_service) == []

def test_extract_oversized_number_returns_empty(mock_llm_service):
    reply = '[{"type": "task", "title": "a", "description": "b", "details": ' + '9' * 5000 + '}]'
    mock_llm_service.chat.return_value = text_response(reply)
    assert extract_action_items("stuff", mock_llm_service) == []

def test_extract_deeply_nested_array_returns_empty(mock_llm_service):
    mock_llm_service.chat.return_value = text_response('[' * 100000 + ']' * 100000)
    assert extract_action_items("stuff", mock_llm_service) == []

def test_extract_object_reply_without_array_returns_empty(mock_llm_service):
    mock_llm_service.chat.return_value = text_response('{"type": "task", "title": "Lonely", "description": "x"}')
    assert extract_action_items("stuff", mock_llm_service) == []

def test_extract_ignores_thinking_segments(mock_llm_service):
    mock_llm_service.chat.return_value = LLMResponse(segments=[
        ContentSegment(type="thinking", text='Maybe [{"type": "task", "title": "Wrong", "description": "x"}]'),
        ContentSegment(type="text", text='[{"type": "email", "title": "Right", '),
        ContentSegment(type="text", text='"description": "y"}]'),
    ])

    result = extract_action_items("stuff", mock_llm_service)

    assert len(result) == 1
    assert result[0].title == "Right"

def test_extract_empty_model_reply(mock_llm_service):
    mock_llm_service.chat.return_value = LLMResponse(segments=[])
    assert extract_action_items("stuff", mock_llm_service) == []

def test_extract_propagates_llm_errors(mock_llm_service):
    mock_llm_service.chat.side_effect = LLMServiceError("invalid credentials")

    with pytest.raises(LLMServiceError):
        extract_action_items("This will fail.", mock_llm_service)
