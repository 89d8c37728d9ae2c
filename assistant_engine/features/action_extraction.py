"""Service layer for extracting action items from brain dumps.

Input-agnostic: the text may come from a typed thought dump or a voice
transcript. Reasoning is delegated to the configured LLM; its reply is then
parsed and validated deterministically.
"""

import json
import logging
from typing import List

from assistant_engine.interfaces.llm_interface import LLMInterface
from assistant_engine.database.models import ChatMessage
from assistant_engine.features.actions_models import ExtractedAction
from assistant_engine.features.actions_utils import (
    collect_visible_text,
    strip_code_fences,
    find_json_array,
    check_action_element,
)
from assistant_engine.core.config import get_settings

logger = logging.getLogger(__name__)

EXTRACTION_SYSTEM_PROMPT = """You are an executive assistant. Extract action items from the user's raw thoughts or brain dump.

Return a JSON array of actions. Each action must have:
- type: one of "calendar", "email", "task"
- title: short action title
- description: one line describing what to do (e.g. "Tomorrow at 2pm with marketing@company.com", "Re: Project update to client@example.com")
- canAutomate: true if we can create a calendar event, send an email, or create a task; false for manual-only items
- details: optional extra context (e.g. draft subject line, suggested time)

Be concise. Only output valid JSON, no markdown or extra text."""

def extract_action_items(raw_text: str, llm_service: LLMInterface) -> List[ExtractedAction]:
    """Extracts calendar, email and task items from free text.

    Args:
        raw_text: A typed brain dump or a voice transcript.
        llm_service: An instance of an LLM service (conforming to LLMInterface).

    Returns:
        The extracted actions in the order the model listed them. Empty when
        the input is blank or the model reply holds nothing usable.

    Raises:
        LLMServiceError: If the model call itself fails. Malformed model
            output never raises.
    """
    if not raw_text or raw_text.isspace():
        logger.info("Input text is empty. No action items to extract.")
        return []

    settings = get_settings()
    messages = [ChatMessage(role="user", content=f"Extract action items from this:\n\n{raw_text.strip()}")]

    response = llm_service.chat(
        messages=messages,
        system=EXTRACTION_SYSTEM_PROMPT,
        max_tokens=settings.extraction_max_tokens,
    )
    text = collect_visible_text(response, source="action-extraction")
    logger.debug(f"[action-extraction] raw model output ({len(text)} chars): {text!r}")

    candidate = find_json_array(strip_code_fences(text))
    if not candidate:
        logger.warning(f"[action-extraction] No JSON array in model output. Raw: {text!r}")
        return []

    try:
        parsed = json.loads(candidate)
    except (ValueError, RecursionError) as e:
        logger.error(f"[action-extraction] JSON parse error: {e}. Attempted to parse: {candidate!r}")
        return []

    if not isinstance(parsed, list):
        logger.warning(f"[action-extraction] Expected a JSON array, got {type(parsed).__name__}.")
        return []

    actions: List[ExtractedAction] = []
    for index, element in enumerate(parsed):
        check = check_action_element(element)
        if check.accepted and check.action is not None:
            actions.append(check.action)
        else:
            logger.debug(f"[action-extraction] Dropping element {index}: {check.reason}")

    logger.info(f"Extracted {len(actions)} action item(s) from {len(parsed)} model element(s).")
    return actions
