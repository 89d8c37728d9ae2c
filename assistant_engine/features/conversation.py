"""One turn of the voice-first assistant conversation."""

import logging
from typing import List

from assistant_engine.interfaces.llm_interface import LLMInterface
from assistant_engine.database.models import ChatMessage
from assistant_engine.features.actions_models import ParsedReply
from assistant_engine.features.actions_utils import collect_visible_text
from assistant_engine.features.reply_parser import parse_structured_output
from assistant_engine.core.config import get_settings

logger = logging.getLogger(__name__)

ASSISTANT_SYSTEM_PROMPT = """You are a voice-first executive assistant. The user speaks freely; you turn their brain dumps into clear understanding and real actions.

Behavior:
- Be conversational and voice-first. Keep replies concise enough to speak naturally (a few sentences).
- Always reflect what you heard before acting or asking questions ("Here's what I heard...").
- Ask at most 2 clarifying questions when something is ambiguous.
- Use a calm, confident, slightly sassy tone. Push back politely when the user is vague or avoiding action.
- Prioritize action over perfection. When you have enough to act, say what you'll do (calendar, email, tasks, agenda).
- Do not repeat long lists back; summarize and confirm.

When you create or plan concrete actions (calendar events, emails, tasks) or agenda items, you MUST append a JSON block at the very end of your reply so the UI can show them. Use this exact format and put nothing after it:

```json
{"actions":[{"type":"calendar","title":"Marketing Team Sync","description":"Tomorrow at 2:00 PM","status":"scheduled"}],"agendaItems":[{"time":"2:00 PM","title":"Marketing Sync","type":"meeting","duration":"30 min"}]}
```

Rules for the JSON block:
- "actions": array of items you created or will create. type is one of: calendar, email, task, agenda. status is one of: scheduled, pending, completed. title and description are short strings.
- "agendaItems": array of calendar/agenda entries. time (e.g. "2:00 PM"), title, type (meeting, call, review, focus), duration (e.g. "30 min").
- Only include the block when you actually created or confirmed at least one action or agenda item. Omit the entire block if you're only asking questions or reflecting.
- Your spoken reply should be natural; the JSON is for the UI only."""

def respond_to_conversation(messages: List[ChatMessage], llm_service: LLMInterface) -> ParsedReply:
    """Asks the assistant for its next reply and splits off the structured payload.

    Args:
        messages: The conversation so far, ending with the user's latest turn.
        llm_service: An instance of an LLM service (conforming to LLMInterface).

    Raises:
        ValueError: If `messages` is empty.
        LLMServiceError: If the model call fails.
    """
    if not messages:
        raise ValueError("A conversation needs at least one message.")

    settings = get_settings()
    response = llm_service.chat(
        messages=messages,
        system=ASSISTANT_SYSTEM_PROMPT,
        max_tokens=settings.assistant_max_tokens,
        temperature=settings.assistant_temperature,
    )
    reply = collect_visible_text(response, source="conversation")
    parsed = parse_structured_output(reply)
    if parsed.structured is not None:
        logger.info(
            f"Assistant reply carried {len(parsed.structured.actions or [])} action(s) "
            f"and {len(parsed.structured.agenda_items or [])} agenda item(s)."
        )
    return parsed
