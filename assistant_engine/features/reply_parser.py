"""Splits an assistant reply into spoken text and its trailing JSON payload.

The assistant emits one text stream: a natural-language reply, optionally
followed by a fenced ```json block listing the actions and agenda items it
created. The UI speaks the text and renders the payload.
"""

import json
import logging
from typing import Any, List, NamedTuple, Optional

from pydantic import ValidationError

from assistant_engine.features.actions_models import (
    AgendaItemOutput,
    ConversationStructuredOutput,
    ParsedReply,
    StructuredAction,
)

logger = logging.getLogger(__name__)

FENCE = "```"
LANGUAGE_TAG = "json"

class FencedBlock(NamedTuple):
    start: int
    end: int
    content: str

def find_fenced_blocks(text: str) -> List[FencedBlock]:
    """Collects every ```...``` block in `text`, in order of appearance.

    An optional `json` tag right after the opening fence is not part of the
    content. An opening fence with no closing fence does not form a block.
    """
    blocks: List[FencedBlock] = []
    position = 0
    while True:
        start = text.find(FENCE, position)
        if start == -1:
            break
        content_start = start + len(FENCE)
        if text.startswith(LANGUAGE_TAG, content_start):
            content_start += len(LANGUAGE_TAG)
        close = text.find(FENCE, content_start)
        if close == -1:
            break
        end = close + len(FENCE)
        blocks.append(FencedBlock(start=start, end=end, content=text[content_start:close].strip()))
        position = end
    return blocks

def _validated_items(raw_items: Any, model: type, field_name: str) -> Optional[list]:
    """Validates list entries one at a time, dropping the ones that do not fit."""
    if raw_items is None:
        return None
    if not isinstance(raw_items, list):
        logger.debug(f"Structured output field '{field_name}' is not a list; ignoring it.")
        return None
    items = []
    for index, raw_item in enumerate(raw_items):
        try:
            items.append(model.model_validate(raw_item))
        except ValidationError as e:
            logger.debug(f"Dropping {field_name}[{index}]: {e.error_count()} validation error(s).")
    return items

def build_structured_output(payload: dict) -> ConversationStructuredOutput:
    """Builds the structured output from a parsed JSON object."""
    return ConversationStructuredOutput(
        actions=_validated_items(payload.get("actions"), StructuredAction, "actions"),
        agenda_items=_validated_items(payload.get("agendaItems"), AgendaItemOutput, "agendaItems"),
    )

def parse_structured_output(reply: str) -> ParsedReply:
    """Splits an assistant reply into reply text and structured output.

    The last fenced block wins, regardless of any text after it. Everything
    from that block's opening fence onwards is removed from the reply text.
    A block that is not a JSON object yields no structured output; it is
    still removed from the visible reply.

    Never raises.
    """
    trimmed = (reply or "").strip()
    blocks = find_fenced_blocks(trimmed)
    if not blocks:
        return ParsedReply(reply_text=trimmed, structured=None)

    last_block = max(blocks, key=lambda block: block.start)
    reply_text = trimmed[:last_block.start].strip()

    try:
        payload = json.loads(last_block.content)
    except (ValueError, RecursionError) as e:
        logger.info(f"Ignoring fenced block with invalid JSON: {e}")
        return ParsedReply(reply_text=reply_text, structured=None)

    if not isinstance(payload, dict):
        logger.info(f"Ignoring fenced block whose JSON is a {type(payload).__name__}, not an object.")
        return ParsedReply(reply_text=reply_text, structured=None)

    return ParsedReply(reply_text=reply_text, structured=build_structured_output(payload))
