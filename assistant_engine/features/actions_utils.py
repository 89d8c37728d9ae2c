"""Shared helpers for action extraction and structured-reply parsing.

Covers collecting visible model text, locating JSON in free-form replies,
checking and normalizing model-returned action elements, and mapping
extracted items onto the stored record shapes.
"""

import json
import logging
import re
from datetime import date, datetime
from typing import Any, Optional

from assistant_engine.interfaces.llm_interface import LLMResponse
from assistant_engine.features.actions_models import ActionCheck, ExtractedAction

logger = logging.getLogger(__name__)

ACTION_TYPES = ("calendar", "email", "task")
REQUIRED_ACTION_KEYS = ("type", "title", "description")

# Leading ``` / ```json and trailing ``` markers around a whole response
CODE_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$")
# Greedy: first "[" through last "]"
JSON_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")
TIME_OF_DAY_PATTERN = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)", re.IGNORECASE)

def collect_visible_text(response: LLMResponse, source: str = "llm") -> str:
    """Joins the visible-text segments of a response.

    Reasoning segments are logged for diagnostics and otherwise ignored.
    """
    for segment in response.segments:
        if segment.type == "thinking" and segment.text:
            logger.debug(f"[{source}] Thinking:\n{segment.text}")
    return response.text

def strip_code_fences(text: str) -> str:
    """Removes a leading ```/```json marker and a trailing ``` marker."""
    return CODE_FENCE_PATTERN.sub("", text.strip()).strip()

def find_json_array(text: str) -> Optional[str]:
    """Returns the bracketed substring from the first '[' to the last ']', if any.

    A text that already is a JSON array is returned unchanged.
    """
    match = JSON_ARRAY_PATTERN.search(text)
    return match.group(0) if match else None

def coerce_text(value: Any) -> str:
    """Coerces a JSON value to a display string; null becomes ''."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value)

def normalize_action(element: dict) -> ExtractedAction:
    """Maps an already-checked element onto an ExtractedAction.

    This is the single place where optional-field defaults are applied:
    title/description default to '', canAutomate defaults to True and
    details is left out when absent or null.
    """
    can_automate = element.get("canAutomate")
    details = element.get("details")
    return ExtractedAction(
        type=element["type"],
        title=coerce_text(element.get("title")),
        description=coerce_text(element.get("description")),
        can_automate=True if can_automate is None else bool(can_automate),
        details=None if details is None else coerce_text(details),
    )

def check_action_element(element: Any) -> ActionCheck:
    """Checks the shape of one element of the model's JSON array.

    Never raises: a bad element produces a rejected ActionCheck so the rest
    of the batch survives.
    """
    if not isinstance(element, dict):
        return ActionCheck(accepted=False, reason=f"expected an object, got {type(element).__name__}")
    missing = [key for key in REQUIRED_ACTION_KEYS if key not in element]
    if missing:
        return ActionCheck(accepted=False, reason=f"missing keys: {', '.join(missing)}")
    action_type = element["type"]
    if not isinstance(action_type, str) or action_type not in ACTION_TYPES:
        return ActionCheck(accepted=False, reason=f"unsupported type {action_type!r}")
    return ActionCheck(accepted=True, action=normalize_action(element))

# --- Mapping onto stored records ---

def to_store_action_type(action_type: str) -> str:
    """Maps a conversation action type onto the stored action type."""
    if action_type in ("calendar", "agenda"):
        return "calendar_event"
    return action_type

def normalize_status(status: Optional[str]) -> str:
    """Only scheduled/completed are kept from model output; everything else is pending."""
    if status in ("scheduled", "completed"):
        return status
    return "pending"

def parse_time_to_date(time_str: str, today: Optional[date] = None) -> datetime:
    """Parses a time like '2:00 PM' into a datetime on `today`.

    Falls back to midnight when the string has no recognizable time.
    """
    today = today or date.today()
    base = datetime(today.year, today.month, today.day)
    match = TIME_OF_DAY_PATTERN.search(time_str or "")
    if not match:
        return base
    hours = int(match.group(1))
    minutes = int(match.group(2))
    period = match.group(3).upper()
    if period == "PM" and hours != 12:
        hours += 12
    if period == "AM" and hours == 12:
        hours = 0
    try:
        return base.replace(hour=hours, minute=minutes)
    except ValueError:
        logger.warning(f"Time '{time_str}' is out of range, using midnight.")
        return base
