"""Pydantic models for extracted action items and structured assistant output."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Literal

ExtractedActionType = Literal["calendar", "email", "task"]
ConversationActionType = Literal["calendar", "email", "task", "agenda"]
ConversationActionStatus = Literal["scheduled", "pending", "completed"]
AgendaItemType = Literal["meeting", "call", "review", "focus"]

class ExtractedAction(BaseModel):
    """One action item extracted from a brain dump."""
    model_config = ConfigDict(populate_by_name=True)

    type: ExtractedActionType
    title: str = ""
    description: str = ""
    can_automate: bool = Field(default=True, alias="canAutomate")
    details: Optional[str] = None

class ActionCheck(BaseModel):
    """Outcome of checking one model-returned element.

    Either `accepted` with the normalized action, or rejected with a reason.
    """
    accepted: bool
    action: Optional[ExtractedAction] = None
    reason: Optional[str] = None

# --- Structured output embedded in assistant replies ---

class StructuredAction(BaseModel):
    type: ConversationActionType
    title: str
    description: str = ""
    status: Optional[ConversationActionStatus] = None

class AgendaItemOutput(BaseModel):
    time: str # e.g. "2:00 PM"
    title: str
    type: AgendaItemType
    duration: str = "30 min"

class ConversationStructuredOutput(BaseModel):
    """The JSON payload an assistant reply may end with."""
    model_config = ConfigDict(populate_by_name=True)

    actions: Optional[List[StructuredAction]] = None
    agenda_items: Optional[List[AgendaItemOutput]] = Field(default=None, alias="agendaItems")

class ParsedReply(BaseModel):
    """An assistant reply split into its spoken text and optional structured payload."""
    model_config = ConfigDict(populate_by_name=True)

    reply_text: str = Field(default="", alias="replyText")
    structured: Optional[ConversationStructuredOutput] = None
