"""Pydantic models for API request and response bodies.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from assistant_engine.database.models import ChatMessage, StoreActionStatus
from assistant_engine.features.actions_models import ExtractedAction, ConversationStructuredOutput

GENERIC_FAILURE_MESSAGE = "The assistant is unavailable right now. Please try again."
NO_ACTIONS_MESSAGE = "No action items found. Try being more specific."
TRANSCRIPTION_FAILURE_MESSAGE = "Couldn't transcribe the recording. Please try again."
EMPTY_AUDIO_MESSAGE = "The uploaded recording is empty."

class ExtractRequest(BaseModel):
    """A brain dump or voice transcript to extract action items from."""
    text: str = Field(..., description="Raw thoughts, typed or transcribed.")

class ExtractResponse(BaseModel):
    actions: List[ExtractedAction]
    message: Optional[str] = Field(None, description="Set when nothing was found.")

class TranscribeResponse(BaseModel):
    """A transcript and, when requested, the actions extracted from it."""
    model_config = ConfigDict(populate_by_name=True)

    text: str
    language_code: Optional[str] = Field(None, alias="languageCode")
    actions: Optional[List[ExtractedAction]] = None
    message: Optional[str] = Field(None, description="Set when extraction found nothing.")

class SaveActionsRequest(BaseModel):
    actions: List[ExtractedAction] = Field(..., min_length=1)

class SaveActionsResponse(BaseModel):
    ids: List[int]

class ActionStatusUpdate(BaseModel):
    status: StoreActionStatus

class ConversationRequest(BaseModel):
    messages: List[ChatMessage] = Field(..., min_length=1, description="Conversation so far, ending with the user's turn.")
    persist: bool = Field(True, description="Save the actions and agenda items of the reply.")

class ConversationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reply_text: str = Field(..., alias="replyText")
    structured: Optional[ConversationStructuredOutput] = None
    saved_action_ids: List[int] = Field(default_factory=list, alias="savedActionIds")
    saved_agenda_ids: List[int] = Field(default_factory=list, alias="savedAgendaIds")

class LLMSettingsResponse(BaseModel):
    llm_provider: str
    ollama_base_url: str
    default_model: str
    openai_chat_model_name: str

class LLMSettingsUpdate(BaseModel):
    """Runtime overrides; an empty string clears the override."""
    ollama_base_url: Optional[str] = None
    default_model: Optional[str] = None
    openai_chat_model_name: Optional[str] = None
