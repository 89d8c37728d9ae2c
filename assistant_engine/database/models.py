"""Pydantic models representing database objects.

These models are used for data validation and structuring when interacting
with the database CRUD operations.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any, Literal
from datetime import datetime

StoreActionType = Literal["calendar_event", "email", "task"]
StoreActionStatus = Literal["scheduled", "sent", "pending", "failed", "completed"]
AgendaType = Literal["meeting", "call", "review", "focus"]

class ActionCreate(BaseModel):
    """Model for creating a new action record in the database."""
    session_id: str = "voice"
    type: StoreActionType
    title: str
    description: str = ""
    payload: Dict[str, Any] = Field(default_factory=dict)
    status: StoreActionStatus = "pending"

class Action(ActionCreate):
    """Model representing an action retrieved from the database.

    Includes database-generated fields like id and timestamp.
    """
    id: int
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)

class AgendaItemCreate(BaseModel):
    """Model for creating a new agenda entry in the database."""
    time: str
    title: str
    type: AgendaType
    duration: str = "30 min"
    date: datetime

class AgendaItem(AgendaItemCreate):
    """Model representing an agenda entry retrieved from the database."""
    id: int

    model_config = ConfigDict(from_attributes=True)

# === Chat Message Model ===

class ChatMessage(BaseModel):
    """Model representing a single message in a chat conversation.

    Used for interacting with LLM chat endpoints.
    """
    role: Literal["user", "assistant"] = Field(..., description="The role of the message sender.")
    content: str = Field(..., description="The content of the message.")
