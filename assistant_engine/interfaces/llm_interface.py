"""Interface definition for Large Language Model (LLM) services.
"""

from typing import Protocol, List, Any, Literal, Optional, runtime_checkable

from pydantic import BaseModel, Field

from assistant_engine.database.models import ChatMessage

class LLMServiceError(RuntimeError):
    """Raised when the model call itself fails (unreachable host, bad credentials, API error).

    Malformed model *output* is never reported this way; callers only need
    to handle this error to know the operation did not happen at all.
    """

class ContentSegment(BaseModel):
    """One piece of a model response, tagged as visible text or internal reasoning."""
    type: Literal["text", "thinking"] = "text"
    text: str = ""

class LLMResponse(BaseModel):
    """A model response composed of one or more content segments."""
    segments: List[ContentSegment] = Field(default_factory=list)
    model: Optional[str] = None

    @property
    def text(self) -> str:
        """Concatenation of the visible-text segments only."""
        return "".join(segment.text for segment in self.segments if segment.type == "text")

    @property
    def thinking(self) -> str:
        return "".join(segment.text for segment in self.segments if segment.type == "thinking")

@runtime_checkable
class LLMInterface(Protocol):
    """A protocol defining the standard interface for LLM interactions.

    This ensures that different LLM backends (Ollama, OpenAI-compatible APIs)
    can be used interchangeably.
    """

    def chat(
        self,
        messages: List[ChatMessage],
        system: str | None = None,
        model: str | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generates a response for a system instruction plus a conversation.

        Args:
            messages: The conversation so far (user/assistant turns).
            system: Optional system instruction.
            model: The specific model to use (optional, uses default if None).
            **kwargs: Backend options such as max_tokens or temperature.

        Returns:
            An LLMResponse with the text and reasoning segments of the reply.

        Raises:
            LLMServiceError: If the backend could not be reached or rejected the call.
        """
        ...
