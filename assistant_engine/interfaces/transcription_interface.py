"""Interface definition for speech-to-text services."""

from typing import Protocol, Optional, runtime_checkable

from pydantic import BaseModel

from assistant_engine.interfaces.llm_interface import LLMServiceError

class TranscriptionError(LLMServiceError):
    """Raised when the speech-to-text call fails (missing key, unreachable host, API error)."""

class TranscriptionResult(BaseModel):
    """The transcript of one recording."""
    text: str
    language_code: Optional[str] = None
    language_probability: Optional[float] = None

@runtime_checkable
class TranscriptionInterface(Protocol):
    """Turns a recorded voice note into text."""

    def transcribe(
        self,
        audio: bytes,
        filename: str = "recording.webm",
        content_type: str = "audio/webm",
        language_code: Optional[str] = None,
    ) -> TranscriptionResult:
        """Transcribes one audio file.

        Raises:
            TranscriptionError: If the backend could not be reached or rejected the call.
        """
        ...
