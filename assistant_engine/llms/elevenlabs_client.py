"""Speech-to-text backend for the ElevenLabs Scribe API.

Turns a recorded voice thought dump into text that the extraction service
can work on.
"""

import logging
from typing import Dict, Optional

import httpx

from assistant_engine.core.config import Settings
from assistant_engine.interfaces.transcription_interface import (
    TranscriptionInterface,
    TranscriptionResult,
    TranscriptionError,
)

logger = logging.getLogger(__name__)

def _error_message(response: httpx.Response) -> str:
    """Pulls a readable message out of an ElevenLabs error response."""
    message = f"ElevenLabs STT failed: {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        if response.text:
            message += f" {response.text[:200]}"
        return message
    if isinstance(body, dict):
        detail = body.get("detail")
        if isinstance(detail, dict) and detail.get("message"):
            return str(detail["message"])
        if body.get("message"):
            return str(body["message"])
    return message

class ElevenLabsTranscriber(TranscriptionInterface):
    """Batch speech-to-text client.

    Implements the TranscriptionInterface protocol.
    """

    REQUEST_TIMEOUT = 120.0

    def __init__(self, settings: Settings, http_client: Optional[httpx.Client] = None):
        self.api_key = settings.ELEVENLABS_API_KEY
        self.model_id = settings.ELEVENLABS_STT_MODEL
        self.url = settings.ELEVENLABS_STT_URL
        self.http_client = http_client or httpx.Client(timeout=self.REQUEST_TIMEOUT)
        if not self.api_key:
            logger.warning("ELEVENLABS_API_KEY is not set. Transcription calls will fail until it is configured.")

    def close(self):
        """Close the underlying HTTP client."""
        self.http_client.close()
        logger.info("ElevenLabs HTTP client closed.")

    def transcribe(
        self,
        audio: bytes,
        filename: str = "recording.webm",
        content_type: str = "audio/webm",
        language_code: Optional[str] = None,
    ) -> TranscriptionResult:
        """Uploads one recording and returns its transcript.

        Raises:
            TranscriptionError: On a missing API key, a transport failure, an
                error status, or a response without a transcript.
        """
        if not self.api_key:
            raise TranscriptionError("ELEVENLABS_API_KEY is not set")

        data: Dict[str, str] = {"model_id": self.model_id}
        if language_code:
            data["language_code"] = language_code
        files = {"file": (filename, audio, content_type)}

        logger.info(f"Sending {len(audio)} bytes of audio ({content_type}) to ElevenLabs model {self.model_id}.")
        try:
            response = self.http_client.post(
                self.url,
                headers={"xi-api-key": self.api_key},
                data=data,
                files=files,
            )
        except httpx.HTTPError as e:
            logger.error(f"ElevenLabs request failed: {e}", exc_info=True)
            raise TranscriptionError(f"ElevenLabs request failed: {e}") from e

        if response.is_error:
            message = _error_message(response)
            logger.error(f"ElevenLabs returned {response.status_code}: {message}")
            raise TranscriptionError(message)

        try:
            result = TranscriptionResult.model_validate(response.json())
        except ValueError as e:
            logger.error(f"Unexpected ElevenLabs response body: {e}")
            raise TranscriptionError("ElevenLabs returned no transcript") from e

        logger.debug(f"Transcript ({len(result.text)} chars, language={result.language_code}): {result.text!r}")
        return result
