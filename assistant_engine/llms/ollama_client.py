"""Implementation of the LLMInterface using the Ollama API.
"""

import logging
import httpx
import ollama
from typing import List, Dict, Any

from assistant_engine.interfaces.llm_interface import LLMInterface, LLMResponse, ContentSegment, LLMServiceError
from assistant_engine.database.models import ChatMessage
from assistant_engine.core.config import Settings

logger = logging.getLogger(__name__)

class OllamaClient(LLMInterface):
    """Connects to a local Ollama instance to provide LLM capabilities.

    Implements the LLMInterface protocol.
    """

    def __init__(self, settings: Settings):
        """Initializes the Ollama client.

        Args:
            settings: The application settings containing Ollama configuration.
        """
        self.client = ollama.Client(host=settings.ollama_base_url)
        self.default_model = settings.default_model
        self.think = settings.ollama_think
        logger.info(f"Ollama client initialized for host: {settings.ollama_base_url}")

    @staticmethod
    def _build_options(kwargs: Dict[str, Any]) -> Dict[str, Any]:
        """Maps generic generation kwargs onto Ollama's options dict."""
        options = dict(kwargs.get("options", {}))
        if kwargs.get("max_tokens") is not None:
            options["num_predict"] = kwargs["max_tokens"]
        if kwargs.get("temperature") is not None:
            options["temperature"] = kwargs["temperature"]
        return options

    def chat(
        self,
        messages: List[ChatMessage],
        system: str | None = None,
        model: str | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generates a chat response using the Ollama /api/chat endpoint.

        Args:
            messages: A list of ChatMessage Pydantic models.
            system: Optional system instruction, sent as the first message.
            model: The model to use (defaults to settings.default_model).
            **kwargs: max_tokens, temperature or raw Ollama `options`.

        Returns:
            An LLMResponse; a `thinking` field on the reply becomes a
            reasoning segment, `content` becomes the visible text segment.

        Raises:
            LLMServiceError: If Ollama is unreachable or returns an error.
        """
        target_model = model or self.default_model

        message_dicts = [msg.model_dump() for msg in messages]
        if system:
            message_dicts.insert(0, {"role": "system", "content": system})

        try:
            logger.debug(f"Generating chat response with model '{target_model}'. History length: {len(message_dicts)}")
            response = self.client.chat(
                model=target_model,
                messages=message_dicts,
                options=self._build_options(kwargs),
                think=self.think or None,
                stream=False # Ensure we get the full response
            )
        except ollama.ResponseError as e:
            logger.error(f"Ollama API error during chat: {e.status_code} - {e.error}")
            raise LLMServiceError(f"Ollama API error: {e.error}") from e
        except (httpx.HTTPError, ConnectionError) as e:
            logger.error(f"Could not reach Ollama during chat: {e}")
            raise LLMServiceError(f"Could not reach Ollama: {e}") from e

        assistant_message = response.get('message', {}) or {}
        segments: List[ContentSegment] = []
        thinking = assistant_message.get('thinking') or ""
        if thinking:
            segments.append(ContentSegment(type="thinking", text=thinking))
        content = assistant_message.get('content') or ""
        segments.append(ContentSegment(type="text", text=content))
        logger.debug(f"Generated chat response (first 50 chars): '{content[:50]}...'")
        return LLMResponse(segments=segments, model=target_model)
