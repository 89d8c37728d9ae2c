"""Implementation of the LLMInterface for OpenAI-compatible chat completion APIs.

Works against api.openai.com and compatible providers (e.g. MiniMax) via
`OPENAI_BASE_URL`.
"""

import logging
import re
from typing import List, Any

import openai
from openai import OpenAI

from assistant_engine.interfaces.llm_interface import LLMInterface, LLMResponse, ContentSegment, LLMServiceError
from assistant_engine.database.models import ChatMessage
from assistant_engine.core.config import Settings

logger = logging.getLogger(__name__)

# Some reasoning models inline their reasoning in the content
THINK_BLOCK_PATTERN = re.compile(r"<think>(.*?)</think>", re.DOTALL)

def split_inline_reasoning(content: str) -> List[ContentSegment]:
    """Splits `<think>...</think>` regions out of a content string into reasoning segments."""
    segments: List[ContentSegment] = []
    position = 0
    for match in THINK_BLOCK_PATTERN.finditer(content):
        if match.start() > position:
            segments.append(ContentSegment(type="text", text=content[position:match.start()]))
        segments.append(ContentSegment(type="thinking", text=match.group(1).strip()))
        position = match.end()
    if position < len(content):
        segments.append(ContentSegment(type="text", text=content[position:]))
    return segments

class OpenAIChatClient(LLMInterface):
    """Chat client for OpenAI-compatible endpoints.

    Implements the LLMInterface protocol.
    """

    def __init__(self, settings: Settings):
        self.default_model = settings.OPENAI_CHAT_MODEL_NAME
        self.client = None
        if settings.OPENAI_API_KEY:
            self.client = OpenAI(api_key=settings.OPENAI_API_KEY, base_url=settings.OPENAI_BASE_URL)
            logger.info(f"OpenAI-compatible client initialized (base_url={settings.OPENAI_BASE_URL or 'default'}).")
        else:
            logger.warning("OPENAI_API_KEY is not set. Chat calls will fail until it is configured.")

    def chat(
        self,
        messages: List[ChatMessage],
        system: str | None = None,
        model: str | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generates a chat completion.

        Args:
            messages: A list of ChatMessage Pydantic models.
            system: Optional system instruction.
            model: The model to use (defaults to settings.OPENAI_CHAT_MODEL_NAME).
            **kwargs: max_tokens and temperature are forwarded.

        Returns:
            An LLMResponse. `reasoning_content` (when the provider sends it)
            and inline `<think>` blocks become reasoning segments.

        Raises:
            LLMServiceError: If the API key is missing or the API call fails.
        """
        if self.client is None:
            raise LLMServiceError("OPENAI_API_KEY is not set")

        target_model = model or self.default_model
        message_dicts = [msg.model_dump() for msg in messages]
        if system:
            message_dicts.insert(0, {"role": "system", "content": system})

        request_args = {"model": target_model, "messages": message_dicts}
        if kwargs.get("max_tokens") is not None:
            request_args["max_tokens"] = kwargs["max_tokens"]
        if kwargs.get("temperature") is not None:
            request_args["temperature"] = min(2.0, max(0.0, kwargs["temperature"]))

        try:
            logger.debug(f"Sending chat completion to model '{target_model}'. History length: {len(message_dicts)}")
            completion = self.client.chat.completions.create(**request_args)
        except openai.APIError as e:
            logger.error(f"OpenAI-compatible API error during chat: {e}")
            raise LLMServiceError(f"Chat completion failed: {e}") from e

        if not completion.choices:
            logger.warning(f"Chat completion from '{target_model}' returned no choices.")
            return LLMResponse(segments=[], model=target_model)

        message = completion.choices[0].message
        segments: List[ContentSegment] = []
        reasoning = getattr(message, "reasoning_content", None)
        if reasoning:
            segments.append(ContentSegment(type="thinking", text=reasoning))
        segments.extend(split_inline_reasoning(message.content or ""))
        return LLMResponse(segments=segments, model=target_model)
