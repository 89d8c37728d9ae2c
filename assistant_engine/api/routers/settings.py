"""API Router for reading and overriding the LLM settings at runtime."""

import logging

from fastapi import APIRouter, Depends

from assistant_engine.api.models import LLMSettingsResponse, LLMSettingsUpdate
from assistant_engine.core.config import Settings, get_settings, set_ui_override
from assistant_engine.core.dependencies import reset_singletons

logger = logging.getLogger(__name__)
router = APIRouter()

def _to_response(settings: Settings) -> LLMSettingsResponse:
    return LLMSettingsResponse(
        llm_provider=settings.llm_provider,
        ollama_base_url=settings.ollama_base_url,
        default_model=settings.default_model,
        openai_chat_model_name=settings.OPENAI_CHAT_MODEL_NAME,
    )

@router.get("/settings/llm", response_model=LLMSettingsResponse)
def get_llm_settings(settings: Settings = Depends(get_settings)):
    """Returns the effective LLM settings."""
    return _to_response(settings)

@router.post("/settings/llm", response_model=LLMSettingsResponse)
def update_llm_settings(update: LLMSettingsUpdate):
    """Persists the given overrides and rebuilds the LLM client on next use."""
    logger.info(f"Received LLM settings update: {update.model_dump(exclude_none=True)}")
    if update.ollama_base_url is not None:
        set_ui_override("ollama_base_url", update.ollama_base_url)
    if update.default_model is not None:
        set_ui_override("default_model", update.default_model)
    if update.openai_chat_model_name is not None:
        set_ui_override("OPENAI_CHAT_MODEL_NAME", update.openai_chat_model_name)
    reset_singletons()
    return _to_response(get_settings())
