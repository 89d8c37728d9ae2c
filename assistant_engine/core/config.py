"""Configuration module for the Personal Assistant Engine.

This module handles all application configuration using pydantic-settings,
with support for persistent UI overrides via a JSON file.
"""

import logging
import json
from pathlib import Path
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Dict, Any
from pydantic import Field

# Explicitly load .env file BEFORE BaseSettings reads environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# --- Persistent UI Overrides ---
# Settings changed from the dashboard are stored in a JSON file
UI_SETTINGS_FILENAME = "ui_settings.json"
DATA_DIR = Path("./data")
UI_SETTINGS_PATH = DATA_DIR / UI_SETTINGS_FILENAME

# Only these settings may be overridden at runtime
OVERRIDABLE_SETTINGS = ("ollama_base_url", "default_model", "OPENAI_CHAT_MODEL_NAME")

def _load_ui_overrides() -> Dict[str, Any]:
    """Loads UI override settings from the JSON file."""
    if UI_SETTINGS_PATH.exists():
        try:
            with open(UI_SETTINGS_PATH, 'r') as f:
                overrides = json.load(f)
                logger.debug(f"Loaded UI overrides from {UI_SETTINGS_PATH}: {overrides}")
                if not isinstance(overrides, dict):
                    logger.warning(f"Ignoring UI settings file {UI_SETTINGS_PATH}: expected a JSON object.")
                    return {}
                return overrides
        except (json.JSONDecodeError, IOError) as e:
            logger.error(f"Error reading UI settings file {UI_SETTINGS_PATH}: {e}", exc_info=True)
    return {}

def _save_ui_overrides(overrides: Dict[str, Any]):
    """Saves UI override settings to the JSON file."""
    try:
        DATA_DIR.mkdir(parents=True, exist_ok=True)
        with open(UI_SETTINGS_PATH, 'w') as f:
            json.dump(overrides, f, indent=2)
        logger.debug(f"Saved UI overrides to {UI_SETTINGS_PATH}: {overrides}")
    except IOError as e:
        logger.error(f"Error writing UI settings file {UI_SETTINGS_PATH}: {e}", exc_info=True)
# -----------------------------

class Settings(BaseSettings):
    """Application settings class.

    Settings are loaded from environment variables (and `.env`) with
    appropriate defaults.
    """

    # Application settings
    environment: str = "development"
    debug: bool = False
    log_level: str = Field(default="INFO", description="Root log level for the application.")

    # Database settings (caller-side persistence of actions and agenda items)
    database_url: str = Field(default="sqlite:///./data/assistant_engine.db", description="Database connection string.")

    # LLM settings
    llm_provider: str = Field(default="ollama", description="LLM provider ('ollama' or 'openai')")
    ollama_base_url: str = Field(default="http://localhost:11434", description="Base URL for the Ollama API server.")
    default_model: str = Field(default="llama3.1:latest", description="Default Ollama model to use.")
    ollama_think: bool = Field(default=False, description="Ask Ollama for a separate reasoning segment (thinking models only).")

    # --- OpenAI-compatible API settings (OpenAI, MiniMax, ...) ---
    OPENAI_API_KEY: Optional[str] = Field(
        default=None,
        description="API key for the OpenAI-compatible chat endpoint."
    )
    OPENAI_BASE_URL: Optional[str] = Field(
        default=None,
        description="Base URL of an OpenAI-compatible endpoint, e.g. https://api.minimax.io/v1. None uses api.openai.com."
    )
    OPENAI_CHAT_MODEL_NAME: str = Field(
        default="gpt-4o-mini",
        description="Chat model used when llm_provider is 'openai'."
    )

    # --- Speech-to-text (ElevenLabs Scribe) ---
    ELEVENLABS_API_KEY: Optional[str] = Field(
        default=None,
        description="API key for ElevenLabs speech-to-text."
    )
    ELEVENLABS_STT_MODEL: str = Field(default="scribe_v2", description="ElevenLabs transcription model.")
    ELEVENLABS_STT_URL: str = Field(
        default="https://api.elevenlabs.io/v1/speech-to-text",
        description="ElevenLabs speech-to-text endpoint."
    )

    # --- Generation limits ---
    extraction_max_tokens: int = Field(default=1024, description="Token limit for the action extraction call.", gt=0)
    assistant_max_tokens: int = Field(default=1024, description="Token limit for a conversational assistant reply.", gt=0)
    assistant_temperature: float = Field(default=0.7, description="Sampling temperature for conversational replies.", ge=0.0, le=2.0)

    # API Server Configuration (for uvicorn)
    api_host: str = Field(default="0.0.0.0", description="Host for the FastAPI server.")
    api_port: int = Field(default=8000, description="Port for the FastAPI server.")
    api_reload: bool = Field(default=False, description="Enable auto-reload for the FastAPI server (development).")
    api_log_level: str = Field(default="info", description="Log level for the FastAPI server.")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra='ignore'
    )

def set_ui_override(key: str, value: Optional[str]):
    """Sets (or clears, when value is empty) a runtime override and persists it.

    Raises:
        ValueError: If the key is not an overridable setting.
    """
    if key not in OVERRIDABLE_SETTINGS:
        raise ValueError(f"Setting '{key}' cannot be overridden at runtime.")
    clean_value = value.strip() if value else None
    overrides = _load_ui_overrides()
    if clean_value:
        overrides[key] = clean_value
        _save_ui_overrides(overrides)
        logger.info(f"UI Override Persisted: {key} set to: {clean_value}")
    elif key in overrides:
        del overrides[key]
        _save_ui_overrides(overrides)
        logger.info(f"UI Override Removed: {key} reverted to default.")
    else:
        logger.warning(f"Attempted to set empty override for {key}.")

def get_settings() -> Settings:
    """Get application settings, applying persisted UI overrides.

    Loads base settings from environment/.env, then applies overrides
    found in data/ui_settings.json.

    Returns:
        Settings: The application settings instance with overrides applied.
    """
    settings = Settings()

    ui_overrides = _load_ui_overrides()
    for key in OVERRIDABLE_SETTINGS:
        if key not in ui_overrides:
            continue
        override_value = ui_overrides[key]
        if not isinstance(override_value, str) or not override_value.strip():
            logger.warning(f"Could not apply UI override for {key}: invalid value '{override_value}'.")
            continue
        if override_value != getattr(settings, key):
            logger.debug(f"Applying UI override for {key}: '{override_value}' (Original: '{getattr(settings, key)}')")
            setattr(settings, key, override_value)

    return settings
