"""Dependencies module for the Personal Assistant Engine.

This module defines FastAPI dependencies used throughout the application.
"""

import sqlite3
import logging
from pathlib import Path

from fastapi import Depends

from assistant_engine.core.config import Settings, get_settings
from assistant_engine.database.crud import initialize_schema
from assistant_engine.interfaces.llm_interface import LLMInterface
from assistant_engine.interfaces.transcription_interface import TranscriptionInterface
from assistant_engine.llms.elevenlabs_client import ElevenLabsTranscriber
from assistant_engine.llms.ollama_client import OllamaClient
from assistant_engine.llms.openai_client import OpenAIChatClient

logger = logging.getLogger(__name__)

# --- Singleton instances for services (cached per application lifecycle) ---
_llm_service: LLMInterface | None = None
_db_connection: sqlite3.Connection | None = None
_transcription_service: ElevenLabsTranscriber | None = None
# ---------------------------------------------------------------------------

def database_path(settings: Settings) -> Path:
    """Resolves the sqlite file path from settings.database_url.

    Raises:
        ValueError: If the URL is not of the form sqlite:///path.
    """
    db_url = settings.database_url
    if not db_url.startswith("sqlite:///"):
        raise ValueError(f"Invalid database_url format: {db_url}. Expected 'sqlite:///path/to/db.sqlite'")
    return Path(db_url[len("sqlite:///"):]).resolve()

def get_db() -> sqlite3.Connection:
    """Provides the singleton database connection instance.

    The connection is opened (and the schema ensured) on first use.
    """
    global _db_connection

    if _db_connection is not None:
        try:
            _db_connection.total_changes # Accessing this property checks if connection is usable
        except sqlite3.ProgrammingError as e:
            logger.error(f"Database connection appears closed or invalid in get_db: {e}. Reconnecting.")
            _db_connection = None

    if _db_connection is None:
        db_path = database_path(get_settings())
        db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            _db_connection = sqlite3.connect(str(db_path), check_same_thread=False)
            _db_connection.row_factory = sqlite3.Row
            initialize_schema(_db_connection)
            logger.info(f"DB connection established at {db_path}.")
        except sqlite3.Error as e:
            logger.critical(f"Failed to establish DB connection in get_db: {e}", exc_info=True)
            raise RuntimeError(f"Database connection could not be established: {e}")

    return _db_connection

def create_llm_service(settings: Settings) -> LLMInterface:
    """Builds the LLM backend named by settings.llm_provider.

    Raises:
        ValueError: For an unknown provider.
    """
    provider = settings.llm_provider.lower()
    if provider == "ollama":
        logger.info(f"Creating OllamaClient singleton instance for host: {settings.ollama_base_url}")
        return OllamaClient(settings=settings)
    if provider == "openai":
        logger.info(f"Creating OpenAIChatClient singleton instance for model: {settings.OPENAI_CHAT_MODEL_NAME}")
        return OpenAIChatClient(settings=settings)
    raise ValueError(f"Unknown llm_provider '{settings.llm_provider}'. Expected 'ollama' or 'openai'.")

def get_llm_service(settings: Settings = Depends(get_settings)) -> LLMInterface:
    """Provides the singleton LLMInterface instance, using injected settings."""
    global _llm_service
    if _llm_service is None:
        _llm_service = create_llm_service(settings)
    return _llm_service

def get_transcription_service(settings: Settings = Depends(get_settings)) -> TranscriptionInterface:
    """Provides the singleton speech-to-text client."""
    global _transcription_service
    if _transcription_service is None:
        logger.info(f"Creating ElevenLabsTranscriber singleton instance for model: {settings.ELEVENLABS_STT_MODEL}")
        _transcription_service = ElevenLabsTranscriber(settings=settings)
    return _transcription_service

def reset_singletons():
    """Resets service singletons that depend on configurable settings."""
    global _llm_service
    if _llm_service is not None:
        logger.info("Resetting LLM service singleton due to settings change.")
        _llm_service = None
    else:
        logger.info("reset_singletons called, but no relevant services needed resetting.")

def close_db():
    """Closes the shared database connection, if open."""
    global _db_connection
    if _db_connection is not None:
        _db_connection.close()
        _db_connection = None
        logger.info("Database connection closed.")

def close_transcription_service():
    """Closes the speech-to-text HTTP client, if one was created."""
    global _transcription_service
    if _transcription_service is not None:
        _transcription_service.close()
        _transcription_service = None
