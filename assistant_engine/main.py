"""Main FastAPI application module for the Personal Assistant Engine.

This module initializes the FastAPI application and sets up the core routes and dependencies.
"""

import logging
from contextlib import asynccontextmanager
import uvicorn

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from typing import Dict, Any

from assistant_engine.core.config import Settings, get_settings
from assistant_engine.core.dependencies import database_path, close_db, close_transcription_service
from assistant_engine.core.logging_config import configure_logging
from assistant_engine.api.routers import actions as actions_router
from assistant_engine.api.routers import assistant as assistant_router
from assistant_engine.api.routers import settings as settings_router
from assistant_engine.database.crud import initialize_database

logging_config = configure_logging(get_settings().log_level)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting Personal Assistant Engine API...")
    try:
        current_settings = get_settings()
        logger.info(f"Settings loaded. LLM provider: {current_settings.llm_provider}")
    except Exception as e:
        logger.error(f"Failed to load settings on startup: {e}", exc_info=True)
        raise

    db_path = database_path(current_settings)
    logger.info(f"Ensuring database exists and is initialized at: {db_path}")
    try:
        initialize_database(db_path)
    except Exception as e:
        logger.error(f"Failed to initialize database on startup: {e}", exc_info=True)
        raise

    yield

    # Shutdown
    logger.info("Shutting down Personal Assistant Engine API...")
    close_db()
    close_transcription_service()
    logger.info("Shutdown complete.")

app = FastAPI(
    title="Personal Assistant Engine API",
    description="Turns thought dumps into calendar events, emails, tasks and agenda items.",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, replace with specific origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(actions_router.router, prefix="/api/v1/actions", tags=["Action Items"])
app.include_router(assistant_router.router, prefix="/api/v1", tags=["Assistant"])
app.include_router(settings_router.router, prefix="/api/v1", tags=["Settings"])

@app.get("/health", response_model=Dict[str, Any])
async def health_check(settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    """Health check endpoint to verify the API is running.

    Returns:
        Dict[str, Any]: Health status information
    """
    return {
        "status": "healthy",
        "version": app.version,
        "environment": settings.environment,
        "llm_provider": settings.llm_provider,
    }

@app.get("/")
async def root() -> Dict[str, str]:
    """Root endpoint that returns basic API information."""
    return {
        "message": "Welcome to the Personal Assistant Engine API",
        "version": app.version,
    }

if __name__ == "__main__":
    settings = get_settings()
    logger.info(f"Starting Uvicorn server on {settings.api_host}:{settings.api_port} with reload={settings.api_reload}")
    uvicorn.run(
        "assistant_engine.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_config=logging_config,
        log_level=settings.api_log_level.lower()
    )
