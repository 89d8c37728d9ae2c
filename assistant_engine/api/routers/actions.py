"""API Router for action items: extraction from brain dumps and voice notes, and the action log."""

import sqlite3
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from assistant_engine.api.models import (
    ExtractRequest,
    ExtractResponse,
    TranscribeResponse,
    SaveActionsRequest,
    SaveActionsResponse,
    ActionStatusUpdate,
    GENERIC_FAILURE_MESSAGE,
    NO_ACTIONS_MESSAGE,
    TRANSCRIPTION_FAILURE_MESSAGE,
    EMPTY_AUDIO_MESSAGE,
)
from assistant_engine.core.dependencies import get_db, get_llm_service, get_transcription_service
from assistant_engine.database import crud
from assistant_engine.database.models import Action, ActionCreate
from assistant_engine.features.action_extraction import extract_action_items
from assistant_engine.features.actions_utils import to_store_action_type
from assistant_engine.interfaces.llm_interface import LLMInterface, LLMServiceError
from assistant_engine.interfaces.transcription_interface import TranscriptionInterface, TranscriptionError

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/extract", response_model=ExtractResponse, response_model_exclude_none=True)
async def extract_actions_endpoint(
    request: ExtractRequest,
    llm_service: LLMInterface = Depends(get_llm_service),
):
    """Extracts calendar, email and task items from free text."""
    logger.info(f"Received extraction request ({len(request.text)} chars).")
    try:
        actions = await run_in_threadpool(extract_action_items, raw_text=request.text, llm_service=llm_service)
    except LLMServiceError as e:
        logger.error(f"Action extraction failed, model unavailable: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=GENERIC_FAILURE_MESSAGE)
    except Exception as e:
        logger.error(f"Unexpected error during action extraction: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while processing your request."
        )

    if not actions:
        return ExtractResponse(actions=[], message=NO_ACTIONS_MESSAGE)
    return ExtractResponse(actions=actions)

@router.post("/transcribe", response_model=TranscribeResponse, response_model_exclude_none=True)
async def transcribe_endpoint(
    file: UploadFile = File(..., description="Recorded voice note (webm, mp3, wav, ...)."),
    extract: bool = False,
    language_code: Optional[str] = None,
    transcriber: TranscriptionInterface = Depends(get_transcription_service),
    llm_service: LLMInterface = Depends(get_llm_service),
):
    """Transcribes a voice thought dump and, with `extract=true`, pulls action items out of it."""
    audio = await file.read()
    if not audio:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=EMPTY_AUDIO_MESSAGE)

    logger.info(f"Received transcription request: {file.filename} ({len(audio)} bytes, extract={extract}).")
    try:
        transcript = await run_in_threadpool(
            transcriber.transcribe,
            audio,
            filename=file.filename or "recording.webm",
            content_type=file.content_type or "audio/webm",
            language_code=language_code,
        )
    except TranscriptionError as e:
        logger.error(f"Transcription failed: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=TRANSCRIPTION_FAILURE_MESSAGE)

    response = TranscribeResponse(text=transcript.text, language_code=transcript.language_code)
    if not extract:
        return response

    try:
        actions = await run_in_threadpool(extract_action_items, raw_text=transcript.text, llm_service=llm_service)
    except LLMServiceError as e:
        logger.error(f"Action extraction after transcription failed, model unavailable: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=GENERIC_FAILURE_MESSAGE)
    except Exception as e:
        logger.error(f"Unexpected error during action extraction: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while processing your request."
        )

    response.actions = actions
    if not actions:
        response.message = NO_ACTIONS_MESSAGE
    return response

@router.post("", response_model=SaveActionsResponse, status_code=status.HTTP_201_CREATED)
async def save_actions_endpoint(
    request: SaveActionsRequest,
    db: sqlite3.Connection = Depends(get_db),
):
    """Adds extracted actions to the action log as pending items."""
    try:
        ids = crud.create_actions(db, [
            ActionCreate(
                session_id="thought",
                type=to_store_action_type(action.type),
                title=action.title,
                description=action.description,
                payload={"canAutomate": action.can_automate, "details": action.details},
                status="pending",
            )
            for action in request.actions
        ])
    except sqlite3.Error as db_err:
        logger.error(f"Database error while saving actions: {db_err}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="A database error occurred while processing your request."
        )
    return SaveActionsResponse(ids=ids)

@router.get("", response_model=List[Action])
async def list_actions_endpoint(limit: int = 100, db: sqlite3.Connection = Depends(get_db)):
    """Returns the action log, newest first."""
    try:
        return crud.list_actions(db, limit=limit)
    except sqlite3.Error as db_err:
        logger.error(f"Database error while listing actions: {db_err}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="A database error occurred while processing your request."
        )

@router.patch("/{action_id}", response_model=Action)
async def update_action_status_endpoint(
    action_id: int,
    update: ActionStatusUpdate,
    db: sqlite3.Connection = Depends(get_db),
):
    """Changes the status of one action."""
    try:
        if not crud.update_action_status(db, action_id, update.status):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Action {action_id} not found.")
        return crud.get_action_by_id(db, action_id)
    except HTTPException:
        raise
    except sqlite3.Error as db_err:
        logger.error(f"Database error while updating action {action_id}: {db_err}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="A database error occurred while processing your request."
        )

@router.delete("/{action_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_action_endpoint(action_id: int, db: sqlite3.Connection = Depends(get_db)):
    """Removes an action from the log."""
    try:
        if not crud.delete_action(db, action_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Action {action_id} not found.")
    except HTTPException:
        raise
    except sqlite3.Error as db_err:
        logger.error(f"Database error while deleting action {action_id}: {db_err}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="A database error occurred while processing your request."
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
