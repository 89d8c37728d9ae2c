"""API Router for the conversational assistant and the daily agenda."""

import sqlite3
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from assistant_engine.api.models import ConversationRequest, ConversationResponse, GENERIC_FAILURE_MESSAGE
from assistant_engine.core.dependencies import get_db, get_llm_service
from assistant_engine.database import crud
from assistant_engine.database.models import AgendaItem
from assistant_engine.features.conversation import respond_to_conversation
from assistant_engine.interfaces.llm_interface import LLMInterface, LLMServiceError

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/assistant/reply", response_model=ConversationResponse)
async def assistant_reply_endpoint(
    request: ConversationRequest,
    db: sqlite3.Connection = Depends(get_db),
    llm_service: LLMInterface = Depends(get_llm_service),
):
    """Produces the assistant's next reply and, optionally, saves what it scheduled."""
    logger.info(f"Received assistant turn with {len(request.messages)} message(s).")
    try:
        parsed = await run_in_threadpool(respond_to_conversation, messages=request.messages, llm_service=llm_service)
    except LLMServiceError as e:
        logger.error(f"Assistant reply failed, model unavailable: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=GENERIC_FAILURE_MESSAGE)
    except Exception as e:
        logger.error(f"Unexpected error while generating assistant reply: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while processing your request."
        )

    response = ConversationResponse(reply_text=parsed.reply_text, structured=parsed.structured)
    if request.persist and parsed.structured is not None:
        try:
            action_ids, agenda_ids = crud.save_structured_output(db, parsed.structured, session_id="voice")
        except sqlite3.Error as db_err:
            # Nothing was saved; the reply itself is still delivered
            logger.error(f"Database error while saving assistant output: {db_err}", exc_info=True)
        else:
            response.saved_action_ids = action_ids
            response.saved_agenda_ids = agenda_ids
    return response

@router.get("/agenda", response_model=List[AgendaItem])
async def list_agenda_endpoint(limit: int = 100, db: sqlite3.Connection = Depends(get_db)):
    """Returns the agenda in chronological order."""
    try:
        return crud.list_agenda_items(db, limit=limit)
    except sqlite3.Error as db_err:
        logger.error(f"Database error while listing agenda items: {db_err}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="A database error occurred while processing your request."
        )
