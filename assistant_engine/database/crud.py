"""CRUD (Create, Read, Update, Delete) operations for the database.

This module contains functions for interacting with the database tables.
"""

import json
import sqlite3
import logging
from typing import List, Optional, Tuple
from datetime import date, datetime, timezone
from pathlib import Path

from assistant_engine.database.schema import ALL_TABLES
from assistant_engine.database.models import Action, ActionCreate, AgendaItem, AgendaItemCreate
from assistant_engine.features.actions_models import ConversationStructuredOutput
from assistant_engine.features.actions_utils import to_store_action_type, normalize_status, parse_time_to_date

logger = logging.getLogger(__name__)

def initialize_schema(conn: sqlite3.Connection) -> None:
    """Creates the tables on an open connection if they don't exist."""
    with conn:
        cursor = conn.cursor()
        for table_sql in ALL_TABLES:
            cursor.execute(table_sql)

def initialize_database(db_path: str | Path) -> None:
    """Initializes the database by creating tables if they don't exist.

    Args:
        db_path: The path to the SQLite database file.
    """
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        conn = sqlite3.connect(str(db_path))
        try:
            initialize_schema(conn)
            logger.info(f"Database tables initialized successfully at {db_path}.")
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.error(f"Error initializing database tables at {db_path}: {e}", exc_info=True)
        raise

def _row_to_action(row: sqlite3.Row) -> Action:
    data = dict(row)
    data["payload"] = json.loads(data.get("payload") or "{}")
    return Action.model_validate(data)

def _insert_action(cursor: sqlite3.Cursor, action: ActionCreate) -> int:
    """Inserts an action row without committing. Returns its ID."""
    sql = """INSERT INTO actions (session_id, type, title, description, payload, status, timestamp)
             VALUES (?, ?, ?, ?, ?, ?, ?)"""
    cursor.execute(
        sql,
        (
            action.session_id,
            action.type,
            action.title,
            action.description,
            json.dumps(action.payload),
            action.status,
            datetime.now(timezone.utc).isoformat(),
        ),
    )
    return cursor.lastrowid

def _insert_agenda_item(cursor: sqlite3.Cursor, item: AgendaItemCreate) -> int:
    """Inserts an agenda row without committing. Returns its ID."""
    sql = "INSERT INTO agenda_items (time, title, type, duration, date) VALUES (?, ?, ?, ?, ?)"
    cursor.execute(
        sql,
        (item.time, item.title, item.type, item.duration or "30 min", item.date.isoformat()),
    )
    return cursor.lastrowid

def create_action(conn: sqlite3.Connection, action: ActionCreate) -> int:
    """Creates a new action record.

    Returns:
        The ID of the created action.

    Raises:
        sqlite3.Error: For database errors during insertion.
    """
    try:
        with conn:
            action_id = _insert_action(conn.cursor(), action)
        logger.info(f"Created {action.type} action '{action.title}' with id {action_id}")
        return action_id
    except sqlite3.Error as e:
        logger.error(f"Error creating action '{action.title}': {e}", exc_info=True)
        raise

def create_actions(conn: sqlite3.Connection, actions: List[ActionCreate]) -> List[int]:
    """Creates several action records in one transaction and returns their IDs in order."""
    try:
        with conn:
            cursor = conn.cursor()
            action_ids = [_insert_action(cursor, action) for action in actions]
        logger.info(f"Created {len(action_ids)} action(s) with ids {action_ids}")
        return action_ids
    except sqlite3.Error as e:
        logger.error(f"Error creating {len(actions)} action(s), rolled back: {e}", exc_info=True)
        raise

def get_action_by_id(conn: sqlite3.Connection, action_id: int) -> Optional[Action]:
    """Retrieves an action by its ID, or None if not found."""
    sql = "SELECT * FROM actions WHERE id = ?"
    try:
        cursor = conn.cursor()
        cursor.row_factory = sqlite3.Row
        row = cursor.execute(sql, (action_id,)).fetchone()
        if row is None:
            logger.debug(f"Action with id {action_id} not found.")
            return None
        return _row_to_action(row)
    except sqlite3.Error as e:
        logger.error(f"Error retrieving action {action_id}: {e}", exc_info=True)
        raise

def list_actions(conn: sqlite3.Connection, limit: int = 100) -> List[Action]:
    """Lists actions, newest first."""
    sql = "SELECT * FROM actions ORDER BY timestamp DESC, id DESC LIMIT ?"
    try:
        cursor = conn.cursor()
        cursor.row_factory = sqlite3.Row
        rows = cursor.execute(sql, (limit,)).fetchall()
        return [_row_to_action(row) for row in rows]
    except sqlite3.Error as e:
        logger.error(f"Error listing actions: {e}", exc_info=True)
        raise

def update_action_status(conn: sqlite3.Connection, action_id: int, status: str) -> bool:
    """Updates an action's status.

    Returns:
        True if a row was updated, False if the action does not exist.
    """
    sql = "UPDATE actions SET status = ? WHERE id = ?"
    try:
        with conn:
            cursor = conn.cursor()
            cursor.execute(sql, (status, action_id))
            updated = cursor.rowcount > 0
        if updated:
            logger.info(f"Action {action_id} status set to '{status}'.")
        else:
            logger.warning(f"Cannot update status: action {action_id} not found.")
        return updated
    except sqlite3.Error as e:
        logger.error(f"Error updating status of action {action_id}: {e}", exc_info=True)
        raise

def delete_action(conn: sqlite3.Connection, action_id: int) -> bool:
    """Deletes an action. Returns False if it did not exist."""
    sql = "DELETE FROM actions WHERE id = ?"
    try:
        with conn:
            cursor = conn.cursor()
            cursor.execute(sql, (action_id,))
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info(f"Deleted action {action_id}.")
        return deleted
    except sqlite3.Error as e:
        logger.error(f"Error deleting action {action_id}: {e}", exc_info=True)
        raise

def create_agenda_item(conn: sqlite3.Connection, item: AgendaItemCreate) -> int:
    """Creates a new agenda entry and returns its ID."""
    try:
        with conn:
            item_id = _insert_agenda_item(conn.cursor(), item)
        logger.info(f"Created agenda item '{item.title}' at {item.time} with id {item_id}")
        return item_id
    except sqlite3.Error as e:
        logger.error(f"Error creating agenda item '{item.title}': {e}", exc_info=True)
        raise

def list_agenda_items(conn: sqlite3.Connection, limit: int = 100) -> List[AgendaItem]:
    """Lists agenda entries in chronological order."""
    sql = "SELECT * FROM agenda_items ORDER BY date ASC, id ASC LIMIT ?"
    try:
        cursor = conn.cursor()
        cursor.row_factory = sqlite3.Row
        rows = cursor.execute(sql, (limit,)).fetchall()
        return [AgendaItem.model_validate(dict(row)) for row in rows]
    except sqlite3.Error as e:
        logger.error(f"Error listing agenda items: {e}", exc_info=True)
        raise

def save_structured_output(
    conn: sqlite3.Connection,
    structured: ConversationStructuredOutput,
    session_id: str = "voice",
    today: Optional[date] = None,
) -> Tuple[List[int], List[int]]:
    """Persists the actions and agenda items of an assistant reply.

    All rows are written in one transaction: either every entry is saved or,
    on a database error, none is.

    Returns:
        A tuple (action_ids, agenda_item_ids).

    Raises:
        sqlite3.Error: For database errors during insertion.
    """
    action_ids: List[int] = []
    agenda_ids: List[int] = []
    try:
        with conn:
            cursor = conn.cursor()
            for action in structured.actions or []:
                action_ids.append(_insert_action(cursor, ActionCreate(
                    session_id=session_id,
                    type=to_store_action_type(action.type),
                    title=action.title,
                    description=action.description or "",
                    status=normalize_status(action.status),
                )))
            for item in structured.agenda_items or []:
                agenda_ids.append(_insert_agenda_item(cursor, AgendaItemCreate(
                    time=item.time,
                    title=item.title,
                    type=item.type,
                    duration=item.duration or "30 min",
                    date=parse_time_to_date(item.time, today=today),
                )))
    except sqlite3.Error as e:
        logger.error(f"Error saving structured output for session '{session_id}', rolled back: {e}", exc_info=True)
        raise
    logger.info(f"Saved {len(action_ids)} action(s) and {len(agenda_ids)} agenda item(s) for session '{session_id}'.")
    return action_ids, agenda_ids
