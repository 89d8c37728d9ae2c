"""Tests for the action and agenda CRUD operations against an in-memory database."""

import sqlite3
from datetime import date, datetime

import pytest
from unittest.mock import patch

from assistant_engine.database import crud
from assistant_engine.database.models import ActionCreate, AgendaItemCreate
from assistant_engine.features.actions_models import ConversationStructuredOutput

@pytest.fixture
def db():
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    crud.initialize_schema(conn)
    yield conn
    conn.close()

def test_initialize_database_creates_file(tmp_path):
    db_path = tmp_path / "nested" / "assistant.db"
    crud.initialize_database(db_path)

    assert db_path.exists()
    conn = sqlite3.connect(str(db_path))
    tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    conn.close()
    assert {"actions", "agenda_items"} <= tables

def test_create_and_get_action(db):
    action_id = crud.create_action(db, ActionCreate(
        type="email", title="Project update", description="To client", payload={"details": "Subject: Update"}
    ))

    action = crud.get_action_by_id(db, action_id)

    assert action.id == action_id
    assert action.type == "email"
    assert action.status == "pending"
    assert action.session_id == "voice"
    assert action.payload == {"details": "Subject: Update"}
    assert isinstance(action.timestamp, datetime)

def test_get_missing_action_returns_none(db):
    assert crud.get_action_by_id(db, 999) is None

def test_list_actions_newest_first(db):
    first = crud.create_action(db, ActionCreate(type="task", title="First"))
    second = crud.create_action(db, ActionCreate(type="task", title="Second"))

    actions = crud.list_actions(db)

    assert [a.id for a in actions] == [second, first]
    assert crud.list_actions(db, limit=1)[0].title == "Second"

def test_update_and_delete_action(db):
    action_id = crud.create_action(db, ActionCreate(type="task", title="Ship it"))

    assert crud.update_action_status(db, action_id, "completed") is True
    assert crud.get_action_by_id(db, action_id).status == "completed"
    assert crud.update_action_status(db, 12345, "completed") is False

    assert crud.delete_action(db, action_id) is True
    assert crud.get_action_by_id(db, action_id) is None
    assert crud.delete_action(db, action_id) is False

def test_invalid_status_is_rejected_by_schema(db):
    action_id = crud.create_action(db, ActionCreate(type="task", title="Ship it"))
    with pytest.raises(sqlite3.IntegrityError):
        crud.update_action_status(db, action_id, "bogus")

def test_create_and_list_agenda_items(db):
    crud.create_agenda_item(db, AgendaItemCreate(time="3:00 PM", title="Review", type="review", date=datetime(2024, 3, 5, 15)))
    crud.create_agenda_item(db, AgendaItemCreate(time="9:00 AM", title="Standup", type="meeting", date=datetime(2024, 3, 5, 9)))

    items = crud.list_agenda_items(db)

    assert [item.title for item in items] == ["Standup", "Review"]
    assert items[0].duration == "30 min"

def test_save_structured_output_maps_types_and_statuses(db):
    structured = ConversationStructuredOutput.model_validate({
        "actions": [
            {"type": "calendar", "title": "Sync", "description": "2pm", "status": "scheduled"},
            {"type": "agenda", "title": "Block focus", "description": ""},
            {"type": "email", "title": "Follow up", "description": "To Sam", "status": "completed"},
        ],
        "agendaItems": [
            {"time": "2:00 PM", "title": "Sync", "type": "meeting", "duration": "45 min"},
        ],
    })

    action_ids, agenda_ids = crud.save_structured_output(db, structured, today=date(2024, 3, 5))

    assert len(action_ids) == 3
    assert len(agenda_ids) == 1
    saved = {action.title: action for action in crud.list_actions(db)}
    assert saved["Sync"].type == "calendar_event"
    assert saved["Sync"].status == "scheduled"
    assert saved["Block focus"].type == "calendar_event"
    assert saved["Block focus"].status == "pending"
    assert saved["Follow up"].type == "email"
    agenda = crud.list_agenda_items(db)[0]
    assert agenda.date == datetime(2024, 3, 5, 14, 0)
    assert agenda.duration == "45 min"

def test_save_structured_output_with_nothing(db):
    assert crud.save_structured_output(db, ConversationStructuredOutput()) == ([], [])

def test_save_structured_output_rolls_back_on_agenda_failure(db):
    structured = ConversationStructuredOutput.model_validate({
        "actions": [
            {"type": "calendar", "title": "Sync", "description": "2pm", "status": "scheduled"},
            {"type": "task", "title": "Slides", "description": "Monday"},
        ],
        "agendaItems": [
            {"time": "2:00 PM", "title": "Sync", "type": "meeting"},
        ],
    })

    with patch('assistant_engine.database.crud._insert_agenda_item', side_effect=sqlite3.OperationalError("disk I/O error")):
        with pytest.raises(sqlite3.OperationalError):
            crud.save_structured_output(db, structured, today=date(2024, 3, 5))

    assert crud.list_actions(db) == []
    assert crud.list_agenda_items(db) == []

def test_create_actions_is_all_or_nothing(db):
    good = ActionCreate(type="task", title="Fine")
    bad = ActionCreate.model_construct(
        session_id="thought", type="task", title="Broken", description="", payload={}, status="bogus",
    )

    with pytest.raises(sqlite3.IntegrityError):
        crud.create_actions(db, [good, bad])
    assert crud.list_actions(db) == []

    ids = crud.create_actions(db, [good, ActionCreate(type="email", title="Also fine")])
    assert [crud.get_action_by_id(db, action_id).title for action_id in ids] == ["Fine", "Also fine"]
