"""Database schema definitions for the Personal Assistant Engine.

This module defines the SQL statements for creating database tables.
"""

CREATE_ACTIONS_TABLE = """
CREATE TABLE IF NOT EXISTS actions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id TEXT NOT NULL,
    type TEXT NOT NULL CHECK(type IN ('calendar_event', 'email', 'task')),
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    payload TEXT NOT NULL DEFAULT '{}', -- JSON object
    status TEXT NOT NULL DEFAULT 'pending'
        CHECK(status IN ('scheduled', 'sent', 'pending', 'failed', 'completed')),
    timestamp TIMESTAMP NOT NULL
);
"""

CREATE_AGENDA_ITEMS_TABLE = """
CREATE TABLE IF NOT EXISTS agenda_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    time TEXT NOT NULL,
    title TEXT NOT NULL,
    type TEXT NOT NULL CHECK(type IN ('meeting', 'call', 'review', 'focus')),
    duration TEXT NOT NULL DEFAULT '30 min',
    date TIMESTAMP NOT NULL
);
"""

ALL_TABLES = [
    CREATE_ACTIONS_TABLE,
    CREATE_AGENDA_ITEMS_TABLE,
]
