"""Database initialization and connection management."""
import sqlite3
from pathlib import Path

from hunter_system.config import DEFAULT_DB_PATH

SCHEMA = """
CREATE TABLE IF NOT EXISTS hunters (
    id TEXT PRIMARY KEY,
    email TEXT,
    total_xp INTEGER NOT NULL DEFAULT 0,
    current_rank TEXT NOT NULL DEFAULT 'E',
    streak_days INTEGER NOT NULL DEFAULT 0,
    last_full_clear_on TEXT,
    rank_assigned_at TEXT,
    quests_completed INTEGER NOT NULL DEFAULT 0,
    quests_completed_on TEXT,
    assessment_score INTEGER,
    stats TEXT DEFAULT '{}',  -- JSON
    is_admin INTEGER NOT NULL DEFAULT 0,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS quests (
    id TEXT PRIMARY KEY,
    hunter_id TEXT NOT NULL REFERENCES hunters(id) ON DELETE CASCADE,
    quest_date TEXT NOT NULL,
    category TEXT NOT NULL,
    title TEXT NOT NULL,
    description TEXT,
    xp_reward INTEGER NOT NULL,
    difficulty TEXT DEFAULT 'medium',
    completed INTEGER NOT NULL DEFAULT 0,
    completed_at TEXT,
    created_at TEXT,
    UNIQUE(hunter_id, quest_date, category)
);

CREATE INDEX IF NOT EXISTS idx_quests_hunter_date ON quests(hunter_id, quest_date);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()
