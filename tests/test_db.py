"""Tests for database initialization and connection management."""
import sqlite3

import pytest

from hunter_system.db import get_connection, init_db


def test_init_db_creates_tables(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
    )
    tables = {row[0] for row in cursor.fetchall()}
    assert {"hunters", "quests"}.issubset(tables)
    conn.close()


def test_init_db_is_idempotent(tmp_db):
    init_db(tmp_db)
    init_db(tmp_db)  # should not raise
    conn = get_connection(tmp_db)
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    assert len(cursor.fetchall()) > 0
    conn.close()


def test_init_db_creates_parent_dir(tmp_path):
    db_path = str(tmp_path / "nested" / "dir" / "hunter.db")
    init_db(db_path)
    assert (tmp_path / "nested" / "dir" / "hunter.db").exists()


def test_get_connection_returns_row_factory(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    conn.execute("INSERT INTO hunters (id, email) VALUES ('h1', 'h1@example.com')")
    row = conn.execute("SELECT id, current_rank FROM hunters WHERE id='h1'").fetchone()
    assert row["id"] == "h1"
    assert row["current_rank"] == "E"
    conn.close()


def test_one_quest_per_category_per_day(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    conn.execute("INSERT INTO hunters (id) VALUES ('h1')")
    insert = """INSERT INTO quests (id, hunter_id, quest_date, category, title, xp_reward)
        VALUES (?, 'h1', '2025-03-10', 'mind', 'Focus', 10)"""
    conn.execute(insert, ("q1",))
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute(insert, ("q2",))
    conn.close()


def test_quests_require_existing_hunter(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute(
            """INSERT INTO quests (id, hunter_id, quest_date, category, title, xp_reward)
            VALUES ('q1', 'ghost', '2025-03-10', 'mind', 'Focus', 10)"""
        )
    conn.close()
