from datetime import datetime, timezone

import pytest

from hunter_system.config import Settings
from hunter_system.db import init_db
from hunter_system.progress import get_or_create_hunter


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_hunter.db")
    return db_path


@pytest.fixture
def as_of():
    return datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings(tmp_db):
    return Settings(_env_file=None, db_path=tmp_db, admin_emails=["guildmaster@example.com"])


@pytest.fixture
def hunter(tmp_db, as_of, settings):
    """An initialized database with one ordinary hunter."""
    init_db(tmp_db)
    return get_or_create_hunter(tmp_db, "jinwoo", "jinwoo@example.com", as_of=as_of, settings=settings)
