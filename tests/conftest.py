"""Shared fixtures: every test gets its own SQLite file under tmp_path."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from limitkeeper.database import Database
from limitkeeper.store import LimitStore


@pytest.fixture
def database(tmp_path: Path) -> Iterator[Database]:
    database = Database(f"sqlite:///{tmp_path / 'limits.sqlite'}", timeout=10.0)
    database.create_schema()
    yield database
    database.dispose()


@pytest.fixture
def store(database: Database) -> LimitStore:
    return LimitStore(database)
