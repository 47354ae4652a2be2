"""
Pytest configuration and shared fixtures for txman tests.

This module provides a temporary SQLite-backed TxMan with a ``record``
table, a row mapper for it, and mock connections for failure injection.
"""

import os
import tempfile
from typing import NamedTuple
from unittest.mock import MagicMock

import pytest

from txman import SQLiteConnectionSource, TxMan
from txman.storage.source import ConnectionSource


# =============================================================================
# Record Fixtures
# =============================================================================

class Record(NamedTuple):
    """One row of the ``record`` test table; equal to a plain (key, value) tuple."""

    key: int
    value: str


def map_record(row) -> Record:
    """Map a ``record`` row to a Record."""
    return Record(key=row["key"], value=row["value"])


@pytest.fixture
def record_mapper():
    """Row mapper for the ``record`` table."""
    return map_record


# =============================================================================
# SQLite Fixtures
# =============================================================================

@pytest.fixture
def db_path():
    """Path to a database file inside a temporary directory."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield os.path.join(tmp_dir, "txman.db")


@pytest.fixture
def sqlite_source(db_path):
    """SQLite connection source on a fresh database file."""
    return SQLiteConnectionSource(db_path, timeout=10.0)


@pytest.fixture
def txman(sqlite_source):
    """TxMan with an empty ``record`` table."""
    manager = TxMan(sqlite_source)
    manager.begin(lambda tx: tx.update(
        "CREATE TABLE record (key INT PRIMARY KEY, value TEXT NOT NULL)"
    ))
    return manager


@pytest.fixture
def insert_record():
    """Callable inserting one record inside a transaction."""
    def insert(tx, key, value):
        return tx.update(
            "INSERT INTO record (key, value) VALUES (:key, :value)",
            tx.params().put("key", key).put("value", value).build(),
        )
    return insert


# =============================================================================
# Mock Fixtures
# =============================================================================

@pytest.fixture
def mock_connection():
    """A DB-API connection mock whose cursor returns no rows."""
    connection = MagicMock(name="connection")
    cursor = connection.cursor.return_value
    cursor.fetchall.return_value = []
    cursor.rowcount = 0
    return connection


@pytest.fixture
def mock_source(mock_connection):
    """A connection source mock handing out mock_connection."""
    source = MagicMock(spec=ConnectionSource)
    source.acquire.return_value = mock_connection
    return source


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests that run against a real SQLite database"
    )
