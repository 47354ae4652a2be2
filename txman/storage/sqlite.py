"""
SQLite connection source for txman.

Opens one sqlite3 connection per transaction and closes it on release.

Transaction Control:
    Connections run with ``isolation_level = None`` so sqlite3 never opens
    transactions on its own. Turning autocommit off issues an explicit
    ``BEGIN`` (DEFERRED by default), so every later statement, reads and DDL
    included, belongs to one transaction until commit() or rollback().

    The read-only hint maps to ``PRAGMA query_only``, so writes inside a
    read-only transaction fail at the database.

Thread Safety:
    Each acquire() returns a fresh connection owned by one transaction.
    WAL mode lets concurrent readers proceed while a writer is active.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any, Union

from txman.core.config import TRANSACTION_MODES, TxManSettings
from txman.storage.source import ConnectionSource

logger = logging.getLogger(__name__)

IN_MEMORY = ":memory:"


class SQLiteConnectionSource(ConnectionSource):
    """
    sqlite3-backed connection source.

    Connections use ``sqlite3.Row`` rows, so row mappers can read columns
    by name or index.

    Usage:
        ```python
        source = SQLiteConnectionSource("./data.db")
        txman = TxMan(source)
        ```

    Note that every connection to ``":memory:"`` opens its own empty
    database, so data does not survive between transactions there.
    """

    def __init__(
        self,
        database: Union[str, Path],
        timeout: float = 30.0,
        journal_mode: str = "WAL",
        foreign_keys: bool = True,
        transaction_mode: str = "DEFERRED",
    ):
        """
        Initialize the SQLite source.

        Args:
            database: Path to SQLite database file
            timeout: Seconds to wait on a locked database
            journal_mode: Journal mode set on every new connection
            foreign_keys: Enable foreign key enforcement
            transaction_mode: DEFERRED, IMMEDIATE or EXCLUSIVE for BEGIN
        """
        self._database = str(database)
        self._timeout = timeout
        self._journal_mode = journal_mode
        self._foreign_keys = foreign_keys
        self._transaction_mode = transaction_mode.upper()
        if self._transaction_mode not in TRANSACTION_MODES:
            raise ValueError(f"transaction_mode must be one of {sorted(TRANSACTION_MODES)}")

    @classmethod
    def from_settings(cls, settings: TxManSettings) -> "SQLiteConnectionSource":
        """Create a source from TxManSettings."""
        return cls(
            database=settings.database,
            timeout=settings.timeout,
            journal_mode=settings.journal_mode,
            foreign_keys=settings.foreign_keys,
            transaction_mode=settings.transaction_mode,
        )

    @property
    def database(self) -> str:
        return self._database

    def acquire(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self._database,
            timeout=self._timeout,
            check_same_thread=False,
        )
        try:
            if self._database != IN_MEMORY:
                conn.execute(f"PRAGMA journal_mode={self._journal_mode}")
            conn.execute(f"PRAGMA foreign_keys={'ON' if self._foreign_keys else 'OFF'}")
        except sqlite3.Error:
            conn.close()
            raise
        conn.row_factory = sqlite3.Row
        logger.debug(f"Opened SQLite connection to {self._database}")
        return conn

    def release(self, connection: sqlite3.Connection) -> None:
        connection.close()
        logger.debug(f"Closed SQLite connection to {self._database}")

    def set_autocommit(self, connection: sqlite3.Connection, enabled: bool) -> None:
        connection.isolation_level = None
        if not enabled and not connection.in_transaction:
            connection.execute(f"BEGIN {self._transaction_mode}")

    def set_read_only(self, connection: sqlite3.Connection, read_only: bool) -> None:
        connection.execute(f"PRAGMA query_only={'ON' if read_only else 'OFF'}")
