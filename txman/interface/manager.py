# coding: utf-8
"""
Transaction manager for txman.

TxMan runs a caller callback inside a transaction scope:

    acquire connection → Tx → callback(tx) → finalize (always) → result

Finalize runs exactly once per begin() call, whether the callback returns
or raises, so connections are never leaked and never finalized twice.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar

from txman.core.config import TxManSettings, configure_logging
from txman.core.errors import ResourceError
from txman.interface.tx import Tx
from txman.storage.source import ConnectionSource
from txman.storage.sqlite import SQLiteConnectionSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TxMan:
    """
    Scope runner for transactions.

    Holds no state besides its connection source and settings; a single
    TxMan can be shared by many threads, each begin() drawing its own
    connection.

    Example:
        ```python
        txman = TxMan(SQLiteConnectionSource("./data.db"))

        count = txman.begin(lambda tx: tx.update(
            "INSERT INTO record (key, value) VALUES (:key, :value)",
            {"key": 123, "value": "abc"},
        ))

        rows = txman.begin_read_only(lambda tx: tx.execute(
            "SELECT * FROM record", row_mapper=dict,
        ))
        ```

    A callback that raises without calling tx.set_rollback() still commits
    unless the manager was created with ``rollback_on_error=True``.
    """

    def __init__(
        self,
        source: ConnectionSource,
        settings: Optional[TxManSettings] = None,
    ):
        """
        Initialize the manager.

        Args:
            source: Where connections are acquired and released
            settings: Optional settings; only rollback_on_error is used here
        """
        self._source = source
        self._settings = settings or TxManSettings()

    @classmethod
    def from_settings(cls, settings: TxManSettings) -> "TxMan":
        """Create a manager over a SQLite source described by settings."""
        configure_logging(settings.log_level_value)
        return cls(SQLiteConnectionSource.from_settings(settings), settings)

    @property
    def source(self) -> ConnectionSource:
        return self._source

    @property
    def settings(self) -> TxManSettings:
        return self._settings

    def begin(self, callback: Callable[[Tx], T]) -> T:
        """
        Run callback in a read-write transaction.

        Commits when the callback returns, or rolls back if it called
        tx.set_rollback().

        Returns:
            Whatever the callback returned
        """
        return self._run(callback, read_only=False)

    def begin_read_only(self, callback: Callable[[Tx], T]) -> T:
        """
        Run callback in a read-only transaction.

        No commit or rollback is issued; each statement is its own unit.

        Returns:
            Whatever the callback returned
        """
        return self._run(callback, read_only=True)

    begin_readonly = begin_read_only

    def _open(self, read_only: bool) -> Tx:
        try:
            connection = self._source.acquire()
        except Exception as e:
            raise ResourceError(f"Failed to acquire connection: {e}") from e

        try:
            return Tx(connection, self._source, read_only=read_only)
        except Exception:
            try:
                self._source.release(connection)
            except Exception as release_error:
                logger.error(f"Failed to release connection after setup failure: {release_error}")
            raise

    def _run(self, callback: Callable[[Tx], T], read_only: bool) -> T:
        tx = self._open(read_only)
        try:
            return callback(tx)
        except BaseException as e:
            if read_only or tx.rollback_requested:
                raise
            if self._settings.rollback_on_error:
                logger.debug(f"Transaction {tx.id} callback raised, rolling back")
                tx.set_rollback()
            else:
                logger.warning(
                    f"Transaction {tx.id} callback raised {type(e).__name__} "
                    f"without set_rollback(); committing"
                )
            raise
        finally:
            tx.finalize()
