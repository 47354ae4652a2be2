"""
Connection sources for txman.

A connection source hands out ready-to-use DB-API 2.0 connections and takes
them back when a transaction is finalized. Pooling policy lives entirely in
the source; txman only acquires, configures and releases.

Design Philosophy:
    The transaction lifecycle is separated from where connections come from.
    TxMan knows when to acquire and release; the source knows how.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

logger = logging.getLogger(__name__)


class ConnectionSource(ABC):
    """
    Abstract base class for connection sources.

    Implementations:
        - CallableConnectionSource: Wraps any connection factory
        - SQLiteConnectionSource: One sqlite3 connection per transaction
    """

    @abstractmethod
    def acquire(self) -> Any:
        """
        Hand out a connection for exclusive use by one transaction.

        Returns:
            A DB-API 2.0 connection
        """
        pass

    @abstractmethod
    def release(self, connection: Any) -> None:
        """
        Take back a connection after its transaction was finalized.

        Args:
            connection: A connection previously returned by acquire()
        """
        pass

    def set_autocommit(self, connection: Any, enabled: bool) -> None:
        """
        Switch autocommit on or off for a connection.

        The default assigns the ``autocommit`` attribute, which psycopg and
        sqlite3 (Python 3.12+) connections understand. Override for drivers
        that spell it differently.
        """
        connection.autocommit = enabled

    def set_read_only(self, connection: Any, read_only: bool) -> None:
        """
        Pass the read-only hint to the connection.

        The default does nothing; DB-API has no portable read-only switch.
        """
        pass


class CallableConnectionSource(ConnectionSource):
    """
    Connection source backed by a factory callable.

    Every acquire() calls the factory; release() closes the connection.
    Use it to plug in an external pool whose connections return to the pool
    on close().

    Usage:
        ```python
        source = CallableConnectionSource(lambda: psycopg.connect(dsn))
        txman = TxMan(source)
        ```
    """

    def __init__(self, factory: Callable[[], Any]):
        """
        Initialize the source.

        Args:
            factory: Zero-argument callable returning a new connection
        """
        self._factory = factory

    def acquire(self) -> Any:
        connection = self._factory()
        logger.debug(f"Acquired connection {id(connection):#x} from factory")
        return connection

    def release(self, connection: Any) -> None:
        connection.close()
        logger.debug(f"Closed connection {id(connection):#x}")
