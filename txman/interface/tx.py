# coding: utf-8
"""
Transaction context for txman.

A Tx owns one connection for the duration of a TxMan callback. It expands
statement templates, runs queries and updates, tracks whether the work
should be rolled back, and is finalized exactly once by its TxMan.

State Machine:
    OPEN ──finalize──► CLOSED

    Read-write: autocommit off, statements form one unit until finalize,
                which commits (or rolls back after set_rollback()).
    Read-only:  autocommit on, finalize only releases the connection.
"""

from __future__ import annotations

import logging
from contextlib import closing
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, TypeVar

import ulid

from txman.core.errors import (
    ExecutionError,
    MultipleResultsError,
    ResourceError,
    TxClosedError,
)
from txman.core.expansion import ExpandedStatement, Parameters, expand
from txman.storage.source import ConnectionSource

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Maps one raw result row to a domain value
RowMapper = Callable[[Any], T]


class TxState(str, Enum):
    """Lifecycle state of a transaction."""

    OPEN = "open"
    CLOSED = "closed"


class ParamsBuilder:
    """
    Fluent builder for named statement parameters.

    Example:
        params = tx.params().put("key", 123).put("keys", [1, 2]).build()
        # → {"key": 123, "keys": [1, 2]}
    """

    def __init__(self):
        self._params: Dict[str, Any] = {}

    def put(self, name: str, value: Any) -> "ParamsBuilder":
        """Set a parameter, replacing any earlier value under the same name."""
        self._params[name] = value
        return self

    def build(self) -> Dict[str, Any]:
        """Return a copy of the collected parameters."""
        return dict(self._params)


class Tx:
    """
    One transaction's context.

    Created by TxMan for a single callback; never construct or finalize it
    yourself. A Tx is not safe for concurrent use from several threads.

    Example:
        records = txman.begin(lambda tx: tx.execute(
            "SELECT * FROM record WHERE key IN (:keys)",
            {"keys": [123, 456]},
            lambda row: (row["key"], row["value"]),
        ))

    Calling update() inside a read-only transaction is outside its contract;
    whether the database rejects it depends on the connection source.
    """

    def __init__(
        self,
        connection: Any,
        source: ConnectionSource,
        read_only: bool = False,
    ):
        """
        Take ownership of a connection and fix the transaction mode.

        Args:
            connection: Connection acquired from source
            source: Where the connection goes back on finalize
            read_only: Leave autocommit on and skip commit/rollback

        Raises:
            ResourceError: If the connection cannot be configured
        """
        self.id = str(ulid.new())
        self._connection = connection
        self._source = source
        self._read_only = read_only
        self._rollback = False
        self._state = TxState.OPEN

        try:
            source.set_autocommit(connection, read_only)
            source.set_read_only(connection, read_only)
        except Exception as e:
            raise ResourceError(
                f"Failed to configure connection for transaction {self.id}: {e}",
                tx_id=self.id,
            ) from e

        logger.debug(f"Transaction {self.id} opened (read_only={read_only})")

    @property
    def read_only(self) -> bool:
        return self._read_only

    @property
    def rollback_requested(self) -> bool:
        """Whether finalize will roll back instead of commit."""
        return self._rollback

    @property
    def state(self) -> TxState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state == TxState.CLOSED

    def params(self) -> ParamsBuilder:
        """Start building a named parameter mapping."""
        return ParamsBuilder()

    # =========================================================================
    # Statements
    # =========================================================================

    def execute(
        self,
        sql: str,
        parameters: Optional[Parameters] = None,
        row_mapper: Optional[RowMapper] = None,
    ) -> List[T]:
        """
        Run a query and map every returned row.

        Args:
            sql: Statement template with ``:name`` or ``?`` references
            parameters: Named mapping or positional sequence
            row_mapper: Callable turning one row into a value

        Returns:
            Mapped rows in result-set order

        Raises:
            ExecutionError: If the database fails to run the statement
        """
        # execute(sql, row_mapper) form
        if row_mapper is None and callable(parameters):
            parameters, row_mapper = None, parameters
        if row_mapper is None:
            raise TypeError("execute() requires a row_mapper")

        rows = self._run(expand(sql, parameters), fetch=True)
        return [row_mapper(row) for row in rows]

    def execute_one(
        self,
        sql: str,
        parameters: Optional[Parameters] = None,
        row_mapper: Optional[RowMapper] = None,
    ) -> Optional[T]:
        """
        Run a query expected to return at most one row.

        Returns:
            The mapped row, or None when no row matched

        Raises:
            MultipleResultsError: If more than one row was returned
            ExecutionError: If the database fails to run the statement
        """
        results = self.execute(sql, parameters, row_mapper)
        if len(results) > 1:
            raise MultipleResultsError(sql, len(results))
        return results[0] if results else None

    def update(self, sql: str, parameters: Optional[Parameters] = None) -> int:
        """
        Run a data-modifying statement.

        Returns:
            Number of affected rows (0 when the driver cannot tell)

        Raises:
            ExecutionError: If the database fails to run the statement
        """
        return self._run(expand(sql, parameters), fetch=False)

    def set_rollback(self) -> None:
        """
        Mark the transaction to roll back at finalize.

        Idempotent. Statements issued afterwards still run and are rolled
        back together with everything before them.
        """
        self._check_open()
        if not self._rollback:
            logger.debug(f"Transaction {self.id} marked for rollback")
        self._rollback = True

    def _run(self, statement: ExpandedStatement, fetch: bool) -> Any:
        self._check_open()
        logger.debug(
            f"Transaction {self.id} executing: {statement.sql} "
            f"with {len(statement.parameters)} parameter(s)"
        )
        try:
            with closing(self._connection.cursor()) as cursor:
                cursor.execute(statement.sql, statement.parameters)
                if fetch:
                    return cursor.fetchall()
                return max(cursor.rowcount, 0)
        except Exception as e:
            raise ExecutionError(
                f"Statement failed: {e}",
                sql=statement.sql,
                parameters=statement.parameters,
            ) from e

    def _check_open(self) -> None:
        if self._state == TxState.CLOSED:
            raise TxClosedError(self.id)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def finalize(self) -> None:
        """
        Commit or roll back, then release the connection.

        Called exactly once by TxMan. Read-only transactions only release.
        The connection is released even when commit or rollback fails.

        Raises:
            ResourceError: If commit, rollback or release fails
            TxClosedError: If the transaction was already finalized
        """
        self._check_open()
        self._state = TxState.CLOSED

        try:
            if not self._read_only:
                self._commit_or_rollback()
        finally:
            self._release()

    def _commit_or_rollback(self) -> None:
        action = "rollback" if self._rollback else "commit"
        try:
            if self._rollback:
                self._connection.rollback()
            else:
                self._connection.commit()
        except Exception as e:
            logger.error(f"Transaction {self.id} {action} failed: {e}")
            raise ResourceError(
                f"Transaction {self.id} {action} failed: {e}",
                tx_id=self.id,
            ) from e
        logger.debug(f"Transaction {self.id} {action} done")

    def _release(self) -> None:
        try:
            self._source.release(self._connection)
        except Exception as e:
            logger.error(f"Transaction {self.id} failed to release connection: {e}")
            raise ResourceError(
                f"Failed to release connection of transaction {self.id}: {e}",
                tx_id=self.id,
            ) from e
        logger.debug(f"Transaction {self.id} closed")
