# coding: utf-8
"""
Error types for txman.

Every failure raised by the library derives from TxManError, so callers can
catch the whole family in one place. Errors are never swallowed or retried
inside the library; they unwind to the caller of TxMan.begin() after the
transaction has been finalized.
"""

from typing import Any, Optional, Sequence


class TxManError(Exception):
    """Base class for all txman errors."""
    pass


class ExpansionError(TxManError):
    """
    Error raised while expanding a statement template.

    Currently unused: references to undeclared names pass through the
    expander untouched and fail at the database instead.
    """
    pass


class ExecutionError(TxManError):
    """
    Error raised when the database fails to prepare, bind or execute a statement.

    The driver exception is chained as ``__cause__``.

    Attributes:
        sql: The expanded SQL that was sent to the database
        parameters: The positional parameters bound to it
    """

    def __init__(
        self,
        message: str,
        sql: Optional[str] = None,
        parameters: Optional[Sequence[Any]] = None,
    ):
        super().__init__(message)
        self.sql = sql
        self.parameters = list(parameters) if parameters is not None else []


class MultipleResultsError(TxManError):
    """
    Error raised by Tx.execute_one() when more than one row is returned.

    Attributes:
        sql: The statement template that produced the rows
        count: Number of rows returned
    """

    def __init__(self, sql: str, count: int):
        super().__init__(f"Multiple results returned ({count} rows): {sql}")
        self.sql = sql
        self.count = count


class ResourceError(TxManError):
    """
    Error raised while acquiring, configuring, committing, rolling back or
    releasing a connection.

    Attributes:
        tx_id: Identifier of the transaction involved, if any
    """

    def __init__(self, message: str, tx_id: Optional[str] = None):
        super().__init__(message)
        self.tx_id = tx_id


class TxClosedError(TxManError):
    """Error raised when a finalized transaction is used again."""

    def __init__(self, tx_id: str):
        super().__init__(f"Transaction {tx_id} is closed")
        self.tx_id = tx_id
