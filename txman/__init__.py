"""
txman - Callback-scoped transactions over DB-API connections.

Two pieces:
- Statement expansion: ``:name`` and list-valued parameters → ``?`` placeholders
- Transaction lifecycle: begin → use → commit-or-rollback → release, exactly once
"""
from txman.core.config import TxManSettings, configure_logging
from txman.core.errors import (
    ExecutionError,
    ExpansionError,
    MultipleResultsError,
    ResourceError,
    TxClosedError,
    TxManError,
)
from txman.core.expansion import (
    ExpandedStatement,
    ParameterPlacement,
    expand,
    expand_named,
    expand_positional,
)
from txman.storage import CallableConnectionSource, ConnectionSource, SQLiteConnectionSource
from txman.interface import ParamsBuilder, RowMapper, Tx, TxMan, TxState

__version__ = "0.1.0"

__all__ = [
    # Manager
    "TxMan",
    "Tx",
    "TxState",
    "ParamsBuilder",
    "RowMapper",
    # Expansion
    "expand",
    "expand_named",
    "expand_positional",
    "ExpandedStatement",
    "ParameterPlacement",
    # Connection sources
    "ConnectionSource",
    "CallableConnectionSource",
    "SQLiteConnectionSource",
    # Configuration
    "TxManSettings",
    "configure_logging",
    # Errors
    "TxManError",
    "ExpansionError",
    "ExecutionError",
    "MultipleResultsError",
    "ResourceError",
    "TxClosedError",
]
