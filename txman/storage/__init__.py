"""
Connection sources for txman.

Provides the contract TxMan uses to obtain and return connections, with a
factory-backed adapter and a SQLite implementation.
"""

from txman.storage.source import ConnectionSource, CallableConnectionSource
from txman.storage.sqlite import SQLiteConnectionSource

__all__ = [
    "ConnectionSource",
    "CallableConnectionSource",
    "SQLiteConnectionSource",
]
