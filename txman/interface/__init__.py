# coding: utf-8
"""
Interface layer for txman.

Provides the transaction manager and the per-transaction context handed
to callbacks.
"""

from txman.interface.manager import TxMan
from txman.interface.tx import ParamsBuilder, RowMapper, Tx, TxState

__all__ = [
    # Manager
    "TxMan",
    # Transaction context
    "Tx",
    "TxState",
    "ParamsBuilder",
    "RowMapper",
]
