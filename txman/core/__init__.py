"""
Core of txman: statement expansion, error types and settings.
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

__all__ = [
    "TxManSettings",
    "configure_logging",
    "TxManError",
    "ExpansionError",
    "ExecutionError",
    "MultipleResultsError",
    "ResourceError",
    "TxClosedError",
    "ExpandedStatement",
    "ParameterPlacement",
    "expand",
    "expand_named",
    "expand_positional",
]
