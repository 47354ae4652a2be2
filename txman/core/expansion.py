# coding: utf-8
"""
Statement expansion for txman.

Rewrites a SQL template that uses named references (``:name``) or
positional markers (``?``) into a template that uses only scalar ``?``
placeholders, together with the matching ordered parameter list.

Sequence-valued parameters expand into one placeholder per element:

    expand("SELECT * FROM record WHERE key IN (:keys)", {"keys": [1, 2]})
    # → ExpandedStatement(sql="SELECT * FROM record WHERE key IN (?, ?)",
    #                     parameters=[1, 2])

Pure computation - no connection, no shared state between calls.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import reduce
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

PLACEHOLDER = "?"
PLACEHOLDER_SEPARATOR = ", "

# A reference ends at end-of-input or at the first non-identifier character
_REFERENCE_END = r"(?![A-Za-z0-9_-])"
_POSITIONAL_MARKER = re.compile(re.escape(PLACEHOLDER))

Parameters = Union[Mapping[str, Any], Sequence[Any]]


@dataclass(frozen=True)
class ParameterPlacement:
    """
    One occurrence of a parameter reference in a template.

    Attributes:
        position: Offset in the original template where the reference starts
        name: Parameter name (the index as a string for positional markers)
        value: Bound value, scalar or sequence
        length: Length of the reference text being replaced
    """

    position: int
    name: str
    value: Any
    length: int


@dataclass(frozen=True)
class ExpandedStatement:
    """
    A template rewritten to positional placeholders.

    Attributes:
        sql: SQL containing only ``?`` placeholders
        parameters: Bind values in placeholder order
    """

    sql: str
    parameters: List[Any] = field(default_factory=list)

    def to_tuple(self) -> Tuple[str, List[Any]]:
        """Return (sql, parameters) tuple for execution."""
        return self.sql, self.parameters


def is_sequence_value(value: Any) -> bool:
    """Check whether a parameter value expands into several placeholders."""
    return isinstance(value, (list, tuple))


def _placeholders_for(value: Any) -> Tuple[str, Tuple[Any, ...]]:
    if is_sequence_value(value):
        return PLACEHOLDER_SEPARATOR.join(PLACEHOLDER for _ in value), tuple(value)
    return PLACEHOLDER, (value,)


def _apply_placement(
    state: Tuple[str, int, Tuple[Any, ...]],
    placement: ParameterPlacement,
) -> Tuple[str, int, Tuple[Any, ...]]:
    """Rewrite one placement, shifting its offset by the delta accumulated so far."""
    sql, delta, bound = state
    replacement, values = _placeholders_for(placement.value)

    start = placement.position + delta
    end = start + placement.length

    return (
        sql[:start] + replacement + sql[end:],
        delta + len(replacement) - placement.length,
        bound + values,
    )


def _rewrite(template: str, placements: List[ParameterPlacement]) -> ExpandedStatement:
    # Stable sort: ties keep discovery order
    ordered = sorted(placements, key=lambda placement: placement.position)
    sql, _, bound = reduce(_apply_placement, ordered, (template, 0, ()))
    return ExpandedStatement(sql=sql, parameters=list(bound))


def find_named_placements(
    template: str,
    parameters: Mapping[str, Any],
) -> List[ParameterPlacement]:
    """
    Locate every reference to every declared parameter.

    Args:
        template: SQL template with ``:name`` references
        parameters: Declared parameters

    Returns:
        Placements in discovery order (not yet sorted by position)
    """
    placements: List[ParameterPlacement] = []
    for name, value in parameters.items():
        pattern = re.compile(":" + re.escape(name) + _REFERENCE_END)
        for match in pattern.finditer(template):
            placements.append(ParameterPlacement(
                position=match.start(),
                name=name,
                value=value,
                length=len(name) + 1,
            ))
    return placements


def expand_named(template: str, parameters: Mapping[str, Any]) -> ExpandedStatement:
    """
    Expand ``:name`` references into positional placeholders.

    Parameters are emitted in left-to-right template order, independent of
    the mapping's iteration order. Declared names that are never referenced
    are dropped; references to undeclared names are left in the SQL as-is.

    Args:
        template: SQL template with ``:name`` references
        parameters: Values by name; lists and tuples expand to ``?, ?, ...``

    Returns:
        ExpandedStatement with the rewritten SQL and ordered parameters
    """
    placements = find_named_placements(template, parameters)
    expanded = _rewrite(template, placements)

    unused = set(parameters) - {placement.name for placement in placements}
    if unused:
        logger.debug(f"Parameters not referenced in template: {sorted(unused)}")

    return expanded


def expand_positional(template: str, parameters: Sequence[Any]) -> ExpandedStatement:
    """
    Expand sequence-valued positional parameters in place.

    Each ``?`` is paired with the parameter at the same index. A sequence
    value turns its marker into ``N`` comma-joined markers and is flattened
    into the parameter list; every other parameter keeps its relative order.
    Parameters without a matching marker are passed through unchanged.

    Args:
        template: SQL template with ``?`` markers
        parameters: Values by position

    Returns:
        ExpandedStatement with the rewritten SQL and flattened parameters
    """
    markers = [match.start() for match in _POSITIONAL_MARKER.finditer(template)]

    placements = [
        ParameterPlacement(
            position=position,
            name=str(index),
            value=value,
            length=len(PLACEHOLDER),
        )
        for index, (position, value) in enumerate(zip(markers, parameters))
    ]
    expanded = _rewrite(template, placements)

    surplus = list(parameters[len(markers):])
    if surplus:
        logger.debug(f"{len(surplus)} positional parameter(s) without a marker")

    return ExpandedStatement(
        sql=expanded.sql,
        parameters=expanded.parameters + surplus,
    )


def expand(template: str, parameters: Optional[Parameters] = None) -> ExpandedStatement:
    """
    Expand a template using named or positional parameters.

    A mapping selects named expansion, any other sequence selects positional
    expansion, and ``None`` leaves the template untouched.

    Raises:
        TypeError: If parameters is neither a mapping nor a sequence
    """
    if parameters is None:
        return ExpandedStatement(sql=template, parameters=[])
    if isinstance(parameters, Mapping):
        return expand_named(template, parameters)
    if isinstance(parameters, (str, bytes)) or not isinstance(parameters, Sequence):
        raise TypeError(
            f"parameters must be a mapping or a sequence, got {type(parameters).__name__}"
        )
    return expand_positional(template, parameters)
