"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Unit contract implemented by every pluggable fetch/assemble task.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, Protocol

from ..context.types import ResultMap

if TYPE_CHECKING:
    from ..context import AggregationContext

logger = logging.getLogger("mosaic.units")


class Unit(Protocol):
    """
    Protocol for aggregation units.

    Attributes:
        key: Unique identifier; used for ordering and as the result-map key.
        priority: Higher runs earlier when dependencies do not constrain order.
        dependencies: Unit keys that must be resolved before this one. Only
            ordering is guaranteed; data is read from the context explicitly.
    """

    key: str
    priority: int
    dependencies: tuple[str, ...]

    def supports(self, context: AggregationContext) -> bool:
        """Return False to opt out of the execution for this context."""

    def start(self, context: AggregationContext) -> Any | Awaitable[Any]:
        """Issue work without blocking and return a pending handle."""

    def resolve(
        self, pending: Any, context: AggregationContext
    ) -> ResultMap | Awaitable[ResultMap]:
        """Wait on the pending handle and return this unit's result map."""


def unit_priority(unit: Any) -> int:
    """
    Read a unit's priority, defaulting to 0 when it declares none.

    A failing accessor is logged and read as 0.
    """
    try:
        priority = getattr(unit, "priority", 0)
        if callable(priority):
            priority = priority()
        return int(priority or 0)
    except Exception:  # noqa: BLE001
        logger.exception("Unit %s priority could not be read", _describe(unit))
        return 0


def unit_dependencies(unit: Any) -> tuple[str, ...]:
    """
    Read a unit's dependency keys as an ordered, de-duplicated tuple.

    A failing accessor is logged and read as no dependencies.
    """
    try:
        declared = getattr(unit, "dependencies", ())
        if callable(declared):
            declared = declared()
        if not declared:
            return ()
        if isinstance(declared, str):
            declared = (declared,)
        return tuple(dict.fromkeys(str(key) for key in declared))
    except Exception:  # noqa: BLE001
        logger.exception("Unit %s dependencies could not be read", _describe(unit))
        return ()


def unit_supports(unit: Any, context: AggregationContext) -> bool:
    """Evaluate a unit's applicability test, defaulting to True when it has none."""
    supports = getattr(unit, "supports", None)
    if supports is None:
        return True
    return bool(supports(context))


def _describe(unit: Any) -> str:
    key = getattr(unit, "key", None)
    return key if isinstance(key, str) and key else type(unit).__name__
