"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Shared base class for aggregation units.
"""

from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from ..context.types import ResultMap
from .pending import Fulfilled, InFlight, Ready, Rejected, Settled, settle

if TYPE_CHECKING:
    from ..context import AggregationContext

logger = logging.getLogger("mosaic.units")

T = TypeVar("T")


class BaseUnit(ABC):
    """
    Base class with contract defaults and failure-tolerant join helpers.

    Subclasses set ``key`` (and optionally ``priority``/``dependencies``) as
    class attributes and implement ``start``/``resolve``.
    """

    key: str = ""
    priority: int = 0
    dependencies: tuple[str, ...] = ()

    def supports(self, context: AggregationContext) -> bool:
        _ = context
        return True

    @abstractmethod
    def start(self, context: AggregationContext) -> Any | Awaitable[Any]:
        """Issue this unit's work and return a pending handle."""

    @abstractmethod
    def resolve(
        self, pending: Any, context: AggregationContext
    ) -> ResultMap | Awaitable[ResultMap]:
        """Consume the pending handle and return this unit's result map."""

    async def join(self, pending: Any) -> dict[str, Any]:
        """
        Turn any pending handle into a plain dict of available values.

        In-flight operations are settled; rejected ones are logged and left
        out. Data carried alongside the operations is merged underneath.
        """
        if pending is None:
            return {}
        if isinstance(pending, Ready):
            return dict(pending.data)
        if isinstance(pending, InFlight):
            joined = dict(pending.data)
            joined.update(self.fulfilled(await settle(pending.operations)))
            return joined
        if isinstance(pending, Mapping):
            return dict(pending)
        raise TypeError(
            f"Unit '{self.key}' cannot join pending handle of type {type(pending).__name__}"
        )

    def fulfilled(self, settled: Mapping[str, Settled]) -> dict[str, Any]:
        """Extract fulfilled values, logging each rejection as an item failure."""
        values: dict[str, Any] = {}
        for name, outcome in settled.items():
            if isinstance(outcome, Fulfilled):
                if outcome.value is not None:
                    values[name] = outcome.value
            elif isinstance(outcome, Rejected):
                logger.warning(
                    "Unit %s item %s rejected: %s",
                    self.key,
                    name,
                    outcome.error,
                )
        return values

    async def safe_call(
        self,
        fn: Callable[[], T | Awaitable[T]],
        *,
        default: T,
    ) -> T:
        """Run `fn` (awaiting its result when needed); log and return `default` on failure."""
        try:
            result = fn()
            if inspect.isawaitable(result):
                return await result
            return result
        except Exception:  # noqa: BLE001
            logger.exception("Unit %s execution failed", self.key)
            return default
