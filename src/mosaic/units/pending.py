"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Pending handle variants and the settle-all join primitive.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True, slots=True)
class Ready:
    """Pending handle wrapping data that is already available."""

    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class InFlight:
    """
    Pending handle wrapping named in-flight asynchronous operations.

    Attributes:
        operations: Operation name -> scheduled future/task.
        data: Already-available values carried alongside the operations.
    """

    operations: dict[str, asyncio.Future[Any]] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def spawn(
        cls,
        operations: Mapping[str, Awaitable[Any]] | None = None,
        *,
        data: Mapping[str, Any] | None = None,
    ) -> "InFlight":
        """
        Schedule every awaitable on the running loop and wrap the resulting tasks.

        Coroutines start running at the next suspension point of the caller,
        so work from several units overlaps before any of them is awaited.
        """
        scheduled = {
            name: asyncio.ensure_future(awaitable)
            for name, awaitable in (operations or {}).items()
        }
        return cls(operations=scheduled, data=dict(data or {}))

    @property
    def done(self) -> bool:
        return all(future.done() for future in self.operations.values())

    def cancel(self) -> None:
        """Cancel unfinished operations and mark finished failures as retrieved."""
        for future in self.operations.values():
            if not future.done():
                future.cancel()
            elif not future.cancelled():
                future.exception()


PendingHandle = Union[Ready, InFlight]

EMPTY_PENDING = Ready()


@dataclass(frozen=True, slots=True)
class Fulfilled:
    """Settled outcome of an operation that returned a value."""

    value: Any

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Rejected:
    """Settled outcome of an operation that raised."""

    error: BaseException

    @property
    def ok(self) -> bool:
        return False


Settled = Union[Fulfilled, Rejected]


async def settle(operations: Mapping[str, Awaitable[Any]]) -> dict[str, Settled]:
    """
    Wait for every operation to finish and report each outcome by name.

    One failing operation never aborts its siblings. Cancellation of an
    individual operation is reported as ``Rejected``; cancellation of the
    caller still propagates.
    """
    if not operations:
        return {}

    names = list(operations.keys())
    outcomes = await asyncio.gather(
        *(operations[name] for name in names),
        return_exceptions=True,
    )

    settled: dict[str, Settled] = {}
    for name, outcome in zip(names, outcomes):
        if isinstance(outcome, BaseException):
            settled[name] = Rejected(outcome)
        else:
            settled[name] = Fulfilled(outcome)
    return settled
