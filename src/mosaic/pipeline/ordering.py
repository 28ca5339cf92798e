"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Priority sort and dependency-respecting linearization of a unit registry.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from ..units.contracts import unit_dependencies, unit_priority

T = TypeVar("T")

CycleCallback = Callable[[list[str]], None]


def sort_by_priority(
    items: Iterable[T],
    *,
    unit_of: Callable[[T], Any] | None = None,
) -> list[T]:
    """
    Stable sort by descending priority; equal priorities keep input order.

    `unit_of` maps an item to the object carrying the priority, for example
    `(key, unit)` registry entries.
    """
    if unit_of is None:
        return sorted(items, key=lambda item: -unit_priority(item))
    return sorted(items, key=lambda item: -unit_priority(unit_of(item)))


def topological_order(
    units: Mapping[str, Any],
    *,
    on_cycle: CycleCallback | None = None,
) -> list[str]:
    """
    Linearize `units` so every present dependency precedes its dependent.

    Units are visited in mapping order; each unit's dependencies are visited
    (depth first, once) before the unit is appended. Dependency keys missing
    from `units` are ignored. Cycles do not fail: the visited guard cuts the
    back edge, and `on_cycle` receives the cycle path when provided.
    """
    order: list[str] = []
    visited: set[str] = set()
    stack: list[str] = []

    def visit(key: str) -> None:
        if key in visited:
            if on_cycle is not None and key in stack:
                on_cycle(stack[stack.index(key):] + [key])
            return
        visited.add(key)

        unit = units.get(key)
        if unit is None:
            return

        stack.append(key)
        for dependency in unit_dependencies(unit):
            visit(dependency)
        stack.pop()
        order.append(key)

    for key in units:
        visit(key)
    return order


def execution_order(
    registry: Mapping[str, Any],
    *,
    on_cycle: CycleCallback | None = None,
) -> list[str]:
    """Priority-sort `registry` (registration order breaks ties), then linearize it."""
    prioritized = dict(sort_by_priority(registry.items(), unit_of=lambda entry: entry[1]))
    return topological_order(prioritized, on_cycle=on_cycle)
