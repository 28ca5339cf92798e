"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Per-request aggregation context shared by every unit of one execution.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar, overload

from .types import Collection, ContentItem, ResultMap, SharedKey

T = TypeVar("T")


def _key_name(key: SharedKey[Any] | str) -> str:
    if isinstance(key, SharedKey):
        return key.name
    return key


class AggregationContext:
    """
    Input entities plus the mutable stores written during one execution.

    The item and its collection never change. Shared data is cross-unit
    scratch space and may be overwritten by key. Resolved data holds one
    result map per unit key and is written once.
    """

    def __init__(self, item: ContentItem, collection: Collection) -> None:
        self._item = item
        self._collection = collection
        self._shared: dict[str, Any] = {}
        self._resolved: dict[str, ResultMap] = {}
        self._pending: dict[str, dict[str, Any]] = {}

    @property
    def item(self) -> ContentItem:
        return self._item

    @property
    def collection(self) -> Collection:
        return self._collection

    @property
    def item_id(self) -> str:
        return self._item.id

    @property
    def owner_id(self) -> str:
        return self._collection.owner_id

    @property
    def content_type(self) -> str:
        return self._item.content_type

    # Shared data

    def set_shared_data(self, key: SharedKey[T] | str, value: T) -> "AggregationContext":
        """Publish a value for other units; replaces any previous value for `key`."""
        self._shared[_key_name(key)] = value
        return self

    @overload
    def shared_data(self, key: SharedKey[T]) -> T | None: ...

    @overload
    def shared_data(self, key: SharedKey[T], default: T) -> T: ...

    @overload
    def shared_data(self, key: str, default: Any = None) -> Any: ...

    def shared_data(self, key: SharedKey[Any] | str, default: Any = None) -> Any:
        return self._shared.get(_key_name(key), default)

    def has_shared_data(self, key: SharedKey[Any] | str) -> bool:
        return _key_name(key) in self._shared

    # Resolved data

    def set_resolved_data(self, unit_key: str, data: ResultMap) -> "AggregationContext":
        """Store one unit's resolve-phase result, replacing any earlier one."""
        self._resolved[unit_key] = data
        return self

    def resolved_data(self, unit_key: str) -> ResultMap:
        """Return one unit's result, or an empty map when it produced nothing."""
        return self._resolved.get(unit_key, {})

    def has_resolved_data(self, unit_key: str) -> bool:
        return unit_key in self._resolved

    def all_resolved_data(self) -> dict[str, ResultMap]:
        return dict(self._resolved)

    # Pending handles shared across units

    def add_pending(self, key: str, handles: Mapping[str, Any]) -> "AggregationContext":
        """Merge `handles` into the pending entry for `key`."""
        self._pending.setdefault(key, {}).update(handles)
        return self

    def pending(self, key: str) -> dict[str, Any]:
        return dict(self._pending.get(key, {}))

    def all_pending(self) -> dict[str, dict[str, Any]]:
        return {key: dict(value) for key, value in self._pending.items()}

    def clear_pending(self, key: str) -> "AggregationContext":
        self._pending.pop(key, None)
        return self
