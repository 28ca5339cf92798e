"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Composition context: read access to aggregated data plus the response being built.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..context import AggregationContext, Collection, ContentItem
from ..context.types import ResultMap


class CompositionContext:
    """Wraps an aggregation context and accumulates the response document."""

    def __init__(self, aggregation_context: AggregationContext) -> None:
        self._aggregation = aggregation_context
        self._response: dict[str, Any] = {}

    @property
    def aggregation_context(self) -> AggregationContext:
        return self._aggregation

    @property
    def item(self) -> ContentItem:
        return self._aggregation.item

    @property
    def collection(self) -> Collection:
        return self._aggregation.collection

    @property
    def item_id(self) -> str:
        return self._aggregation.item_id

    @property
    def owner_id(self) -> str:
        return self._aggregation.owner_id

    @property
    def content_type(self) -> str:
        return self._aggregation.content_type

    def aggregated(self, unit_key: str) -> ResultMap:
        return self._aggregation.resolved_data(unit_key)

    def all_aggregated(self) -> dict[str, ResultMap]:
        return self._aggregation.all_resolved_data()

    def has_aggregated(self, unit_key: str) -> bool:
        """Whether `unit_key` produced a non-empty result."""
        return bool(self._aggregation.resolved_data(unit_key))

    def set_field(self, key: str, value: Any) -> "CompositionContext":
        self._response[key] = value
        return self

    def field(self, key: str, default: Any = None) -> Any:
        return self._response.get(key, default)

    def has_field(self, key: str) -> bool:
        return key in self._response

    def merge(self, data: Mapping[str, Any]) -> "CompositionContext":
        self._response.update(data)
        return self

    def response(self) -> dict[str, Any]:
        return dict(self._response)
