"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Priority-ordered transformer pipeline that composes the response document.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from ..context import AggregationContext
from ..errors import UnitRegistrationError
from ..pipeline.ordering import sort_by_priority
from .context import CompositionContext
from .transformers import Transformer

logger = logging.getLogger("mosaic.composition")


class TransformerPipeline:
    """Run registered transformers in descending priority order over aggregated data."""

    def __init__(self, transformers: Iterable[Transformer] | None = None) -> None:
        self._transformers: dict[str, Transformer] = {}
        self._sorted: list[Transformer] | None = None
        for transformer in transformers or ():
            self.register(transformer)

    def register(self, transformer: Transformer) -> "TransformerPipeline":
        key = getattr(transformer, "key", None)
        if not isinstance(key, str) or not key.strip():
            raise UnitRegistrationError(
                f"Transformer {type(transformer).__name__} must declare a non-empty string key"
            )
        if not callable(getattr(transformer, "transform", None)):
            raise UnitRegistrationError(f"Transformer '{key}' does not implement 'transform'")
        self._transformers[key] = transformer
        self._sorted = None
        return self

    def registered_keys(self) -> list[str]:
        return list(self._transformers.keys())

    def has_transformer(self, key: str) -> bool:
        return key in self._transformers

    def transform(self, aggregation_context: AggregationContext) -> dict[str, Any]:
        """Compose the response; a failing transformer is logged and skipped."""
        context = CompositionContext(aggregation_context)
        for transformer in self._sorted_transformers():
            key = transformer.key
            try:
                if not transformer.supports(context):
                    logger.debug("Transformer %s skipped (not supported)", key)
                    continue
                transformer.transform(context)
                logger.debug("Transformer %s executed", key)
            except Exception:  # noqa: BLE001
                logger.exception("Transformer %s failed", key)
        return context.response()

    def _sorted_transformers(self) -> list[Transformer]:
        if self._sorted is None:
            self._sorted = sort_by_priority(self._transformers.values())
        return self._sorted
