"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Transformer contract and base class for the composition stage.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any, Protocol

from .context import CompositionContext

logger = logging.getLogger("mosaic.composition")


class Transformer(Protocol):
    """
    Protocol for response transformers.

    Each transformer writes one part of the response document from the
    aggregated data. Higher ``priority`` runs first.
    """

    key: str
    priority: int

    def supports(self, context: CompositionContext) -> bool:
        """Return False to skip this transformer for the context."""

    def transform(self, context: CompositionContext) -> None:
        """Write fields into ``context``'s response."""


class BaseTransformer(ABC):
    """Base class with contract defaults and failure-tolerant helpers."""

    key: str = ""
    priority: int = 0

    def supports(self, context: CompositionContext) -> bool:
        _ = context
        return True

    @abstractmethod
    def transform(self, context: CompositionContext) -> None:
        """Write fields into ``context``'s response."""

    def safe_transform(self, context: CompositionContext, fn: Callable[[], None]) -> None:
        """Run `fn`, logging and swallowing any failure."""
        try:
            fn()
        except Exception:  # noqa: BLE001
            logger.exception(
                "Transformer %s failed for item %s",
                self.key,
                context.item_id,
            )

    @staticmethod
    def value(data: Mapping[str, Any], key: str, default: Any = None) -> Any:
        found = data.get(key)
        return default if found is None else found
