"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Aggregation context and input entity contracts.
"""

from .context import AggregationContext
from .types import Collection, ContentItem, ResultMap, SharedKey

__all__ = [
    "AggregationContext",
    "Collection",
    "ContentItem",
    "ResultMap",
    "SharedKey",
]
