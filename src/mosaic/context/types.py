"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Input entity protocols and typed shared-data keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")

ResultMap = dict[str, Any]


@runtime_checkable
class ContentItem(Protocol):
    """Primary input entity of one aggregation (for example an article)."""

    @property
    def id(self) -> str: ...

    @property
    def content_type(self) -> str: ...


@runtime_checkable
class Collection(Protocol):
    """Entity that owns the primary item (for example a site section)."""

    @property
    def id(self) -> str: ...

    @property
    def owner_id(self) -> str: ...


@dataclass(frozen=True, slots=True)
class SharedKey(Generic[T]):
    """
    Typed declaration of one shared-data slot.

    Declare keys once at module level so producers and consumers agree on
    both the name and the payload type::

        INSERTED_NEWS: SharedKey[dict[str, dict]] = SharedKey("insertedNews")
    """

    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("SharedKey name must be a non-empty string")

    def __str__(self) -> str:
        return self.name
