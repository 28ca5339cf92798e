"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Execution outcome contracts for one pipeline run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from ..context.types import ResultMap

UnitStatus = Literal[
    "resolved",
    "failed",
    "skipped",
]


@dataclass(frozen=True, slots=True)
class UnitOutcome:
    """
    Terminal outcome of one unit in one run.

    Attributes:
        key: Unit key.
        status: ``resolved`` when resolve returned, ``failed`` when supports or
            resolve raised, ``skipped`` when the unit did not support the context.
        start_failed: Whether start raised and the unit ran with empty pending data.
        error: Message of the failure that decided ``status``/``start_failed``.
        duration_ms: Wall time spent in this unit's resolve call.
    """

    key: str
    status: UnitStatus
    start_failed: bool = False
    error: str | None = None
    duration_ms: int = 0


@dataclass(frozen=True, slots=True)
class PipelineRun:
    """Results and per-unit outcomes of one execution."""

    order: list[str]
    results: dict[str, ResultMap] = field(default_factory=dict)
    outcomes: dict[str, UnitOutcome] = field(default_factory=dict)

    @property
    def resolved_keys(self) -> list[str]:
        return [key for key, outcome in self.outcomes.items() if outcome.status == "resolved"]

    @property
    def failed_keys(self) -> list[str]:
        return [key for key, outcome in self.outcomes.items() if outcome.status == "failed"]

    @property
    def skipped_keys(self) -> list[str]:
        return [key for key, outcome in self.outcomes.items() if outcome.status == "skipped"]

    @property
    def degraded(self) -> bool:
        """Whether any unit failed outright or ran without its started work."""
        return any(
            outcome.status == "failed" or outcome.start_failed
            for outcome in self.outcomes.values()
        )
