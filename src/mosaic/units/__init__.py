"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Unit contract, base class, priorities and pending-handle primitives.
"""

from .base import BaseUnit
from .contracts import Unit, unit_dependencies, unit_priority, unit_supports
from .pending import (
    EMPTY_PENDING,
    Fulfilled,
    InFlight,
    PendingHandle,
    Ready,
    Rejected,
    Settled,
    settle,
)
from .priority import UnitPriority

__all__ = [
    "Unit",
    "BaseUnit",
    "UnitPriority",
    "unit_priority",
    "unit_dependencies",
    "unit_supports",
    "PendingHandle",
    "Ready",
    "InFlight",
    "EMPTY_PENDING",
    "Settled",
    "Fulfilled",
    "Rejected",
    "settle",
]
