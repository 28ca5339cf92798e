"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Conventional unit priority levels.
"""

from __future__ import annotations

from enum import IntEnum


class UnitPriority(IntEnum):
    """
    Priority bands for units. Higher values are ordered first.

    Gaps of 10 leave room for new units between existing bands. Declared
    dependencies always win over priority.
    """

    # Core data with no dependencies that others may build on.
    CRITICAL = 100
    # Depends only on the input entities.
    HIGH = 90
    NORMAL = 80
    # Depends on other units.
    LOW = 70
    BACKGROUND = 50
