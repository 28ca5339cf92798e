"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Exception types raised by mosaic wiring and registration.

Execution never raises these for unit failures; unit failures are contained
and logged by the pipeline.
"""

from __future__ import annotations


class MosaicError(RuntimeError):
    """Base mosaic error."""


class UnitRegistrationError(MosaicError, ValueError):
    """Raised when an object cannot be registered as a unit or transformer."""


class PipelineConfigError(MosaicError, ValueError):
    """Raised when pipeline settings or wiring configuration are invalid."""

