"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

mosaic: assemble composite responses from independently fetched data slices.
"""

from .composition import BaseTransformer, TransformerPipeline
from .context import AggregationContext, SharedKey
from .errors import (
    MosaicError,
    PipelineConfigError,
    UnitRegistrationError,
)
from .pipeline import PipelineRun, UnitOutcome, UnitPipeline, build_pipeline
from .settings import PipelineSettings
from .units import EMPTY_PENDING, BaseUnit, InFlight, Ready, UnitPriority, settle

__all__ = [
    "AggregationContext",
    "SharedKey",
    "BaseUnit",
    "UnitPriority",
    "Ready",
    "InFlight",
    "EMPTY_PENDING",
    "settle",
    "UnitPipeline",
    "PipelineRun",
    "UnitOutcome",
    "build_pipeline",
    "PipelineSettings",
    "BaseTransformer",
    "TransformerPipeline",
    "MosaicError",
    "UnitRegistrationError",
    "PipelineConfigError",
]
