"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Dependency-aware aggregation pipeline.

Quick start::

    from mosaic.context import AggregationContext
    from mosaic.pipeline import build_pipeline

    pipeline = build_pipeline([TagsUnit(client), SignaturesUnit(client)])
    results = await pipeline.execute(AggregationContext(item, collection))
"""

from .executor import UnitPipeline
from .factory import build_pipeline, create_metrics, create_pipeline_from_env
from .metrics import NoOpPipelineMetrics, PipelineMetrics, PrometheusPipelineMetrics
from .ordering import execution_order, sort_by_priority, topological_order
from .results import PipelineRun, UnitOutcome, UnitStatus

__all__ = [
    "UnitPipeline",
    "PipelineRun",
    "UnitOutcome",
    "UnitStatus",
    "execution_order",
    "sort_by_priority",
    "topological_order",
    "PipelineMetrics",
    "NoOpPipelineMetrics",
    "PrometheusPipelineMetrics",
    "build_pipeline",
    "create_metrics",
    "create_pipeline_from_env",
]
