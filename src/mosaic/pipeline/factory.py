"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Factory helpers for wiring unit pipelines from explicit lists and settings.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..errors import PipelineConfigError
from ..settings import PipelineSettings
from ..units.contracts import Unit
from .executor import UnitPipeline
from .metrics import NoOpPipelineMetrics, PipelineMetrics

logger = logging.getLogger("mosaic.pipeline")


def create_metrics(settings: PipelineSettings) -> PipelineMetrics:
    """
    Create the metrics sink selected by `settings.metrics_backend`.

    Backends:
    - `noop` (default)
    - `prometheus` (requires `prometheus_client`)
    """
    backend = settings.metrics_backend
    if backend == "noop":
        return NoOpPipelineMetrics()
    if backend == "prometheus":
        from .metrics import PrometheusPipelineMetrics

        return PrometheusPipelineMetrics(namespace=settings.metrics_namespace)
    raise PipelineConfigError(f"Unknown metrics backend: {backend}")


def build_pipeline(
    units: Iterable[Unit],
    *,
    settings: PipelineSettings | None = None,
    metrics: PipelineMetrics | None = None,
) -> UnitPipeline:
    """
    Register `units` in list order, filtered by the enabled/disabled settings.

    Raises:
        PipelineConfigError: When `settings.enabled_units` names a key that is
            not among `units`.
    """
    resolved_settings = settings or PipelineSettings()
    staged = UnitPipeline(units)

    if resolved_settings.enabled_units is not None:
        unknown = [key for key in resolved_settings.enabled_units if key not in staged]
        if unknown:
            raise PipelineConfigError(
                f"Enabled units are not available: {', '.join(unknown)}"
            )

    pipeline = UnitPipeline(
        metrics=metrics or create_metrics(resolved_settings),
        warn_on_cycles=resolved_settings.warn_on_cycles,
    )
    for key in staged.registered_keys():
        unit = staged.get_unit(key)
        if unit is not None and resolved_settings.allows(key):
            pipeline.register(unit)
        else:
            logger.info("Unit %s disabled by configuration", key)
    return pipeline


def create_pipeline_from_env(
    units: Iterable[Unit],
    *,
    metrics: PipelineMetrics | None = None,
) -> UnitPipeline:
    """Build a pipeline from `units` using `MOSAIC_*` environment settings."""
    return build_pipeline(units, settings=PipelineSettings.from_env(), metrics=metrics)
