"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Two-phase fan-out/fan-in executor for registered aggregation units.
"""

from __future__ import annotations

import inspect
import logging
import time
from collections.abc import Iterable
from typing import Any

from ..context import AggregationContext
from ..context.types import ResultMap
from ..errors import UnitRegistrationError
from ..units.contracts import Unit, unit_dependencies, unit_supports
from ..units.pending import EMPTY_PENDING, InFlight
from .metrics import NoOpPipelineMetrics, PipelineMetrics
from .ordering import execution_order
from .results import PipelineRun, UnitOutcome

logger = logging.getLogger("mosaic.pipeline")


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class UnitPipeline:
    """
    Registry of units plus the two-phase execution protocol.

    Phase 1 evaluates ``supports`` and calls ``start`` on every unit in
    execution order so their asynchronous work overlaps. Phase 2 walks the
    same order and resolves each unit, resolving pending dependencies first.
    Unit failures are logged and contained; execution never raises.
    """

    def __init__(
        self,
        units: Iterable[Unit] | None = None,
        *,
        metrics: PipelineMetrics | None = None,
        warn_on_cycles: bool = True,
    ) -> None:
        self._units: dict[str, Unit] = {}
        self._order: list[str] | None = None
        self._metrics: PipelineMetrics = metrics or NoOpPipelineMetrics()
        self._warn_on_cycles = warn_on_cycles
        for unit in units or ():
            self.register(unit)

    # Registry

    def register(self, unit: Unit) -> "UnitPipeline":
        """
        Register `unit` under its key; a later registration for the same key wins.

        Raises:
            UnitRegistrationError: When the unit has no usable key or lacks
                ``start``/``resolve``.
        """
        key = getattr(unit, "key", None)
        if callable(key):
            key = key()
        if not isinstance(key, str) or not key.strip():
            raise UnitRegistrationError(
                f"Unit {type(unit).__name__} must declare a non-empty string key"
            )
        for method in ("start", "resolve"):
            if not callable(getattr(unit, method, None)):
                raise UnitRegistrationError(
                    f"Unit '{key}' does not implement '{method}'"
                )
        self._units[key] = unit
        self._order = None
        return self

    def registered_keys(self) -> list[str]:
        return list(self._units.keys())

    def has_unit(self, key: str) -> bool:
        return key in self._units

    def get_unit(self, key: str) -> Unit | None:
        return self._units.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._units

    def __len__(self) -> int:
        return len(self._units)

    def execution_order(self) -> list[str]:
        """Return the cached execution order, computing it after registry changes."""
        if self._order is None:
            self._order = execution_order(
                self._units,
                on_cycle=self._report_cycle if self._warn_on_cycles else None,
            )
            logger.debug("Computed unit execution order: %s", self._order)
        return list(self._order)

    def _report_cycle(self, path: list[str]) -> None:
        logger.warning(
            "Unit dependency cycle detected: %s; order falls back to visit order",
            " -> ".join(path),
        )

    # Execution

    async def execute(self, context: AggregationContext) -> dict[str, ResultMap]:
        """Run every applicable unit and return results keyed by unit key."""
        run = await self.run(context)
        return run.results

    async def run(self, context: AggregationContext) -> PipelineRun:
        """Run every applicable unit and return results plus per-unit outcomes."""
        order = self.execution_order()
        units = {key: self._units[key] for key in order if key in self._units}
        outcomes: dict[str, UnitOutcome] = {}
        start_errors: dict[str, str] = {}

        # Phase 1: start every applicable unit.
        pending: dict[str, Any] = {}
        for key, unit in units.items():
            try:
                supported = unit_supports(unit, context)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Unit %s supports() failed", key)
                self._metrics.incr("pipeline_unit_start_failed_total", tags={"unit": key})
                outcomes[key] = UnitOutcome(key=key, status="failed", error=str(exc))
                continue
            if not supported:
                logger.debug("Unit %s skipped (not supported)", key)
                self._metrics.incr("pipeline_units_skipped_total", tags={"unit": key})
                outcomes[key] = UnitOutcome(key=key, status="skipped")
                continue

            try:
                pending[key] = await _maybe_await(unit.start(context))
                self._metrics.incr("pipeline_units_started_total", tags={"unit": key})
                logger.debug("Unit %s started", key)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Unit %s failed to start", key)
                self._metrics.incr("pipeline_unit_start_failed_total", tags={"unit": key})
                pending[key] = EMPTY_PENDING
                start_errors[key] = str(exc)

        # Phase 2: resolve in order, pending dependencies first.
        results: dict[str, ResultMap] = {}
        resolved: set[str] = set()
        in_progress: set[str] = set()

        async def resolve_unit(key: str) -> None:
            if key in resolved or key in in_progress:
                return
            in_progress.add(key)
            unit = units[key]
            for dependency in unit_dependencies(unit):
                if dependency in pending and dependency not in resolved:
                    await resolve_unit(dependency)

            started = time.monotonic()
            try:
                result = await _maybe_await(unit.resolve(pending[key], context))
                if result is None:
                    result = {}
                context.set_resolved_data(key, result)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Unit %s failed to resolve", key)
                if isinstance(pending[key], InFlight):
                    pending[key].cancel()
                self._metrics.incr("pipeline_unit_resolve_failed_total", tags={"unit": key})
                outcomes[key] = UnitOutcome(
                    key=key,
                    status="failed",
                    start_failed=key in start_errors,
                    error=str(exc),
                    duration_ms=_elapsed_ms(started),
                )
            else:
                results[key] = result
                self._metrics.incr("pipeline_units_resolved_total", tags={"unit": key})
                logger.debug("Unit %s resolved", key)
                outcomes[key] = UnitOutcome(
                    key=key,
                    status="resolved",
                    start_failed=key in start_errors,
                    error=start_errors.get(key),
                    duration_ms=_elapsed_ms(started),
                )
            finally:
                in_progress.discard(key)
                resolved.add(key)

        for key in units:
            if key in pending:
                await resolve_unit(key)

        return PipelineRun(
            order=order,
            results=results,
            outcomes={key: outcomes[key] for key in order if key in outcomes},
        )

    async def execute_only(
        self,
        keys: Iterable[str],
        context: AggregationContext,
    ) -> dict[str, ResultMap]:
        """
        Run only `keys`, each start-then-resolve, in the given order.

        Declared dependencies are not awaited and there is no fan-out; unknown
        keys are logged and skipped.
        """
        results: dict[str, ResultMap] = {}
        for key in keys:
            unit = self._units.get(key)
            if unit is None:
                logger.warning("Unit %s not found", key)
                continue

            pending: Any = None
            try:
                if not unit_supports(unit, context):
                    logger.debug("Unit %s skipped (not supported)", key)
                    continue
                pending = await _maybe_await(unit.start(context))
                result = await _maybe_await(unit.resolve(pending, context))
                if result is None:
                    result = {}
                context.set_resolved_data(key, result)
            except Exception:  # noqa: BLE001
                logger.exception("Unit %s execution failed", key)
                if isinstance(pending, InFlight):
                    pending.cancel()
                self._metrics.incr("pipeline_unit_resolve_failed_total", tags={"unit": key})
                continue
            results[key] = result
            self._metrics.incr("pipeline_units_resolved_total", tags={"unit": key})
        return results


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
