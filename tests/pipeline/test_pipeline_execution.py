from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from mosaic.context import AggregationContext
from mosaic.pipeline import UnitPipeline
from mosaic.units import EMPTY_PENDING, BaseUnit, InFlight, Ready


def run_async(coro):
    return asyncio.run(coro)


@dataclass(frozen=True)
class Item:
    id: str = "item_1"
    content_type: str = "news"


@dataclass(frozen=True)
class Section:
    id: str = "section_1"
    owner_id: str = "site_1"


def _context() -> AggregationContext:
    return AggregationContext(Item(), Section())


class RecordingUnit(BaseUnit):
    def __init__(
        self,
        key: str,
        *,
        priority: int = 0,
        dependencies: tuple[str, ...] = (),
        supported: bool = True,
        start_error: Exception | None = None,
        resolve_error: Exception | None = None,
        fail_on_empty: bool = False,
        journal: list[str] | None = None,
    ) -> None:
        self.key = key
        self.priority = priority
        self.dependencies = dependencies
        self._supported = supported
        self._start_error = start_error
        self._resolve_error = resolve_error
        self._fail_on_empty = fail_on_empty
        self.journal = journal if journal is not None else []
        self.start_calls = 0
        self.resolve_calls = 0

    def supports(self, context):
        return self._supported

    def start(self, context):
        self.start_calls += 1
        self.journal.append(f"start:{self.key}")
        if self._start_error is not None:
            raise self._start_error
        return Ready({"source": self.key})

    async def resolve(self, pending, context):
        self.resolve_calls += 1
        self.journal.append(f"resolve:{self.key}")
        if self._resolve_error is not None:
            raise self._resolve_error
        data = await self.join(pending)
        if self._fail_on_empty and not data:
            raise ValueError("no pending data")
        return {"value": data.get("source")} if data else {}


def _editorial_units(journal: list[str]) -> list[RecordingUnit]:
    return [
        RecordingUnit(
            "insertedNews", priority=70, dependencies=("signatures",), journal=journal
        ),
        RecordingUnit("signatures", priority=90, journal=journal),
        RecordingUnit("tags", priority=100, journal=journal),
    ]


def test_execution_order_sorts_priority_and_dependencies():
    pipeline = UnitPipeline(_editorial_units([]))

    assert pipeline.execution_order() == ["tags", "signatures", "insertedNews"]


def test_execute_resolves_in_order_and_returns_every_key():
    journal: list[str] = []
    pipeline = UnitPipeline(_editorial_units(journal))
    context = _context()

    results = run_async(pipeline.execute(context))

    assert list(results) == ["tags", "signatures", "insertedNews"]
    assert results["signatures"] == {"value": "signatures"}
    assert journal == [
        "start:tags",
        "start:signatures",
        "start:insertedNews",
        "resolve:tags",
        "resolve:signatures",
        "resolve:insertedNews",
    ]
    assert context.all_resolved_data() == results


def test_all_units_start_before_any_resolve_and_work_overlaps():
    events: list[str] = []

    class SlowUnit(BaseUnit):
        def __init__(self, key: str) -> None:
            self.key = key

        def start(self, context):
            async def fetch() -> str:
                events.append(f"begin:{self.key}")
                await asyncio.sleep(0.05)
                events.append(f"end:{self.key}")
                return self.key

            return InFlight.spawn({"payload": fetch()})

        async def resolve(self, pending, context):
            return await self.join(pending)

    pipeline = UnitPipeline([SlowUnit("a"), SlowUnit("b")])

    results = run_async(pipeline.execute(_context()))

    assert results == {"a": {"payload": "a"}, "b": {"payload": "b"}}
    assert events[:2] == ["begin:a", "begin:b"]


def test_unsupported_unit_is_never_started_nor_resolved():
    supported = RecordingUnit("supported")
    unsupported = RecordingUnit("unsupported", supported=False)
    pipeline = UnitPipeline([supported, unsupported])

    run = run_async(pipeline.run(_context()))

    assert "unsupported" not in run.results
    assert unsupported.start_calls == 0
    assert unsupported.resolve_calls == 0
    assert run.outcomes["unsupported"].status == "skipped"
    assert run.skipped_keys == ["unsupported"]


def test_start_failure_is_contained_and_unit_resolves_with_empty_pending(caplog):
    failing = RecordingUnit("failing", priority=10, start_error=RuntimeError("boom"))
    working = RecordingUnit("working", priority=5)
    pipeline = UnitPipeline([failing, working])

    with caplog.at_level(logging.ERROR, logger="mosaic.pipeline"):
        run = run_async(pipeline.run(_context()))

    assert run.results["working"] == {"value": "working"}
    assert run.results["failing"] == {}
    assert run.outcomes["failing"].status == "resolved"
    assert run.outcomes["failing"].start_failed is True
    assert run.degraded is True
    assert any("failed to start" in record.getMessage() for record in caplog.records)


def test_resolve_failure_on_empty_pending_is_absent_not_empty():
    strict = RecordingUnit(
        "strict", start_error=RuntimeError("down"), fail_on_empty=True
    )
    tolerant = RecordingUnit("tolerant", start_error=RuntimeError("down"))
    pipeline = UnitPipeline([strict, tolerant])
    context = _context()

    results = run_async(pipeline.execute(context))

    assert "strict" not in results
    assert results["tolerant"] == {}
    assert not context.has_resolved_data("strict")
    assert context.has_resolved_data("tolerant")


def test_resolve_failure_does_not_stop_dependents():
    journal: list[str] = []
    parent = RecordingUnit("parent", resolve_error=RuntimeError("x"), journal=journal)
    child = RecordingUnit("child", dependencies=("parent",), journal=journal)
    pipeline = UnitPipeline([child, parent])

    run = run_async(pipeline.run(_context()))

    assert run.failed_keys == ["parent"]
    assert run.results == {"child": {"value": "child"}}
    assert journal.index("resolve:parent") < journal.index("resolve:child")


def test_supports_failure_is_reported_as_failed_unit():
    class BrokenSupports(RecordingUnit):
        def supports(self, context):
            raise LookupError("no type")

    broken = BrokenSupports("broken")
    pipeline = UnitPipeline([broken, RecordingUnit("fine")])

    run = run_async(pipeline.run(_context()))

    assert run.results == {"fine": {"value": "fine"}}
    assert run.outcomes["broken"].status == "failed"
    assert broken.start_calls == 0


def test_dependency_chain_resolves_parents_first_regardless_of_registration():
    journal: list[str] = []
    pipeline = UnitPipeline(
        [
            RecordingUnit("C", priority=10, dependencies=("B",), journal=journal),
            RecordingUnit("B", priority=10, dependencies=("A",), journal=journal),
            RecordingUnit("A", priority=10, journal=journal),
        ]
    )

    run_async(pipeline.execute(_context()))

    assert [entry for entry in journal if entry.startswith("resolve:")] == [
        "resolve:A",
        "resolve:B",
        "resolve:C",
    ]


def test_dependent_resolve_waits_for_dependency_completion():
    finished: list[str] = []

    class Producer(BaseUnit):
        key = "producer"
        priority = 0

        def start(self, context):
            async def produce() -> str:
                await asyncio.sleep(0.03)
                finished.append("producer")
                return "ready"

            return InFlight.spawn({"state": produce()})

        async def resolve(self, pending, context):
            data = await self.join(pending)
            context.set_shared_data("producer.state", data["state"])
            return data

    class Consumer(BaseUnit):
        key = "consumer"
        priority = 100
        dependencies = ("producer",)

        def start(self, context):
            return EMPTY_PENDING

        def resolve(self, pending, context):
            return {"seen": context.shared_data("producer.state")}

    pipeline = UnitPipeline([Consumer(), Producer()])

    results = run_async(pipeline.execute(_context()))

    assert results["consumer"] == {"seen": "ready"}
    assert finished == ["producer"]


def test_missing_dependency_key_is_ignored():
    pipeline = UnitPipeline([RecordingUnit("lonely", dependencies=("ghost",))])

    results = run_async(pipeline.execute(_context()))

    assert results == {"lonely": {"value": "lonely"}}


def test_async_start_is_awaited():
    class AsyncStart(BaseUnit):
        key = "async_start"

        async def start(self, context):
            await asyncio.sleep(0)
            return Ready({"id": context.item_id})

        async def resolve(self, pending, context):
            return await self.join(pending)

    results = run_async(UnitPipeline([AsyncStart()]).execute(_context()))

    assert results == {"async_start": {"id": "item_1"}}


def test_cyclic_dependencies_do_not_raise(caplog):
    pipeline = UnitPipeline(
        [
            RecordingUnit("a", dependencies=("b",)),
            RecordingUnit("b", dependencies=("a",)),
        ]
    )

    with caplog.at_level(logging.WARNING, logger="mosaic.pipeline"):
        results = run_async(pipeline.execute(_context()))

    assert set(results) == {"a", "b"}
    assert any("cycle" in record.getMessage() for record in caplog.records)


def test_execute_twice_reuses_order_and_fresh_contexts():
    pipeline = UnitPipeline(_editorial_units([]))

    first = run_async(pipeline.execute(_context()))
    second = run_async(pipeline.execute(_context()))

    assert first == second


def test_context_reused_after_execute_only_keeps_every_resolved_unit():
    pipeline = UnitPipeline(
        [RecordingUnit("tags", priority=100), RecordingUnit("signatures", priority=90)]
    )
    context = _context()

    async def scenario():
        partial = await pipeline.execute_only(["tags"], context)
        full = await pipeline.execute(context)
        return partial, full

    partial, full = run_async(scenario())

    assert partial == {"tags": {"value": "tags"}}
    assert full == {"tags": {"value": "tags"}, "signatures": {"value": "signatures"}}
    assert context.all_resolved_data() == full


def test_failing_dependencies_accessor_is_contained(caplog):
    class BrokenDependencies(RecordingUnit):
        @property
        def dependencies(self):
            raise RuntimeError("dependency lookup failed")

        @dependencies.setter
        def dependencies(self, value):
            pass

    pipeline = UnitPipeline([BrokenDependencies("broken"), RecordingUnit("healthy")])

    with caplog.at_level(logging.ERROR, logger="mosaic.units"):
        results = run_async(pipeline.execute(_context()))

    assert results == {"broken": {"value": "broken"}, "healthy": {"value": "healthy"}}
    assert any("broken" in record.getMessage() for record in caplog.records)


def test_resolve_failure_cancels_unjoined_operations():
    handles: list[InFlight] = []

    class Abandons(BaseUnit):
        key = "abandons"

        def start(self, context):
            handle = InFlight.spawn({"slow": asyncio.sleep(10, result="late")})
            handles.append(handle)
            return handle

        def resolve(self, pending, context):
            raise RuntimeError("gave up before joining")

    async def scenario():
        run = await UnitPipeline([Abandons()]).run(_context())
        operation = handles[0].operations["slow"]
        await asyncio.gather(operation, return_exceptions=True)
        return run, operation

    run, operation = run_async(scenario())

    assert run.failed_keys == ["abandons"]
    assert operation.cancelled()
