from __future__ import annotations

import asyncio
import logging

import pytest

from mosaic.units import (
    EMPTY_PENDING,
    BaseUnit,
    Fulfilled,
    InFlight,
    Ready,
    Rejected,
    UnitPriority,
    settle,
    unit_dependencies,
    unit_priority,
)


def run_async(coro):
    return asyncio.run(coro)


class TagsUnit(BaseUnit):
    key = "tags"
    priority = UnitPriority.CRITICAL

    def start(self, context):
        return EMPTY_PENDING

    async def resolve(self, pending, context):
        return await self.join(pending)


def test_settle_reports_each_outcome_without_short_circuit():
    finished: list[str] = []

    async def ok(name: str, delay: float) -> str:
        await asyncio.sleep(delay)
        finished.append(name)
        return name

    async def boom() -> str:
        raise LookupError("tag 7 not found")

    async def scenario():
        return await settle({"fast_fail": boom(), "slow": ok("slow", 0.02), "quick": ok("quick", 0)})

    settled = run_async(scenario())

    assert list(settled) == ["fast_fail", "slow", "quick"]
    assert isinstance(settled["fast_fail"], Rejected)
    assert isinstance(settled["fast_fail"].error, LookupError)
    assert settled["slow"] == Fulfilled("slow")
    assert settled["quick"].ok is True
    assert sorted(finished) == ["quick", "slow"]


def test_settle_reports_cancelled_operation_as_rejected():
    async def scenario():
        task = asyncio.ensure_future(asyncio.sleep(10))
        task.cancel()
        return await settle({"cancelled": task})

    settled = run_async(scenario())

    assert settled["cancelled"].ok is False
    assert isinstance(settled["cancelled"].error, asyncio.CancelledError)


def test_settle_of_nothing_is_empty():
    assert run_async(settle({})) == {}


def test_join_merges_fulfilled_values_and_logs_rejections(caplog):
    unit = TagsUnit()

    async def lookup(tag_id: str) -> dict:
        if tag_id == "bad":
            raise RuntimeError("tag service down")
        return {"id": tag_id}

    async def scenario():
        pending = InFlight.spawn(
            {"t1": lookup("t1"), "bad": lookup("bad")},
            data={"count": 2},
        )
        return await unit.join(pending)

    with caplog.at_level(logging.WARNING, logger="mosaic.units"):
        joined = run_async(scenario())

    assert joined == {"count": 2, "t1": {"id": "t1"}}
    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 1
    message = warnings[0].getMessage()
    assert "tags" in message and "bad" in message and "tag service down" in message


def test_join_handles_ready_mapping_and_none():
    unit = TagsUnit()

    assert run_async(unit.join(Ready({"a": 1}))) == {"a": 1}
    assert run_async(unit.join({"b": 2})) == {"b": 2}
    assert run_async(unit.join(None)) == {}
    assert run_async(unit.join(EMPTY_PENDING)) == {}

    with pytest.raises(TypeError):
        run_async(unit.join(42))


def test_fulfilled_drops_none_values():
    unit = TagsUnit()

    values = unit.fulfilled({"a": Fulfilled(None), "b": Fulfilled(0)})

    assert values == {"b": 0}


def test_safe_call_returns_default_on_failure(caplog):
    unit = TagsUnit()

    async def fails():
        raise ValueError("bad payload")

    with caplog.at_level(logging.ERROR, logger="mosaic.units"):
        assert run_async(unit.safe_call(fails, default={"countComments": 0})) == {
            "countComments": 0
        }
    assert run_async(unit.safe_call(lambda: 5, default=0)) == 5
    assert any("tags" in record.getMessage() for record in caplog.records)


def test_in_flight_cancel_and_done():
    async def scenario():
        pending = InFlight.spawn({"slow": asyncio.sleep(10)})
        assert pending.done is False
        pending.cancel()
        await asyncio.sleep(0)
        return pending.done

    assert run_async(scenario()) is True


def test_contract_defaults_and_normalization():
    class Bare:
        key = "bare"

    class Declares:
        key = "declares"
        priority = UnitPriority.LOW
        dependencies = ["signatures", "tags", "signatures"]

    assert unit_priority(Bare()) == 0
    assert unit_dependencies(Bare()) == ()
    assert unit_priority(Declares()) == 70
    assert unit_dependencies(Declares()) == ("signatures", "tags")
    assert TagsUnit().supports(object()) is True
    assert TagsUnit.dependencies == ()


def test_priority_bands():
    assert [band.value for band in UnitPriority] == [100, 90, 80, 70, 50]
