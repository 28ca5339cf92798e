"""
editorial_units.py: Aggregate a news item from three fake backends.

Demonstrates priorities, an ordering-only dependency, shared data between
units, per-item failure tolerance, and the composition stage.

Usage:
    python examples/editorial_units.py
"""

import asyncio
import logging
from dataclasses import dataclass

from mosaic import (
    AggregationContext,
    BaseTransformer,
    BaseUnit,
    InFlight,
    Ready,
    SharedKey,
    TransformerPipeline,
    UnitPriority,
    build_pipeline,
)

SIGNATURE_IDS: SharedKey[list[str]] = SharedKey("signatureIds")


@dataclass(frozen=True)
class NewsItem:
    id: str
    content_type: str
    tag_ids: tuple[str, ...]
    signature_ids: tuple[str, ...]
    inserted_ids: tuple[str, ...]


@dataclass(frozen=True)
class Section:
    id: str
    owner_id: str


class FakeDirectory:
    """Pretend remote service; ids starting with `x` fail."""

    def __init__(self, kind: str, latency: float = 0.05) -> None:
        self.kind = kind
        self.latency = latency

    async def fetch(self, entity_id: str) -> dict:
        await asyncio.sleep(self.latency)
        if entity_id.startswith("x"):
            raise LookupError(f"{self.kind} {entity_id} not found")
        return {"id": entity_id, "kind": self.kind}


class TagsUnit(BaseUnit):
    key = "tags"
    priority = UnitPriority.CRITICAL

    def __init__(self, directory: FakeDirectory) -> None:
        self._directory = directory

    def start(self, context):
        return InFlight.spawn(
            {tag_id: self._directory.fetch(tag_id) for tag_id in context.item.tag_ids}
        )

    async def resolve(self, pending, context):
        tags = await self.join(pending)
        return {"tags": list(tags.values())}


class SignaturesUnit(BaseUnit):
    key = "signatures"
    priority = UnitPriority.HIGH

    def __init__(self, directory: FakeDirectory) -> None:
        self._directory = directory

    def start(self, context):
        return InFlight.spawn(
            {sid: self._directory.fetch(sid) for sid in context.item.signature_ids}
        )

    async def resolve(self, pending, context):
        signatures = await self.join(pending)
        context.set_shared_data(SIGNATURE_IDS, list(signatures))
        return {"signatures": list(signatures.values())}


class InsertedNewsUnit(BaseUnit):
    key = "insertedNews"
    priority = UnitPriority.LOW
    dependencies = ("signatures",)

    def supports(self, context):
        return bool(context.item.inserted_ids)

    def start(self, context):
        return Ready({"ids": list(context.item.inserted_ids)})

    async def resolve(self, pending, context):
        data = await self.join(pending)
        authors = context.shared_data(SIGNATURE_IDS, [])
        return {"insertedNews": data["ids"], "byAuthors": authors}


class BodyTransformer(BaseTransformer):
    key = "body"
    priority = 100

    def transform(self, context) -> None:
        context.set_field("id", context.item_id)
        context.set_field("tags", self.value(context.aggregated("tags"), "tags", []))
        context.set_field(
            "signatures",
            self.value(context.aggregated("signatures"), "signatures", []),
        )


class RelatedTransformer(BaseTransformer):
    key = "related"

    def supports(self, context) -> bool:
        return context.has_aggregated("insertedNews")

    def transform(self, context) -> None:
        context.merge(context.aggregated("insertedNews"))


async def main() -> None:
    logging.basicConfig(level=logging.INFO)

    pipeline = build_pipeline(
        [
            InsertedNewsUnit(),
            SignaturesUnit(FakeDirectory("signature")),
            TagsUnit(FakeDirectory("tag", latency=0.1)),
        ]
    )
    context = AggregationContext(
        NewsItem(
            id="news-1",
            content_type="news",
            tag_ids=("t1", "x2", "t3"),
            signature_ids=("s1",),
            inserted_ids=("news-7", "news-9"),
        ),
        Section(id="politics", owner_id="site-1"),
    )

    run = await pipeline.run(context)
    print(f"Order: {run.order}")
    for outcome in run.outcomes.values():
        print(f"  {outcome.key}: {outcome.status} ({outcome.duration_ms} ms)")

    response = TransformerPipeline([RelatedTransformer(), BodyTransformer()]).transform(context)
    print(f"Response: {response}")


if __name__ == "__main__":
    asyncio.run(main())
