import dataclasses

import pytest

from xmlgraph.relationships import (
    ADAPTER_REGISTRY,
    RelationshipAdapter,
    RelationshipDetector,
    RelationshipPipeline,
    create_adapter,
)
from xmlgraph.relationships.adapters import StructuralRelationshipAdapter
from xmlgraph.run_stats import BuildRunStats
from xmlgraph.shared.config import RelationshipsConfig
from xmlgraph.shared.errors import AdapterError, StoreError


class SpecialRefAdapter(RelationshipAdapter):
    name = "special_ref"

    def detect(self, document_id, snapshot):
        return [
            self.create_relationship(
                p.node_id, p.property_value, "special", 0.5, p.property_name
            )
            for p in snapshot.properties(document_id)
            if p.property_name == "special_ref"
        ]


class ExplodingAdapter(RelationshipAdapter):
    name = "exploding"

    def detect(self, document_id, snapshot):
        raise ValueError("detector bug")


class FixedSourceAdapter(RelationshipAdapter):
    name = "fixed_source"

    def detect(self, document_id, snapshot):
        edge = self.create_relationship("a", "b", "pinned")
        return [dataclasses.replace(edge, source_file="elsewhere.xml")]


def _corpus(write_xml, files=3):
    return [
        write_xml(
            f"doc_{d}.xml",
            f'<root id="r{d}"><item id="a{d}"/><item id="b{d}" special_ref="a{d}"/>'
            "</root>",
        )
        for d in range(files)
    ]


def test_registry_names():
    assert set(ADAPTER_REGISTRY) == {
        "structural",
        "attribute_reference",
        "multi_reference",
        "semantic",
    }
    assert isinstance(create_adapter("structural"), StructuralRelationshipAdapter)
    with pytest.raises(ValueError, match="known"):
        create_adapter("nope")


def test_detector_keeps_registration_order():
    detector = RelationshipDetector.from_names(["attribute_reference", "structural"])
    detector.add_adapter(SpecialRefAdapter())

    assert [a.name for a in detector.adapters] == [
        "attribute_reference",
        "structural",
        "special_ref",
    ]
    assert len(detector) == 3


def test_detector_rejects_non_adapters():
    with pytest.raises(TypeError):
        RelationshipDetector().add_adapter(object())


@pytest.mark.asyncio
async def test_repeated_detection_appends_edges(
    store, write_xml, run_ingestion, run_detection, row_count
):
    await run_ingestion(store, _corpus(write_xml))

    first = await run_detection(store, ["structural", "attribute_reference"])
    after_first = row_count(store, "cross_references")
    second = await run_detection(store, ["structural", "attribute_reference"])

    assert first == second == after_first
    # No natural key on edges: the second run duplicates every row
    assert row_count(store, "cross_references") == 2 * after_first


@pytest.mark.asyncio
@pytest.mark.parametrize("queue_size", [1, 2, 100])
async def test_queue_size_never_changes_edge_count(
    store, write_xml, run_ingestion, run_detection, row_count, queue_size
):
    await run_ingestion(store, _corpus(write_xml, files=6))

    written = await run_detection(store, ["structural"], queue_size=queue_size)

    # Per document: 2 children -> 2 parent_child, 2 child_parent, 2 sibling,
    # 1 next_sibling, 1 previous_sibling
    assert written == 6 * 8
    assert row_count(store, "cross_references") == 6 * 8


@pytest.mark.asyncio
async def test_custom_adapter_runs_with_builtins(
    store, write_xml, run_ingestion, edges_by_type
):
    await run_ingestion(store, _corpus(write_xml, files=1))
    detector = RelationshipDetector.from_names(["attribute_reference"])
    detector.add_adapter(SpecialRefAdapter())
    stats = BuildRunStats.start_new()

    await RelationshipPipeline(
        store, detector, RelationshipsConfig(), stats=stats
    ).run()

    assert edges_by_type(store, "special") == [("b0", "a0", "special_ref", 0.5)]
    assert [row[:3] for row in edges_by_type(store, "attribute_reference")] == [
        ("b0", "a0", "special_ref")
    ]
    assert stats.documents_scanned == 1
    assert stats.edges == {"special": 1, "attribute_reference": 1}


@pytest.mark.asyncio
async def test_adapter_source_file_is_kept(store, write_xml, run_ingestion):
    await run_ingestion(store, _corpus(write_xml, files=1))
    detector = RelationshipDetector([FixedSourceAdapter()])

    await RelationshipPipeline(store, detector, RelationshipsConfig()).run()

    assert store.query("SELECT source_file FROM cross_references") == [
        ("elsewhere.xml",)
    ]


@pytest.mark.asyncio
async def test_adapter_failure_is_fatal(
    store, write_xml, run_ingestion, row_count
):
    await run_ingestion(store, _corpus(write_xml))
    detector = RelationshipDetector(
        [StructuralRelationshipAdapter(), ExplodingAdapter()]
    )

    with pytest.raises(AdapterError) as exc_info:
        await RelationshipPipeline(
            store, detector, RelationshipsConfig(queue_size=1)
        ).run()

    assert exc_info.value.adapter_name == "exploding"
    assert exc_info.value.document_id.startswith("doc_")
    assert isinstance(exc_info.value.cause, ValueError)
    assert row_count(store, "cross_references") == 0


@pytest.mark.asyncio
async def test_store_failure_is_fatal(store, write_xml, run_ingestion, run_detection):
    await run_ingestion(store, _corpus(write_xml))
    store.execute("DROP TABLE cross_references")

    with pytest.raises(StoreError) as exc_info:
        await run_detection(store, ["structural"], queue_size=1)

    assert exc_info.value.document_id.startswith("doc_")
    assert not store.in_transaction


@pytest.mark.asyncio
async def test_empty_store_writes_nothing(store, run_detection):
    assert await run_detection(store, ["structural"]) == 0
