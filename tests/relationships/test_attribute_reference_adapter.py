from types import SimpleNamespace

import pytest

from xmlgraph.relationships.adapters import AttributeReferenceAdapter
from xmlgraph.relationships.adapters.attribute_reference import (
    is_single_id_reference,
    reference_confidence,
)
from xmlgraph.shared.models import Property


def _snapshot(node_ids, properties):
    return SimpleNamespace(
        node_ids=lambda document_id: set(node_ids),
        properties=lambda document_id: properties,
    )


def _detect(node_ids, properties):
    return AttributeReferenceAdapter().detect("doc", _snapshot(node_ids, properties))


@pytest.mark.parametrize(
    "value,expected",
    [
        ("item_2", True),
        ("_private", True),
        ("section-3-b", True),
        ("1999", True),
        ("a,b", False),
        ("a b", False),
        ("", False),
        ("a.b", False),
    ],
)
def test_single_id_reference(value, expected):
    assert is_single_id_reference(value) is expected


@pytest.mark.parametrize(
    "name,value,expected",
    [
        ("author_id", "author_1", 1.0),
        ("special_ref", "item2", 0.95),
        ("Target", "node-7", 0.95),
        ("owner", "user_x1", 0.85),
        ("owner", "node2", 0.8),
    ],
)
def test_confidence(name, value, expected):
    assert reference_confidence(name, value) == pytest.approx(expected)


def test_reference_to_existing_node():
    edges = _detect(
        ["item_1", "item2"],
        [Property("item_1", "special_ref", "item2")],
    )

    assert len(edges) == 1
    edge = edges[0]
    assert edge.source_node_id == "item_1"
    assert edge.target_node_id == "item2"
    assert edge.reference_type == "attribute_reference"
    assert edge.attribute_name == "special_ref"
    assert 0.8 <= edge.confidence <= 1.0


def test_unknown_target_and_self_reference_ignored():
    edges = _detect(
        ["a", "b"],
        [
            Property("a", "ref", "missing"),
            Property("a", "self", "a"),
        ],
    )
    assert edges == []


def test_multi_token_values_never_match():
    edges = _detect(
        ["a", "b", "c"],
        [
            Property("a", "refs", "b,c"),
            Property("a", "refs2", "b c"),
            Property("a", "refs3", " b"),
        ],
    )
    assert edges == []


@pytest.mark.asyncio
async def test_library_references(
    store, write_xml, library_xml, run_ingestion, run_detection, edges_by_type
):
    await run_ingestion(store, [write_xml("library.xml", library_xml)])
    await run_detection(store, ["attribute_reference"])

    edges = edges_by_type(store, "attribute_reference")
    assert [(s, t, a) for s, t, a, _ in edges] == [
        ("book_1", "author_1", "author_id"),
        ("review_1", "book_1", "book_ref"),
    ]
    assert all(c == pytest.approx(1.0) for *_, c in edges)


@pytest.mark.asyncio
async def test_references_stay_within_document(
    store, write_xml, run_ingestion, run_detection, row_count
):
    a = write_xml("a.xml", '<root id="a_root"><x id="x1" ref="y1"/></root>')
    b = write_xml("b.xml", '<root id="b_root"><y id="y1"/></root>')
    await run_ingestion(store, [a, b])

    await run_detection(store, ["attribute_reference"])

    assert row_count(store, "cross_references") == 0
