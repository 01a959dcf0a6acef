# Shared fixtures: XML fixtures on disk, an open store, and build helpers.
# Everything runs against real SQLite files under tmp_path (no mocks).

import os
from pathlib import Path
from typing import Callable, List

import pytest

from xmlgraph.ingestion import IngestionPipeline
from xmlgraph.relationships import RelationshipDetector, RelationshipPipeline
from xmlgraph.shared.config import (
    Config,
    IngestionConfig,
    RelationshipsConfig,
    StoreConfig,
)
from xmlgraph.store import GraphStore

os.environ["ENV"] = "development"

LIBRARY_XML = """<?xml version="1.0" encoding="UTF-8"?>
<library id="main_library" name="City Library">
  <author id="author_1" name="Jane Austen" born="1775-12-16"/>
  <author id="author_2" name="Mark Twain"/>
  <category id="cat_1" label="Fiction"/>
  <book id="book_1" author_id="author_1" authors="author_1,author_2"
        tags="cat_1 author_1" year="1813" price="12.50" available="true">
    <title>Pride and Prejudice</title>
  </book>
  <review id="review_1" book_ref="book_1" rating="5"/>
</library>
"""


@pytest.fixture
def xml_dir(tmp_path) -> Path:
    path = tmp_path / "xml"
    path.mkdir()
    return path


@pytest.fixture
def write_xml(xml_dir) -> Callable[[str, str], str]:
    """Write an XML fixture and return its path."""

    def _write(name: str, content: str) -> str:
        path = xml_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "db" / "graph.sqlite3")


@pytest.fixture
def store(db_path):
    graph_store = GraphStore.open(db_path, force=True)
    yield graph_store
    graph_store.close()


@pytest.fixture
def make_config(db_path) -> Callable[..., Config]:
    def _make(
        *,
        concurrency: int = 2,
        batch_size: int = 1000,
        queue_size: int = 10,
        relationships_enabled: bool = True,
        relationships_queue_size: int = 10,
        adapters: List[str] = None,
    ) -> Config:
        return Config(
            ingestion=IngestionConfig(
                concurrency=concurrency,
                batch_size=batch_size,
                queue_size=queue_size,
            ),
            relationships=RelationshipsConfig(
                enabled=relationships_enabled,
                queue_size=relationships_queue_size,
                adapters=adapters
                if adapters is not None
                else ["structural", "attribute_reference"],
            ),
            store=StoreConfig(path=db_path, force=True),
        )

    return _make


async def ingest(store: GraphStore, paths, **ingestion_overrides) -> int:
    config = IngestionConfig(**ingestion_overrides)
    return await IngestionPipeline(store, config).run(paths)


async def detect(store: GraphStore, adapters, queue_size: int = 10) -> int:
    if all(isinstance(a, str) for a in adapters):
        detector = RelationshipDetector.from_names(adapters)
    else:
        detector = RelationshipDetector(adapters)
    config = RelationshipsConfig(queue_size=queue_size)
    return await RelationshipPipeline(store, detector, config).run()


def count(store: GraphStore, table: str, where: str = "", params=()) -> int:
    sql = f"SELECT COUNT(*) FROM {table}"
    if where:
        sql += f" WHERE {where}"
    return store.query(sql, params)[0][0]


def edges_of_type(store: GraphStore, reference_type: str):
    return store.query(
        """
        SELECT source_node_id, target_node_id, attribute_name, confidence
        FROM cross_references WHERE reference_type = ?
        ORDER BY source_node_id, target_node_id
        """,
        (reference_type,),
    )


@pytest.fixture
def run_ingestion():
    return ingest


@pytest.fixture
def run_detection():
    return detect


@pytest.fixture
def row_count():
    return count


@pytest.fixture
def edges_by_type():
    return edges_of_type


@pytest.fixture
def library_xml():
    return LIBRARY_XML
