"""
Single writer for the ingestion phase.

The DocumentWriter is the only code that mutates the store while ingestion
runs. It drains the documents channel until end-of-stream, upserting each
extraction result and committing every ``batch_size`` documents so that a
transaction never grows without bound and progress is visible to readers.
"""

from typing import Optional

from xmlgraph.run_stats import BuildRunStats
from xmlgraph.shared.channel import Channel
from xmlgraph.shared.errors import StoreError
from xmlgraph.shared.models import ExtractionResult
from xmlgraph.shared.observability import get_logger
from xmlgraph.shared.observability.metrics import (
    ingestion_documents_total,
    ingestion_nodes_total,
)
from xmlgraph.store import GraphStore

logger = get_logger(__name__)

INSERT_DOCUMENT = """
INSERT OR REPLACE INTO documents (id, filename, file_hash, file_size)
VALUES (?, ?, ?, ?)
"""

INSERT_NODE = """
INSERT OR REPLACE INTO nodes
  (id, node_type, document_id, parent_id, position, content, xpath)
VALUES (?, ?, ?, ?, ?, ?, ?)
"""

INSERT_PROPERTY = """
INSERT OR REPLACE INTO node_properties
  (node_id, property_name, property_value, data_type)
VALUES (?, ?, ?, ?)
"""


class DocumentWriter:
    def __init__(
        self,
        store: GraphStore,
        batch_size: int,
        stats: Optional[BuildRunStats] = None,
    ):
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.store = store
        self.batch_size = batch_size
        self.stats = stats
        self.documents_written = 0
        self._insert_document = store.prepare(INSERT_DOCUMENT)
        self._insert_node = store.prepare(INSERT_NODE)
        self._insert_property = store.prepare(INSERT_PROPERTY)

    async def consume(self, channel: Channel[ExtractionResult]) -> int:
        """
        Write every result received until end-of-stream.

        Returns:
            Number of documents written

        Raises:
            StoreError: On any write failure; the open batch is rolled back
        """
        self.store.begin()
        try:
            async for result in channel:
                self.write_document(result)
                self.documents_written += 1

                if self.documents_written % self.batch_size == 0:
                    self.store.commit()
                    self.store.begin()
                    logger.info(
                        "documents_committed",
                        documents_written=self.documents_written,
                    )
        except BaseException:
            self.store.rollback()
            raise

        self.store.commit()
        logger.info(
            "document_writer_completed", documents_written=self.documents_written
        )
        return self.documents_written

    def write_document(self, result: ExtractionResult) -> None:
        document = result.document
        try:
            self._insert_document.execute(
                document.id, document.filename, document.file_hash, document.file_size
            )
            for node in result.nodes:
                self._insert_node.execute(
                    node.id,
                    node.node_type,
                    node.document_id,
                    node.parent_id,
                    node.position,
                    node.content,
                    node.xpath,
                )
            for prop in result.properties:
                self._insert_property.execute(
                    prop.node_id,
                    prop.property_name,
                    prop.property_value,
                    prop.data_type.value,
                )
        except StoreError as e:
            raise StoreError(
                f"writing {result.source_file} failed: {e}", document_id=document.id
            ) from e

        ingestion_documents_total.labels(status="written").inc()
        ingestion_nodes_total.inc(len(result.nodes))
        if self.stats is not None:
            self.stats.record_document_written(result)
        logger.debug(
            "document_written",
            document_id=document.id,
            nodes=len(result.nodes),
            properties=len(result.properties),
        )
