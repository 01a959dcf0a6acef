"""
Single writer for the relationship phase.

Drains the edges channel and appends every edge to ``cross_references``.
Edges are never deduplicated: running detection twice over the same model
stores every edge twice.
"""

from typing import Optional

from xmlgraph.run_stats import BuildRunStats
from xmlgraph.shared.channel import Channel
from xmlgraph.shared.errors import StoreError
from xmlgraph.shared.models import DocumentEdges
from xmlgraph.shared.observability import get_logger
from xmlgraph.shared.observability.metrics import relationship_edges_total
from xmlgraph.store import GraphStore

logger = get_logger(__name__)

INSERT_EDGE = """
INSERT INTO cross_references
  (source_node_id, target_node_id, reference_type, attribute_name,
   confidence, source_file)
VALUES (?, ?, ?, ?, ?, ?)
"""


class RelationshipWriter:
    def __init__(
        self,
        store: GraphStore,
        batch_size: int = 1000,
        stats: Optional[BuildRunStats] = None,
    ):
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.store = store
        self.batch_size = batch_size
        self.stats = stats
        self.documents_processed = 0
        self.edges_written = 0
        self._insert_edge = store.prepare(INSERT_EDGE)

    async def consume(self, channel: Channel[DocumentEdges]) -> int:
        """
        Append every received edge until end-of-stream.

        Returns:
            Total number of edges written

        Raises:
            StoreError: On any write failure; the open batch is rolled back
        """
        self.store.begin()
        try:
            async for item in channel:
                self.write_edges(item)
                self.documents_processed += 1
                logger.info(
                    "relationships_written",
                    document_id=item.document_id,
                    edges=len(item.edges),
                    total_edges=self.edges_written,
                )

                if self.documents_processed % self.batch_size == 0:
                    self.store.commit()
                    self.store.begin()
        except BaseException:
            self.store.rollback()
            raise

        self.store.commit()
        logger.info(
            "relationship_detection_completed",
            documents=self.documents_processed,
            total_edges=self.edges_written,
        )
        return self.edges_written

    def write_edges(self, item: DocumentEdges) -> None:
        try:
            for edge in item.edges:
                self._insert_edge.execute(
                    edge.source_node_id,
                    edge.target_node_id,
                    edge.reference_type,
                    edge.attribute_name,
                    edge.confidence,
                    edge.source_file,
                )
        except StoreError as e:
            raise StoreError(
                f"writing relationships failed: {e}", document_id=item.document_id
            ) from e

        self.edges_written += len(item.edges)
        for edge in item.edges:
            relationship_edges_total.labels(reference_type=edge.reference_type).inc()
        if self.stats is not None:
            self.stats.record_edges(item.edges)
