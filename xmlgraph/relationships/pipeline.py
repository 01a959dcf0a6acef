"""
Relationship phase: one detection task per document -> bounded channel ->
one RelationshipWriter.

Runs only after ingestion has committed. Each detection task opens its own
read-only snapshot, runs every adapter, and releases the snapshot before
handing its edges to the writer, so no task holds a reader while suspended
on a full channel.
"""

import dataclasses
import time
from typing import List, Optional

from xmlgraph.run_stats import BuildRunStats
from xmlgraph.shared.channel import Channel
from xmlgraph.shared.config import RelationshipsConfig
from xmlgraph.shared.models import DocumentEdges, RelationshipEdge
from xmlgraph.shared.observability import get_logger
from xmlgraph.shared.observability.metrics import (
    relationship_detection_duration_seconds,
)
from xmlgraph.shared.tasks import create_monitored_task, run_phase
from xmlgraph.store import GraphStore

from .registry import RelationshipDetector
from .writer import RelationshipWriter

logger = get_logger(__name__)


class RelationshipPipeline:
    def __init__(
        self,
        store: GraphStore,
        detector: RelationshipDetector,
        config: RelationshipsConfig,
        *,
        stats: Optional[BuildRunStats] = None,
    ):
        self.store = store
        self.detector = detector
        self.config = config
        self.stats = stats

    async def run(self) -> int:
        """
        Detect and store edges for every document in the store.

        Returns:
            Total number of edges written
        """
        document_ids = self.store.document_ids()
        start = time.perf_counter()
        logger.info(
            "relationship_detection_started",
            documents=len(document_ids),
            adapters=[adapter.name for adapter in self.detector.adapters],
            queue_size=self.config.queue_size,
        )

        channel: Channel[DocumentEdges] = Channel(
            self.config.queue_size, name="relationships"
        )
        writer = RelationshipWriter(
            self.store, self.config.batch_size, stats=self.stats
        )
        consumer = create_monitored_task(
            writer.consume(channel), name="relationship-writer"
        )
        producers = [
            create_monitored_task(
                self._detect(document_id, channel), name=f"detect-{document_id}"
            )
            for document_id in document_ids
        ]

        await run_phase(producers, consumer, channel)

        duration = time.perf_counter() - start
        relationship_detection_duration_seconds.observe(duration)
        logger.info(
            "relationship_phase_completed",
            documents=len(document_ids),
            edges_written=writer.edges_written,
            duration_seconds=round(duration, 3),
        )
        return writer.edges_written

    async def _detect(
        self, document_id: str, channel: Channel[DocumentEdges]
    ) -> None:
        with self.store.snapshot() as snapshot:
            document = snapshot.document(document_id)
            edges = self.detector.detect(document_id, snapshot)

        source_file = document.filename if document is not None else None
        edges = self._stamp_source_file(edges, source_file)
        logger.debug(
            "relationships_detected", document_id=document_id, edges=len(edges)
        )
        await channel.send(DocumentEdges(document_id=document_id, edges=edges))

    @staticmethod
    def _stamp_source_file(
        edges: List[RelationshipEdge], source_file: Optional[str]
    ) -> List[RelationshipEdge]:
        if source_file is None:
            return edges
        return [
            edge
            if edge.source_file is not None
            else dataclasses.replace(edge, source_file=source_file)
            for edge in edges
        ]
