"""
Ingestion phase: N extractor workers -> bounded channel -> one DocumentWriter.

Workers share one iterator over the input paths. Because everything runs on
a single event loop, pulling the next path never races. A file that fails to
extract is logged, counted and skipped; it never stops its worker, its sibling
workers or the writer. A store failure in the writer ends the phase.

Usage:
    pipeline = IngestionPipeline(store, config.ingestion, stats=run_stats)
    written = await pipeline.run(paths)
"""

import asyncio
import time
from typing import Callable, Iterable, Iterator, Optional

from xmlgraph.run_stats import BuildRunStats
from xmlgraph.shared.channel import Channel
from xmlgraph.shared.config import IngestionConfig
from xmlgraph.shared.errors import ExtractionError
from xmlgraph.shared.models import ExtractionResult
from xmlgraph.shared.observability import get_logger
from xmlgraph.shared.observability.metrics import (
    ingestion_documents_total,
    ingestion_duration_seconds,
)
from xmlgraph.shared.tasks import create_monitored_task, run_phase
from xmlgraph.store import GraphStore

from .extract import DocumentExtractor
from .writer import DocumentWriter

logger = get_logger(__name__)


class IngestionPipeline:
    def __init__(
        self,
        store: GraphStore,
        config: IngestionConfig,
        *,
        stats: Optional[BuildRunStats] = None,
        extractor_factory: Callable[[], DocumentExtractor] = DocumentExtractor,
    ):
        self.store = store
        self.config = config
        self.stats = stats
        self.extractor_factory = extractor_factory

    async def run(self, paths: Iterable[str]) -> int:
        """
        Extract and write every path; returns once the writer has committed.

        Returns:
            Number of documents written
        """
        paths = list(paths)
        start = time.perf_counter()
        logger.info(
            "ingestion_started",
            files=len(paths),
            concurrency=self.config.concurrency,
            batch_size=self.config.batch_size,
            queue_size=self.config.queue_size,
        )

        channel: Channel[ExtractionResult] = Channel(
            self.config.queue_size, name="documents"
        )
        writer = DocumentWriter(self.store, self.config.batch_size, stats=self.stats)
        consumer = create_monitored_task(
            writer.consume(channel), name="document-writer"
        )

        shared_paths = iter(paths)
        producers = [
            create_monitored_task(
                self._worker(worker_id, shared_paths, channel),
                name=f"extractor-{worker_id}",
            )
            for worker_id in range(self.config.concurrency)
        ]

        await run_phase(producers, consumer, channel)

        duration = time.perf_counter() - start
        ingestion_duration_seconds.observe(duration)
        logger.info(
            "ingestion_completed",
            files=len(paths),
            documents_written=writer.documents_written,
            duration_seconds=round(duration, 3),
        )
        return writer.documents_written

    async def _worker(
        self,
        worker_id: int,
        paths: Iterator[str],
        channel: Channel[ExtractionResult],
    ) -> None:
        extractor = self.extractor_factory()
        for path in paths:
            logger.debug("extracting_document", worker_id=worker_id, path=path)
            try:
                result = extractor.extract(path)
            except ExtractionError as e:
                logger.warning(
                    "extraction_failed", worker_id=worker_id, path=path, error=str(e)
                )
                ingestion_documents_total.labels(status="failed").inc()
                if self.stats is not None:
                    self.stats.record_failure(path, str(e))
                continue

            if self.stats is not None:
                self.stats.record_extracted(path)
            logger.debug(
                "document_extracted",
                worker_id=worker_id,
                document_id=result.document.id,
                nodes=len(result.nodes),
            )
            await channel.send(result)
            # Let sibling workers and the writer run between files.
            await asyncio.sleep(0)
