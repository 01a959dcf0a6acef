"""
Build run statistics accumulator.

Collects counts across both phases of a single build run and emits one
consolidated summary log when the run completes.

Usage:
    from xmlgraph.run_stats import BuildRunStats

    run_stats = BuildRunStats.start_new()

    # In the pipelines:
    run_stats.record_extracted(path)
    run_stats.record_failure(path, str(error))
    run_stats.record_document_written(result)
    run_stats.record_edges(edges)

    # When the run is over:
    run_stats.emit_summary()
"""

import time
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import structlog

from xmlgraph.shared.models import ExtractionResult, RelationshipEdge

logger = structlog.get_logger(__name__)


@dataclass
class FailedFile:
    """Details of a file the ingestion phase skipped."""

    path: str
    error: str
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


@dataclass
class BuildRunStats:
    """Accumulates statistics for one build run (ingestion plus detection)."""

    run_id: str
    start_time: float
    end_time: Optional[float] = None

    # File counts
    files_processed: int = 0
    files_succeeded: int = 0
    files_failed: int = 0

    # Store writes
    documents_written: int = 0
    nodes_written: int = 0
    properties_written: int = 0

    # Detection
    documents_scanned: int = 0
    edges: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    failed_files: List[FailedFile] = field(default_factory=list)

    @classmethod
    def start_new(cls) -> "BuildRunStats":
        """Create a new run stats tracker with generated run_id."""
        return cls(
            run_id=f"run_{datetime.now().strftime('%Y%m%d_%H%M%S')}",
            start_time=time.monotonic(),
        )

    def record_extracted(self, path: str) -> None:
        self.files_processed += 1
        self.files_succeeded += 1

    def record_failure(self, path: str, error: str) -> None:
        self.files_processed += 1
        self.files_failed += 1
        self.failed_files.append(FailedFile(path=path, error=error))

    def record_document_written(self, result: ExtractionResult) -> None:
        self.documents_written += 1
        self.nodes_written += len(result.nodes)
        self.properties_written += len(result.properties)

    def record_edges(self, edges: Iterable[RelationshipEdge]) -> None:
        self.documents_scanned += 1
        for edge in edges:
            self.edges[edge.reference_type] += 1

    @property
    def total_edges(self) -> int:
        return sum(self.edges.values())

    @property
    def has_data(self) -> bool:
        """Check if any files have been recorded."""
        return self.files_processed > 0

    def finalize(self) -> Dict[str, Any]:
        """
        Finalize the run and generate summary dict.

        Returns:
            Complete summary dictionary for logging
        """
        self.end_time = time.monotonic()
        duration = round(self.end_time - self.start_time, 2)

        return {
            "run_id": self.run_id,
            "duration_seconds": duration,
            "files": {
                "processed": self.files_processed,
                "succeeded": self.files_succeeded,
                "failed": self.files_failed,
            },
            "store": {
                "documents_written": self.documents_written,
                "nodes_written": self.nodes_written,
                "properties_written": self.properties_written,
            },
            "relationships": {
                "documents_scanned": self.documents_scanned,
                "total": self.total_edges,
                "by_type": dict(self.edges),
            },
            "failures": [
                {"path": f.path, "error": f.error, "timestamp": f.timestamp}
                for f in self.failed_files
            ],
        }

    def emit_summary(self) -> Dict[str, Any]:
        """
        Emit the run summary as a structured log event.

        Returns:
            The summary dict that was logged
        """
        summary = self.finalize()

        logger.info(
            "build_run_summary",
            run_id=summary["run_id"],
            duration_seconds=summary["duration_seconds"],
            files_processed=summary["files"]["processed"],
            files_succeeded=summary["files"]["succeeded"],
            files_failed=summary["files"]["failed"],
            documents_written=summary["store"]["documents_written"],
            nodes_written=summary["store"]["nodes_written"],
            properties_written=summary["store"]["properties_written"],
            edges=summary["relationships"]["by_type"],
        )

        if self.files_failed > 0:
            logger.warning(
                "build_run_had_failures",
                run_id=self.run_id,
                failed_count=self.files_failed,
                failures=summary["failures"],
            )

        return summary
