"""
Build run orchestration: ingestion, then relationship detection, then stats.

The relationship phase starts only after the ingestion writer has committed
its final batch, so every detection snapshot sees the complete node set.

Usage:
    from xmlgraph.build import GraphBuilder, build_graph

    stats = build_graph("data/xml")

    builder = GraphBuilder(config, settings)
    builder.add_adapter(MyAdapter())
    stats = await builder.run(input_dir="data/xml")
"""

import asyncio
import glob
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from xmlgraph.ingestion import IngestionPipeline
from xmlgraph.relationships import (
    RelationshipAdapter,
    RelationshipDetector,
    RelationshipPipeline,
)
from xmlgraph.run_stats import BuildRunStats
from xmlgraph.shared.config import Config, Settings, get_config, get_settings
from xmlgraph.shared.observability import (
    bind_run_context,
    clear_run_context,
    get_logger,
    setup_logging,
)
from xmlgraph.store import GraphStore

logger = get_logger(__name__)


def discover_files(input_dir: str, pattern: str = "**/*.xml") -> List[str]:
    """
    Resolve input files under ``input_dir`` matching ``pattern``.

    Returns:
        Sorted, de-duplicated list of file paths
    """
    root = Path(input_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"Input directory not found: {input_dir}")

    # The directory is literal; only the pattern may contain wildcards.
    matches = glob.glob(os.path.join(glob.escape(str(root)), pattern), recursive=True)
    return sorted({match for match in matches if os.path.isfile(match)})


class GraphBuilder:
    """Runs both build phases against one store."""

    def __init__(self, config: Config, settings: Optional[Settings] = None):
        self.config = config
        self.settings = settings
        self._extra_adapters: List[RelationshipAdapter] = []
        self.stats: Optional[BuildRunStats] = None

    def add_adapter(self, adapter: RelationshipAdapter) -> None:
        """Register an adapter to run after the configured ones."""
        if not isinstance(adapter, RelationshipAdapter):
            raise TypeError(
                f"expected a RelationshipAdapter, got {type(adapter).__name__}"
            )
        self._extra_adapters.append(adapter)

    def build_detector(self) -> RelationshipDetector:
        detector = RelationshipDetector.from_names(self.config.relationships.adapters)
        for adapter in self._extra_adapters:
            detector.add_adapter(adapter)
        return detector

    async def run(
        self,
        input_dir: Optional[str] = None,
        paths: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """
        Build the graph for ``paths``, or for every file found in ``input_dir``.

        Returns:
            Store statistics after the run
        """
        if paths is None:
            if input_dir is None:
                raise ValueError("either input_dir or paths is required")
            paths = discover_files(input_dir, self.config.ingestion.file_pattern)
        paths = [str(p) for p in paths]

        self.stats = BuildRunStats.start_new()
        store_cfg = self.config.store
        bind_run_context(self.stats.run_id, store=store_cfg.path)

        logger.info("build_started", files=len(paths), force=store_cfg.force)

        try:
            store = GraphStore.open(store_cfg.path, force=store_cfg.force)
            try:
                ingestion = IngestionPipeline(
                    store, self.config.ingestion, stats=self.stats
                )
                await ingestion.run(paths)

                if self.config.relationships.enabled:
                    detector = self.build_detector()
                    relationships = RelationshipPipeline(
                        store, detector, self.config.relationships, stats=self.stats
                    )
                    await relationships.run()
                else:
                    logger.info("relationship_detection_skipped", reason="disabled")

                store_stats = store.stats()
                logger.info("build_completed", **store_stats)
                return store_stats
            finally:
                store.close()
        finally:
            self.stats.emit_summary()
            clear_run_context()


def build_graph(
    input_dir: str,
    *,
    output_db: Optional[str] = None,
    force: Optional[bool] = None,
    config: Optional[Config] = None,
    adapters: Optional[Iterable[RelationshipAdapter]] = None,
) -> Dict[str, Any]:
    """
    Synchronous entry point for a full build run.

    Args:
        input_dir: Directory scanned with ``ingestion.file_pattern``
        output_db: Overrides ``store.path``
        force: Overrides ``store.force``
        config: Defaults to the process-wide config
        adapters: Extra adapters run after the configured ones

    Returns:
        Store statistics after the run
    """
    # Copy so per-call overrides never leak into the process-wide config.
    config = (config or get_config()).model_copy(deep=True)
    if output_db is not None:
        config.store.path = output_db
    if force is not None:
        config.store.force = force

    settings = get_settings()
    setup_logging(settings.log_level)

    builder = GraphBuilder(config, settings)
    for adapter in adapters or ():
        builder.add_adapter(adapter)
    return asyncio.run(builder.run(input_dir=input_dir))
