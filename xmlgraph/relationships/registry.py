"""
Ordered registry of relationship adapters.

Adapters run in registration order for every document and their results are
concatenated. Order only affects the order edges are emitted in.
"""

from typing import Iterable, List, Optional, Tuple

from xmlgraph.shared.errors import AdapterError
from xmlgraph.shared.models import RelationshipEdge
from xmlgraph.shared.observability import get_logger
from xmlgraph.store import ReadOnlySnapshot

from .adapter import RelationshipAdapter
from .adapters import create_adapter

logger = get_logger(__name__)


class RelationshipDetector:
    def __init__(self, adapters: Optional[Iterable[RelationshipAdapter]] = None):
        self._adapters: List[RelationshipAdapter] = []
        for adapter in adapters or ():
            self.add_adapter(adapter)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "RelationshipDetector":
        """Build a detector from registry names, e.g. ["structural"]."""
        return cls(create_adapter(name) for name in names)

    def add_adapter(self, adapter: RelationshipAdapter) -> None:
        if not isinstance(adapter, RelationshipAdapter):
            raise TypeError(
                f"expected a RelationshipAdapter, got {type(adapter).__name__}"
            )
        self._adapters.append(adapter)
        logger.debug("adapter_registered", adapter=adapter.name)

    @property
    def adapters(self) -> Tuple[RelationshipAdapter, ...]:
        return tuple(self._adapters)

    def __len__(self) -> int:
        return len(self._adapters)

    def detect(
        self, document_id: str, snapshot: ReadOnlySnapshot
    ) -> List[RelationshipEdge]:
        """
        Run every adapter against one document.

        Raises:
            AdapterError: If any adapter raises; names the adapter and document
        """
        edges: List[RelationshipEdge] = []
        for adapter in self._adapters:
            try:
                found = adapter.detect(document_id, snapshot)
            except Exception as e:
                raise AdapterError(adapter.name, document_id, e) from e
            edges.extend(found)
            logger.debug(
                "adapter_completed",
                adapter=adapter.name,
                document_id=document_id,
                edges=len(found),
            )
        return edges
