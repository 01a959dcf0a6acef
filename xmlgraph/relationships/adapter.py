"""
Adapter contract for relationship detection.

An adapter looks at one document through a read-only snapshot of the
committed model and returns the edges it finds. Adapters never write: the
snapshot connection is opened read-only, so an attempted write fails.

Third-party adapters subclass RelationshipAdapter and are registered on a
RelationshipDetector instance with ``add_adapter``.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from xmlgraph.shared.models import RelationshipEdge
from xmlgraph.store import ReadOnlySnapshot


class RelationshipAdapter(ABC):
    """Base class for relationship detection adapters."""

    #: Registry name; also used in log events and error messages.
    name: str = "adapter"

    @abstractmethod
    def detect(
        self, document_id: str, snapshot: ReadOnlySnapshot
    ) -> List[RelationshipEdge]:
        """Return every edge this adapter finds in one document."""

    def create_relationship(
        self,
        source_id: str,
        target_id: str,
        reference_type: str,
        confidence: float = 1.0,
        attribute_name: Optional[str] = None,
    ) -> RelationshipEdge:
        return RelationshipEdge(
            source_node_id=source_id,
            target_node_id=target_id,
            reference_type=reference_type,
            attribute_name=attribute_name,
            confidence=confidence,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
