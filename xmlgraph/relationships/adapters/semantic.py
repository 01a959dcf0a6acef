"""
Semantic relationships between nodes of one document.

same_type
    Every ordered pair of distinct nodes that share a node_type, empty
    elements included. Fixed confidence.
content_similar
    Every ordered pair of nodes with content whose word sets have a Jaccard
    similarity at or above the threshold. Confidence scales with similarity.

Both rules are quadratic in the number of nodes. The adapter is
not part of the default adapter list.
"""

import re
from collections import defaultdict
from typing import Dict, FrozenSet, List

from xmlgraph.shared.models import Node, RelationshipEdge
from xmlgraph.store import ReadOnlySnapshot

from ..adapter import RelationshipAdapter

SAME_TYPE = "same_type"
CONTENT_SIMILAR = "content_similar"

SAME_TYPE_CONFIDENCE = 0.6
SIMILARITY_THRESHOLD = 0.7
SIMILARITY_WEIGHT = 0.5

_WORD_RE = re.compile(r"\w+")


def word_set(text: str) -> FrozenSet[str]:
    return frozenset(_WORD_RE.findall(text.lower()))


def jaccard(a: FrozenSet[str], b: FrozenSet[str]) -> float:
    if not a and not b:
        return 0.0
    return len(a & b) / len(a | b)


class SemanticRelationshipAdapter(RelationshipAdapter):
    name = "semantic"

    def __init__(self, similarity_threshold: float = SIMILARITY_THRESHOLD):
        self.similarity_threshold = similarity_threshold

    def detect(
        self, document_id: str, snapshot: ReadOnlySnapshot
    ) -> List[RelationshipEdge]:
        nodes = snapshot.nodes(document_id)
        return self.same_type_relationships(nodes) + self.content_relationships(
            [n for n in nodes if n.content]
        )

    def same_type_relationships(self, nodes: List[Node]) -> List[RelationshipEdge]:
        by_type: Dict[str, List[Node]] = defaultdict(list)
        for node in nodes:
            by_type[node.node_type].append(node)

        relationships = []
        for group in by_type.values():
            for first in group:
                for second in group:
                    if first.id == second.id:
                        continue
                    relationships.append(
                        self.create_relationship(
                            first.id,
                            second.id,
                            SAME_TYPE,
                            confidence=SAME_TYPE_CONFIDENCE,
                        )
                    )
        return relationships

    def content_relationships(self, nodes: List[Node]) -> List[RelationshipEdge]:
        words = {node.id: word_set(node.content) for node in nodes}
        relationships = []
        for first in nodes:
            for second in nodes:
                if first.id == second.id:
                    continue
                similarity = jaccard(words[first.id], words[second.id])
                if similarity < self.similarity_threshold:
                    continue
                relationships.append(
                    self.create_relationship(
                        first.id,
                        second.id,
                        CONTENT_SIMILAR,
                        confidence=similarity * SIMILARITY_WEIGHT,
                    )
                )
        return relationships
