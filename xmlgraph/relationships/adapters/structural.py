"""
Structural relationships: parent/child and sibling adjacency.

For every node with a parent in the model:
    parent_child  (parent -> child)
    child_parent  (child -> parent)

For every unordered pair of nodes sharing a parent:
    sibling in both directions, and when their positions differ by exactly
    one, next_sibling (lower position -> higher) and previous_sibling
    (higher -> lower).

Sibling pairs are O(n^2) per parent, which dominates for very wide elements.
"""

from collections import defaultdict
from typing import Dict, List

from xmlgraph.shared.models import Node, RelationshipEdge
from xmlgraph.store import ReadOnlySnapshot

from ..adapter import RelationshipAdapter

PARENT_CHILD = "parent_child"
CHILD_PARENT = "child_parent"
SIBLING = "sibling"
NEXT_SIBLING = "next_sibling"
PREVIOUS_SIBLING = "previous_sibling"


class StructuralRelationshipAdapter(RelationshipAdapter):
    name = "structural"

    def detect(
        self, document_id: str, snapshot: ReadOnlySnapshot
    ) -> List[RelationshipEdge]:
        nodes = snapshot.nodes(document_id)
        return self.parent_child_relationships(nodes) + self.sibling_relationships(
            nodes
        )

    def parent_child_relationships(self, nodes: List[Node]) -> List[RelationshipEdge]:
        relationships = []
        for node in nodes:
            if node.parent_id is None:
                continue
            relationships.append(
                self.create_relationship(node.parent_id, node.id, PARENT_CHILD)
            )
            relationships.append(
                self.create_relationship(node.id, node.parent_id, CHILD_PARENT)
            )
        return relationships

    def sibling_relationships(self, nodes: List[Node]) -> List[RelationshipEdge]:
        siblings_by_parent: Dict[str, List[Node]] = defaultdict(list)
        for node in nodes:
            if node.parent_id is not None:
                siblings_by_parent[node.parent_id].append(node)

        relationships = []
        for siblings in siblings_by_parent.values():
            if len(siblings) < 2:
                continue
            for i, first in enumerate(siblings):
                for second in siblings[i + 1 :]:
                    relationships.append(
                        self.create_relationship(first.id, second.id, SIBLING)
                    )
                    relationships.append(
                        self.create_relationship(second.id, first.id, SIBLING)
                    )

                    if abs(first.position - second.position) == 1:
                        lower, higher = (
                            (first, second)
                            if first.position < second.position
                            else (second, first)
                        )
                        relationships.append(
                            self.create_relationship(lower.id, higher.id, NEXT_SIBLING)
                        )
                        relationships.append(
                            self.create_relationship(
                                higher.id, lower.id, PREVIOUS_SIBLING
                            )
                        )
        return relationships
