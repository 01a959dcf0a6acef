"""
Multi-valued attribute references, e.g. ``refs="a b c"`` or ``targets="a,b"``.

Complements AttributeReferenceAdapter, which ignores any value containing a
separator. Each token that names another node in the same document yields
one ``multi_attribute_reference`` edge.
"""

import re
from typing import List, Set

from xmlgraph.shared.models import Property, RelationshipEdge
from xmlgraph.store import ReadOnlySnapshot

from ..adapter import RelationshipAdapter
from .attribute_reference import is_single_id_reference

MULTI_ATTRIBUTE_REFERENCE = "multi_attribute_reference"

MULTI_REFERENCE_INDICATORS = (
    "ids",
    "refs",
    "references",
    "targets",
    "sources",
    "links",
)

_SEPARATOR_RE = re.compile(r"[,\s]")
_SPLIT_RE = re.compile(r"[,\s]+")
_LETTERS_ALNUM_RE = re.compile(r"[a-zA-Z]+_[a-zA-Z0-9]+")

BASE_CONFIDENCE = 0.6
NAME_BOOST = 0.2
SHAPE_BOOST = 0.1
# Each token of a list is a weaker signal than a single whole-value reference.
MULTI_PENALTY = 0.8


def split_references(value: str) -> List[str]:
    return [token for token in _SPLIT_RE.split(value.strip()) if token]


def multi_reference_confidence(property_name: str, token: str) -> float:
    confidence = BASE_CONFIDENCE
    lowered = property_name.lower()
    if any(indicator in lowered for indicator in MULTI_REFERENCE_INDICATORS):
        confidence += NAME_BOOST
    if _LETTERS_ALNUM_RE.fullmatch(token):
        confidence += SHAPE_BOOST
    return min(confidence, 1.0) * MULTI_PENALTY


class MultiReferenceAdapter(RelationshipAdapter):
    name = "multi_reference"

    def detect(
        self, document_id: str, snapshot: ReadOnlySnapshot
    ) -> List[RelationshipEdge]:
        node_ids = snapshot.node_ids(document_id)
        relationships: List[RelationshipEdge] = []
        for prop in snapshot.properties(document_id):
            relationships.extend(self.check_property(prop, node_ids))
        return relationships

    def check_property(
        self, prop: Property, node_ids: Set[str]
    ) -> List[RelationshipEdge]:
        value = prop.property_value or ""
        if not _SEPARATOR_RE.search(value):
            return []

        relationships = []
        for token in split_references(value):
            if not is_single_id_reference(token):
                continue
            if token not in node_ids or token == prop.node_id:
                continue
            relationships.append(
                self.create_relationship(
                    prop.node_id,
                    token,
                    MULTI_ATTRIBUTE_REFERENCE,
                    confidence=multi_reference_confidence(prop.property_name, token),
                    attribute_name=prop.property_name,
                )
            )
        return relationships
