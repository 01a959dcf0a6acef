"""
Attribute references: an attribute whose whole value is another node's id.

Only single, unambiguous references are matched. A value containing a comma
or whitespace never matches any of the id patterns below.
"""

import re
from typing import List, Set

from xmlgraph.shared.models import Property, RelationshipEdge
from xmlgraph.store import ReadOnlySnapshot

from ..adapter import RelationshipAdapter

ATTRIBUTE_REFERENCE = "attribute_reference"

ID_PATTERNS = (
    re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*"),  # simple identifier
    re.compile(r"[a-zA-Z]+_\d+"),  # prefix_number
    re.compile(r"[a-zA-Z0-9]+(-[a-zA-Z0-9]+)*"),  # hyphenated
)

REFERENCE_INDICATORS = (
    "id",
    "ref",
    "reference",
    "parent",
    "child",
    "target",
    "source",
    "link",
)

_LETTERS_ALNUM_RE = re.compile(r"[a-zA-Z]+_[a-zA-Z0-9]+")

BASE_CONFIDENCE = 0.8
NAME_BOOST = 0.15
SHAPE_BOOST = 0.05


def is_single_id_reference(value: str) -> bool:
    if not value:
        return False
    return any(pattern.fullmatch(value) for pattern in ID_PATTERNS)


def reference_confidence(property_name: str, property_value: str) -> float:
    confidence = BASE_CONFIDENCE
    lowered = property_name.lower()
    if any(indicator in lowered for indicator in REFERENCE_INDICATORS):
        confidence += NAME_BOOST
    if _LETTERS_ALNUM_RE.fullmatch(property_value):
        confidence += SHAPE_BOOST
    return min(confidence, 1.0)


class AttributeReferenceAdapter(RelationshipAdapter):
    name = "attribute_reference"

    def detect(
        self, document_id: str, snapshot: ReadOnlySnapshot
    ) -> List[RelationshipEdge]:
        node_ids = snapshot.node_ids(document_id)
        relationships = []
        for prop in snapshot.properties(document_id):
            edge = self.check_property(prop, node_ids)
            if edge is not None:
                relationships.append(edge)
        return relationships

    def check_property(self, prop: Property, node_ids: Set[str]):
        value = prop.property_value
        if not is_single_id_reference(value):
            return None
        if value not in node_ids or value == prop.node_id:
            return None

        return self.create_relationship(
            prop.node_id,
            value,
            ATTRIBUTE_REFERENCE,
            confidence=reference_confidence(prop.property_name, value),
            attribute_name=prop.property_name,
        )
