"""Built-in relationship adapters, addressable by name from configuration."""

from typing import Dict, Type

from ..adapter import RelationshipAdapter
from .attribute_reference import AttributeReferenceAdapter
from .multi_reference import MultiReferenceAdapter
from .semantic import SemanticRelationshipAdapter
from .structural import StructuralRelationshipAdapter

ADAPTER_REGISTRY: Dict[str, Type[RelationshipAdapter]] = {
    StructuralRelationshipAdapter.name: StructuralRelationshipAdapter,
    AttributeReferenceAdapter.name: AttributeReferenceAdapter,
    MultiReferenceAdapter.name: MultiReferenceAdapter,
    SemanticRelationshipAdapter.name: SemanticRelationshipAdapter,
}


def create_adapter(name: str) -> RelationshipAdapter:
    try:
        adapter_cls = ADAPTER_REGISTRY[name]
    except KeyError:
        known = ", ".join(sorted(ADAPTER_REGISTRY))
        raise ValueError(f"Unknown relationship adapter {name!r} (known: {known})")
    return adapter_cls()


__all__ = [
    "ADAPTER_REGISTRY",
    "AttributeReferenceAdapter",
    "MultiReferenceAdapter",
    "SemanticRelationshipAdapter",
    "StructuralRelationshipAdapter",
    "create_adapter",
]
