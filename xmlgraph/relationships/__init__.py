"""Relationship detection: adapters, their registry, and the detection phase."""

from .adapter import RelationshipAdapter
from .adapters import ADAPTER_REGISTRY, create_adapter
from .pipeline import RelationshipPipeline
from .registry import RelationshipDetector
from .writer import RelationshipWriter

__all__ = [
    "ADAPTER_REGISTRY",
    "RelationshipAdapter",
    "RelationshipDetector",
    "RelationshipPipeline",
    "RelationshipWriter",
    "create_adapter",
]
