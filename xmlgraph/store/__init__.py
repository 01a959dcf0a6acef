"""SQLite-backed storage for documents, nodes, properties and relationship edges."""

from .schema import create_schema, verify_schema
from .sqlite import GraphStore, PreparedStatement, ReadOnlySnapshot

__all__ = [
    "GraphStore",
    "PreparedStatement",
    "ReadOnlySnapshot",
    "create_schema",
    "verify_schema",
]
