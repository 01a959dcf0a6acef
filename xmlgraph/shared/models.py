"""
Record types shared by both build phases.

Documents, nodes and properties are produced by the extractor and upserted by
the document writer; relationship edges are produced by adapters and appended
by the relationship writer. All records are immutable once built.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class XmlGraphBaseModel(BaseModel):
    model_config = ConfigDict(
        protected_namespaces=(),
        arbitrary_types_allowed=True,
    )


class DataType(str, Enum):
    """Semantic type tag attached to every property value."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATETIME = "datetime"


@dataclass(frozen=True)
class Document:
    id: str
    filename: str
    file_size: int
    file_hash: Optional[str] = None


@dataclass(frozen=True)
class Node:
    id: str
    node_type: str
    document_id: str
    parent_id: Optional[str]
    position: int
    content: Optional[str]
    xpath: str


@dataclass(frozen=True)
class Property:
    node_id: str
    property_name: str
    property_value: str
    data_type: DataType = DataType.STRING


@dataclass(frozen=True)
class RelationshipEdge:
    """A directed, typed, confidence-scored relation between two node ids."""

    source_node_id: str
    target_node_id: str
    reference_type: str
    attribute_name: Optional[str] = None
    confidence: float = 1.0
    source_file: Optional[str] = None


@dataclass
class ExtractionResult:
    """Everything extracted from one file, in document order."""

    document: Document
    nodes: List[Node] = field(default_factory=list)
    properties: List[Property] = field(default_factory=list)
    source_file: str = ""


@dataclass
class DocumentEdges:
    """Edges detected for one document, as queued for the relationship writer."""

    document_id: str
    edges: List[RelationshipEdge] = field(default_factory=list)
