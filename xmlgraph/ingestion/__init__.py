"""Ingestion phase: XML files to documents, nodes and typed properties."""

from .extract import DocumentExtractor, document_id_for, extract_document
from .pipeline import IngestionPipeline
from .type_inference import infer_type
from .writer import DocumentWriter

__all__ = [
    "DocumentExtractor",
    "DocumentWriter",
    "IngestionPipeline",
    "document_id_for",
    "extract_document",
    "infer_type",
]
