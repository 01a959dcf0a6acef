"""
Error taxonomy for the build pipeline.

Only ExtractionError is recoverable: the ingestion workers catch it per file,
log it and move on. StoreError and AdapterError propagate and end the run.
"""

from typing import Optional


class XmlGraphError(Exception):
    """Base class for all xmlgraph errors."""


class ExtractionError(XmlGraphError):
    """Raised when a file cannot be read or parsed into an element tree."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to extract {path}: {reason}")


class StoreError(XmlGraphError):
    """Raised when the store rejects a statement or transaction."""

    def __init__(self, message: str, document_id: Optional[str] = None):
        self.document_id = document_id
        if document_id:
            message = f"{message} (document {document_id})"
        super().__init__(message)


class AdapterError(XmlGraphError):
    """Raised when a relationship adapter fails on a document."""

    def __init__(self, adapter_name: str, document_id: str, cause: BaseException):
        self.adapter_name = adapter_name
        self.document_id = document_id
        self.cause = cause
        super().__init__(
            f"Adapter {adapter_name} failed on document {document_id}: {cause}"
        )


class ChannelClosed(XmlGraphError):
    """Raised when sending on a channel that has already been closed."""
