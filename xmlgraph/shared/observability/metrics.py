# Prometheus metrics for the xmlgraph build pipeline.
# Informational only: nothing in the pipeline reads these back.

from prometheus_client import Counter, Histogram, generate_latest

from .logging import get_logger

logger = get_logger(__name__)

# ===== Ingestion metrics =====
ingestion_documents_total = Counter(
    "xmlgraph_ingestion_documents_total",
    "Total documents handled by the ingestion pipeline",
    ["status"],
)

ingestion_nodes_total = Counter(
    "xmlgraph_ingestion_nodes_total",
    "Total nodes written by the document writer",
)

ingestion_duration_seconds = Histogram(
    "xmlgraph_ingestion_duration_seconds",
    "Ingestion phase duration in seconds",
    buckets=(0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 600.0),
)

# ===== Relationship detection metrics =====
relationship_edges_total = Counter(
    "xmlgraph_relationship_edges_total",
    "Total relationship edges written",
    ["reference_type"],
)

relationship_detection_duration_seconds = Histogram(
    "xmlgraph_relationship_detection_duration_seconds",
    "Relationship detection phase duration in seconds",
    buckets=(0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 600.0),
)


def get_metrics() -> bytes:
    """
    Get current metrics in Prometheus exposition format.

    Returns:
        Metrics as bytes
    """
    return generate_latest()
