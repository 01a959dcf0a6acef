# Schema creation for the relational element graph.
# Idempotent: every statement is CREATE ... IF NOT EXISTS, safe to re-run.

from typing import Any, Dict

from xmlgraph.shared.observability import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS documents (
  id TEXT PRIMARY KEY,
  filename TEXT UNIQUE,
  file_hash TEXT,
  file_size INTEGER,
  parsed_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS nodes (
  id TEXT PRIMARY KEY,
  node_type TEXT NOT NULL,
  document_id TEXT REFERENCES documents(id),
  parent_id TEXT REFERENCES nodes(id),
  position INTEGER NOT NULL DEFAULT 0,
  content TEXT,
  xpath TEXT,
  created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
  UNIQUE(parent_id, position)
);

CREATE TABLE IF NOT EXISTS node_properties (
  node_id TEXT REFERENCES nodes(id) ON DELETE CASCADE,
  property_name TEXT,
  property_value TEXT,
  data_type TEXT DEFAULT 'string',
  PRIMARY KEY (node_id, property_name)
);

-- No natural key: repeated detection runs append.
CREATE TABLE IF NOT EXISTS cross_references (
  id INTEGER PRIMARY KEY,
  source_node_id TEXT REFERENCES nodes(id),
  target_node_id TEXT,
  reference_type TEXT,
  attribute_name TEXT,
  confidence REAL DEFAULT 1.0,
  source_file TEXT
);

CREATE INDEX IF NOT EXISTS idx_nodes_parent_position ON nodes(parent_id, position);
CREATE INDEX IF NOT EXISTS idx_nodes_type ON nodes(node_type);
CREATE INDEX IF NOT EXISTS idx_nodes_document ON nodes(document_id);
CREATE INDEX IF NOT EXISTS idx_properties_name ON node_properties(property_name);
CREATE INDEX IF NOT EXISTS idx_xrefs_source ON cross_references(source_node_id);
CREATE INDEX IF NOT EXISTS idx_xrefs_target ON cross_references(target_node_id);
CREATE INDEX IF NOT EXISTS idx_xrefs_type ON cross_references(reference_type);
CREATE INDEX IF NOT EXISTS idx_xrefs_confidence ON cross_references(confidence);
CREATE INDEX IF NOT EXISTS idx_xrefs_attribute ON cross_references(attribute_name);
CREATE INDEX IF NOT EXISTS idx_xrefs_source_type ON cross_references(source_node_id, reference_type);
CREATE INDEX IF NOT EXISTS idx_xrefs_target_type ON cross_references(target_node_id, reference_type);
"""

TABLES = ("documents", "nodes", "node_properties", "cross_references")


def parse_sql_statements(script: str) -> list[str]:
    """
    Split a SQL script into individual statements.

    Handles multi-line statements (accumulated until a trailing semicolon),
    ``--`` comment lines and blank lines.

    Args:
        script: SQL script text

    Returns:
        List of executable SQL statements
    """
    statements = []
    current_stmt = []

    for line in script.split("\n"):
        stripped = line.strip()

        if not stripped or stripped.startswith("--"):
            continue

        current_stmt.append(line)

        if stripped.endswith(";"):
            stmt = "\n".join(current_stmt).strip()
            if stmt:
                statements.append(stmt)
            current_stmt = []

    return statements


def create_schema(store) -> Dict[str, Any]:
    """
    Create tables and indexes in one transaction.

    Args:
        store: An open GraphStore

    Returns:
        Dict with statement counts
    """
    statements = parse_sql_statements(SCHEMA_SQL)
    results = {
        "total_statements": len(statements),
        "tables": sum(1 for s in statements if s.startswith("CREATE TABLE")),
        "indexes": sum(1 for s in statements if s.startswith("CREATE INDEX")),
    }

    store.execute_batch(statements)

    logger.info(
        "schema_applied",
        total=results["total_statements"],
        tables=results["tables"],
        indexes=results["indexes"],
    )
    return results


def verify_schema(store) -> Dict[str, bool]:
    """Report which of the expected tables exist."""
    rows = store.query("SELECT name FROM sqlite_master WHERE type = 'table'")
    present = {row[0] for row in rows}
    return {table: table in present for table in TABLES}
