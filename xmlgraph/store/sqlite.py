"""
SQLite storage adapter.

One ``GraphStore`` owns the single write connection of a build run and is
handed only to the writer task of each phase. Readers never share it: each
detection task opens its own ``ReadOnlySnapshot`` through ``store.snapshot()``
and releases it when done.

Transactions are explicit. The write connection runs with
``isolation_level=None`` so that ``begin()``/``commit()`` map one-to-one onto
BEGIN/COMMIT and batch boundaries are exactly where the writers put them.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Set, Union

from xmlgraph.shared.errors import StoreError
from xmlgraph.shared.models import DataType, Document, Node, Property
from xmlgraph.shared.observability import get_logger

from .schema import create_schema, parse_sql_statements

logger = get_logger(__name__)

Params = Union[Sequence[Any], Dict[str, Any]]


@contextmanager
def _wrap_errors(action: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as e:
        raise StoreError(f"{action} failed: {e}") from e


class PreparedStatement:
    """A statement compiled once and executed repeatedly with new parameters."""

    def __init__(self, connection: sqlite3.Connection, sql: str):
        self._cursor = connection.cursor()
        self.sql = sql
        self.executions = 0

    def execute(self, *params: Any) -> None:
        with _wrap_errors("prepared statement"):
            self._cursor.execute(self.sql, params)
        self.executions += 1

    def execute_many(self, rows: Iterable[Sequence[Any]]) -> int:
        count = 0
        for row in rows:
            self.execute(*row)
            count += 1
        return count

    def close(self) -> None:
        self._cursor.close()


class GraphStore:
    """Owned write handle on the graph database."""

    def __init__(self, path: str, connection: sqlite3.Connection):
        self.path = path
        self._conn = connection

    @classmethod
    def open(cls, path: str, *, force: bool = False) -> "GraphStore":
        """
        Open (creating if needed) the database at ``path`` and apply the schema.

        Args:
            path: Database file path
            force: Delete any existing database first
        """
        db_path = Path(path)
        if force:
            for suffix in ("", "-wal", "-shm"):
                candidate = Path(f"{db_path}{suffix}")
                if candidate.exists():
                    candidate.unlink()
            logger.info("store_reset", path=str(db_path))
        db_path.parent.mkdir(parents=True, exist_ok=True)

        with _wrap_errors(f"open {db_path}"):
            conn = sqlite3.connect(str(db_path), isolation_level=None)
            conn.execute("PRAGMA foreign_keys = OFF")
            conn.execute("PRAGMA journal_mode = WAL")

        store = cls(str(db_path), conn)
        create_schema(store)
        return store

    @property
    def in_transaction(self) -> bool:
        return self._conn.in_transaction

    def execute(self, sql: str, params: Params = ()) -> None:
        with _wrap_errors("execute"):
            self._conn.execute(sql, params)

    def execute_batch(self, statements: Union[str, Iterable[str]]) -> None:
        """Run several statements inside one transaction."""
        if isinstance(statements, str):
            statements = parse_sql_statements(statements)
        with self.transaction():
            for stmt in statements:
                self.execute(stmt)

    def begin(self) -> None:
        if not self._conn.in_transaction:
            with _wrap_errors("begin"):
                self._conn.execute("BEGIN")

    def commit(self) -> None:
        if self._conn.in_transaction:
            with _wrap_errors("commit"):
                self._conn.execute("COMMIT")

    def rollback(self) -> None:
        if self._conn.in_transaction:
            with _wrap_errors("rollback"):
                self._conn.execute("ROLLBACK")

    @contextmanager
    def transaction(self) -> Iterator["GraphStore"]:
        """Commit on success, roll back on any exception."""
        self.begin()
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        self.commit()

    def prepare(self, sql: str) -> PreparedStatement:
        return PreparedStatement(self._conn, sql)

    def query(self, sql: str, params: Params = ()) -> List[tuple]:
        with _wrap_errors("query"):
            return self._conn.execute(sql, params).fetchall()

    def document_ids(self) -> List[str]:
        return [row[0] for row in self.query("SELECT id FROM documents ORDER BY id")]

    @contextmanager
    def snapshot(self) -> Iterator["ReadOnlySnapshot"]:
        """Acquire an independent read-only handle; released on exit."""
        snap = ReadOnlySnapshot.open(self.path)
        try:
            yield snap
        finally:
            snap.close()

    def stats(self) -> Dict[str, Any]:
        row = self.query(
            """
            SELECT
              COUNT(*),
              COUNT(DISTINCT node_type),
              COUNT(DISTINCT document_id),
              (SELECT COUNT(*) FROM cross_references)
            FROM nodes
            """
        )[0]
        size = os.path.getsize(self.path) if os.path.exists(self.path) else 0
        return {
            "total_nodes": row[0],
            "node_types": row[1],
            "documents": row[2],
            "cross_refs": row[3],
            "database_size_mb": round(size / (1024 * 1024.0), 2),
        }

    def close(self) -> None:
        self.commit()
        self._conn.close()


class ReadOnlySnapshot:
    """
    Read-only view of committed data, owned by a single detection task.

    Writes are rejected by SQLite itself (read-only URI plus query_only).
    """

    def __init__(self, path: str, connection: sqlite3.Connection):
        self.path = path
        self._conn = connection

    @classmethod
    def open(cls, path: str) -> "ReadOnlySnapshot":
        uri = f"{Path(path).resolve().as_uri()}?mode=ro"
        with _wrap_errors(f"open read-only {path}"):
            conn = sqlite3.connect(uri, uri=True)
            conn.execute("PRAGMA query_only = ON")
        return cls(path, conn)

    def query(self, sql: str, params: Params = ()) -> List[tuple]:
        with _wrap_errors("snapshot query"):
            return self._conn.execute(sql, params).fetchall()

    def document(self, document_id: str) -> Optional[Document]:
        rows = self.query(
            "SELECT id, filename, file_size FROM documents WHERE id = ?",
            (document_id,),
        )
        if not rows:
            return None
        return Document(*rows[0])

    def nodes(self, document_id: str) -> List[Node]:
        """Nodes of one document, ordered by parent then position."""
        rows = self.query(
            """
            SELECT id, node_type, document_id, parent_id, position, content, xpath
            FROM nodes WHERE document_id = ?
            ORDER BY parent_id, position
            """,
            (document_id,),
        )
        return [Node(*row) for row in rows]

    def node_ids(self, document_id: str) -> Set[str]:
        rows = self.query("SELECT id FROM nodes WHERE document_id = ?", (document_id,))
        return {row[0] for row in rows}

    def properties(self, document_id: str) -> List[Property]:
        rows = self.query(
            """
            SELECT np.node_id, np.property_name, np.property_value, np.data_type
            FROM node_properties np
            JOIN nodes n ON np.node_id = n.id
            WHERE n.document_id = ?
            """,
            (document_id,),
        )
        return [
            Property(node_id, name, value, DataType(data_type))
            for node_id, name, value, data_type in rows
        ]

    def close(self) -> None:
        self._conn.close()
