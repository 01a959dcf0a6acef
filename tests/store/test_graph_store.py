import sqlite3

import pytest

from xmlgraph.shared.errors import StoreError
from xmlgraph.store import GraphStore, verify_schema
from xmlgraph.store.schema import TABLES, parse_sql_statements


def test_open_creates_schema(store):
    assert verify_schema(store) == {table: True for table in TABLES}


def test_schema_is_idempotent(db_path):
    first = GraphStore.open(db_path)
    first.close()
    second = GraphStore.open(db_path)
    assert all(verify_schema(second).values())
    second.close()


def test_force_deletes_existing_database(db_path):
    store = GraphStore.open(db_path)
    store.execute(
        "INSERT INTO documents (id, filename, file_size) VALUES ('a', 'a.xml', 1)"
    )
    store.close()

    store = GraphStore.open(db_path, force=True)
    assert store.document_ids() == []
    store.close()


def test_parse_sql_statements_skips_comments():
    script = """
    -- leading comment
    CREATE TABLE a (x INTEGER);
    CREATE INDEX idx_a ON a(x);
    """
    assert parse_sql_statements(script) == [
        "CREATE TABLE a (x INTEGER);",
        "CREATE INDEX idx_a ON a(x);",
    ]


def test_transaction_rolls_back_on_error(store):
    with pytest.raises(StoreError):
        with store.transaction():
            store.execute(
                "INSERT INTO documents (id, filename, file_size) VALUES ('a', 'a.xml', 1)"
            )
            store.execute("INSERT INTO no_such_table VALUES (1)")

    assert store.document_ids() == []
    assert not store.in_transaction


def test_snapshot_sees_only_committed_rows(store):
    store.begin()
    store.execute(
        "INSERT INTO documents (id, filename, file_size) VALUES ('a', 'a.xml', 1)"
    )
    with store.snapshot() as snapshot:
        assert snapshot.document("a") is None
    store.commit()

    with store.snapshot() as snapshot:
        document = snapshot.document("a")
    assert document.filename == "a.xml"
    assert document.file_size == 1


def test_snapshot_rejects_writes(store):
    with store.snapshot() as snapshot:
        with pytest.raises(StoreError):
            snapshot.query(
                "INSERT INTO documents (id, filename, file_size) VALUES ('x', 'x', 0)"
            )


def test_snapshot_is_released(store):
    with store.snapshot() as snapshot:
        pass
    with pytest.raises(sqlite3.ProgrammingError):
        snapshot._conn.execute("SELECT 1")


def test_stats_on_empty_store(store):
    stats = store.stats()
    assert stats["total_nodes"] == 0
    assert stats["node_types"] == 0
    assert stats["documents"] == 0
    assert stats["cross_refs"] == 0
    assert stats["database_size_mb"] >= 0
