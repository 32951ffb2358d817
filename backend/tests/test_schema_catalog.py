import logging
import sqlite3
import threading
import time

import pytest

from core.db_connector import SQLDatabase
from core.schema_catalog import SchemaCatalog, build_snapshot


class FlakyDatabase(SQLDatabase):
    """Fails to introspect one table."""

    def list_columns(self, table):
        if table == "orders":
            raise RuntimeError("permission denied for table orders")
        return super().list_columns(table)


def test_build_reads_columns_keys_and_indexes(database):
    catalog = SchemaCatalog(database)
    schema = catalog.build()

    assert set(schema) == {"users", "orders", "migrations"}
    users = schema["users"]
    assert list(users.columns) == ["id", "name", "email", "created_at"]
    assert users.columns["name"].type == "TEXT"
    assert users.columns["name"].nullable is False
    assert users.primary_key == ("id",)

    orders = schema["orders"]
    assert orders.foreign_keys["user_id"].foreign_table == "users"
    assert orders.foreign_keys["user_id"].foreign_column == "id"
    assert orders.indexes["ix_orders_user_id"].columns == ("user_id",)
    assert orders.indexes["ix_orders_user_id"].unique is False
    assert orders.columns["total"].default is not None


def test_excluded_tables_are_not_catalogued(database):
    catalog = SchemaCatalog(database, exclude_tables=["migrations"])
    assert "migrations" not in catalog.build()
    assert catalog.get("migrations") is None


def test_one_failing_table_is_skipped(temp_sqlite_db):
    from sqlalchemy import create_engine

    engine = create_engine(f"sqlite:///{temp_sqlite_db}")
    try:
        snapshot = build_snapshot(FlakyDatabase(engine))
    finally:
        engine.dispose()
    assert "users" in snapshot.tables
    assert "orders" not in snapshot.tables
    assert snapshot.skipped == ("orders",)


def test_get_unknown_table_returns_none(database):
    assert SchemaCatalog(database).get("nope") is None


def test_schema_view_is_read_only(database):
    schema = SchemaCatalog(database).build()
    with pytest.raises(TypeError):
        schema["injected"] = schema["users"]


def test_refresh_swaps_in_a_new_snapshot(database, temp_sqlite_db):
    catalog = SchemaCatalog(database)
    before = catalog.snapshot

    conn = sqlite3.connect(temp_sqlite_db)
    conn.execute("CREATE TABLE invoices (id INTEGER PRIMARY KEY, amount REAL)")
    conn.commit()
    conn.close()

    after = catalog.refresh()
    assert after is not before
    assert "invoices" in after.tables
    assert "invoices" not in before.tables
    assert catalog.get("invoices") is not None


def test_snapshot_is_reused_until_ttl_expires(database, monkeypatch):
    catalog = SchemaCatalog(database, ttl_seconds=60)
    first = catalog.snapshot
    assert catalog.snapshot is first

    monkeypatch.setattr(catalog, "_built_at", catalog._built_at - 120)
    assert catalog.snapshot is not first


def test_from_snapshot_never_refreshes(blog_catalog):
    before = blog_catalog.snapshot
    assert blog_catalog.refresh() is before
    assert set(blog_catalog.build()) == {"posts", "users", "comments"}


def test_concurrent_readers_rebuild_an_expired_snapshot_once(database, monkeypatch):
    catalog = SchemaCatalog(database, ttl_seconds=60)
    catalog.snapshot
    monkeypatch.setattr(catalog, "_built_at", catalog._built_at - 120)

    builds = []

    def slow_build(db, exclude_tables):
        builds.append(1)
        time.sleep(0.05)
        return build_snapshot(db, exclude_tables)

    monkeypatch.setattr("core.schema_catalog.build_snapshot", slow_build)
    readers = [threading.Thread(target=lambda: catalog.snapshot) for _ in range(5)]
    for t in readers:
        t.start()
    for t in readers:
        t.join()

    assert len(builds) == 1


def test_manual_refresh_always_rebuilds(database):
    catalog = SchemaCatalog(database, ttl_seconds=60)
    first = catalog.snapshot
    assert catalog.refresh() is not first


def test_excluded_count_reflects_tables_removed(database, caplog):
    with caplog.at_level(logging.INFO, logger="core.schema_catalog"):
        build_snapshot(database, ["migrations", "password_resets", "failed_jobs"])
    assert "Discovered 2 tables (1 excluded)" in caplog.text
