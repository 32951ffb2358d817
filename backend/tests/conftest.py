import os
import sys

# Add the parent directory (backend) to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
import sqlite3
import tempfile
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from core.db_connector import SQLDatabase
from core.schema_catalog import SchemaCatalog
from models.schema import ColumnSpec, IndexSpec, Reference, SchemaSnapshot, TableSchema
from main import app


class FakeAgent:
    """Prompting agent double: returns a canned reply or raises."""

    def __init__(self, reply: str = "", error: Exception = None):
        self.reply = reply
        self.error = error
        self.calls = []

    def chat(self, messages, options=None):
        self.calls.append(messages)
        if self.error:
            raise self.error
        return self.reply


class FakeDatabase:
    """Database double for the execution gate: records every select."""

    def __init__(self, rows=None, error: Exception = None):
        self.rows = rows or []
        self.error = error
        self.calls = []
        self.max_rows_requested = []

    def select(self, sql, bindings=None, max_rows=None):
        self.calls.append((sql, bindings))
        self.max_rows_requested.append(max_rows)
        if self.error:
            raise self.error
        return list(self.rows)


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def temp_sqlite_db():
    fd, path = tempfile.mkstemp(suffix=".db")
    try:
        conn = sqlite3.connect(path)
        cur = conn.cursor()
        cur.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL, email TEXT, created_at TIMESTAMP);")
        cur.execute(
            "CREATE TABLE orders (id INTEGER PRIMARY KEY, user_id INTEGER REFERENCES users(id), "
            "total REAL DEFAULT 0, status TEXT);"
        )
        cur.execute("CREATE INDEX ix_orders_user_id ON orders (user_id);")
        cur.execute("CREATE TABLE migrations (id INTEGER PRIMARY KEY, migration TEXT);")
        cur.execute("INSERT INTO users (name, email) VALUES ('Alice', 'alice@example.com');")
        cur.execute("INSERT INTO users (name, email) VALUES ('Bob', 'bob@example.com');")
        cur.execute("INSERT INTO orders (user_id, total, status) VALUES (1, 42.5, 'PAID');")
        conn.commit()
        conn.close()
        yield path
    finally:
        os.close(fd)
        os.remove(path)


@pytest.fixture
def database(temp_sqlite_db):
    engine = create_engine(f"sqlite:///{temp_sqlite_db}")
    yield SQLDatabase(engine)
    engine.dispose()


@pytest.fixture
def blog_schema():
    return {
        "posts": TableSchema(
            columns={
                "id": ColumnSpec(type="INTEGER", nullable=False, extra="auto_increment"),
                "title": ColumnSpec(type="VARCHAR(255)", nullable=False),
                "body": ColumnSpec(type="TEXT"),
                "created_at": ColumnSpec(type="TIMESTAMP", default="CURRENT_TIMESTAMP"),
            },
            primary_key=("id",),
        ),
        "users": TableSchema(
            columns={
                "id": ColumnSpec(type="INTEGER", nullable=False),
                "name": ColumnSpec(type="VARCHAR(100)", nullable=False),
                "email": ColumnSpec(type="VARCHAR(255)", nullable=False),
                "status": ColumnSpec(type="VARCHAR(20)", default="active"),
            },
            primary_key=("id",),
            indexes={"ux_users_email": IndexSpec(columns=("email",), unique=True)},
        ),
        "comments": TableSchema(
            columns={
                "id": ColumnSpec(type="INTEGER", nullable=False),
                "post_id": ColumnSpec(type="INTEGER", nullable=False),
                "content": ColumnSpec(type="TEXT", nullable=False),
            },
            primary_key=("id",),
            foreign_keys={"post_id": Reference(foreign_table="posts", foreign_column="id")},
        ),
    }


@pytest.fixture
def blog_catalog(blog_schema):
    return SchemaCatalog.from_snapshot(SchemaSnapshot(tables=blog_schema))


@pytest.fixture
def fake_agent():
    return FakeAgent


@pytest.fixture
def fake_database():
    return FakeDatabase
