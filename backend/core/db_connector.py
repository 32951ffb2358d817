"""
Database connector — SQLAlchemy engine factory and the introspection surface.
Works with any dialect SQLAlchemy reflects (SQLite, PostgreSQL, MySQL, SQL Server).
Extracts tables, columns, types, PK/FK constraints and indexes, and runs
parameterized SELECTs for the execution gate.
"""
import logging
from typing import Any, Mapping, Optional, Sequence, Union
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import CompileError, OperationalError

logger = logging.getLogger(__name__)

Bindings = Union[Mapping[str, Any], Sequence[Any]]


def create_engine_from_url(url: str) -> Engine:
    """Build and test a SQLAlchemy engine for a database URL."""
    engine = create_engine(url, pool_pre_ping=True)
    # Validate the connection immediately
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except OperationalError as e:
        engine.dispose()
        raise ValueError(f"Could not connect to database: {e}") from e
    return engine


def _get_default_schema(engine: Engine) -> Optional[str]:
    if engine.dialect.name == "postgresql":
        return "public"
    return None   # SQLite/MySQL: the connection's own database


def _type_name(col_type) -> str:
    try:
        return str(col_type).upper()
    except CompileError:
        # NullType and friends have no DDL rendering
        return type(col_type).__name__.upper()


class SQLDatabase:
    """Introspection + read access to one database through SQLAlchemy."""

    def __init__(self, engine: Engine, schema: Optional[str] = None):
        self.engine = engine
        self.schema = schema if schema is not None else _get_default_schema(engine)
        self._insp = None

    @classmethod
    def from_url(cls, url: str) -> "SQLDatabase":
        return cls(create_engine_from_url(url))

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def reset(self) -> None:
        """Drop reflection caches so the next listing sees the live database."""
        self._insp = None

    @property
    def inspector(self):
        if self._insp is None:
            self._insp = inspect(self.engine)
        return self._insp

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    # ── Introspection ─────────────────────────────────────────────────────────

    def list_tables(self) -> list[str]:
        return list(self.inspector.get_table_names(schema=self.schema))

    def _raw_columns(self, table: str) -> list[dict]:
        # Inspector memoizes per instance, so repeated lookups are free
        return self.inspector.get_columns(table, schema=self.schema)

    def list_columns(self, table: str) -> list[str]:
        return [c["name"] for c in self._raw_columns(table)]

    def column_meta(self, table: str, column: str) -> dict:
        for col in self._raw_columns(table):
            if col["name"] != column:
                continue
            extra = None
            if col.get("autoincrement") is True:
                extra = "auto_increment"
            elif col.get("identity"):
                extra = "identity"
            return {
                "type": _type_name(col["type"]),
                "nullable": bool(col.get("nullable", True)),
                "default": col.get("default"),
                "extra": extra,
            }
        raise KeyError(f"Column '{column}' not found in table '{table}'")

    def primary_key(self, table: str) -> list[str]:
        pk = self.inspector.get_pk_constraint(table, schema=self.schema) or {}
        return list(pk.get("constrained_columns") or [])

    def list_indexes(self, table: str) -> list[dict]:
        indexes = []
        for idx in self.inspector.get_indexes(table, schema=self.schema):
            # Expression indexes report None for the computed parts
            cols = [c for c in idx.get("column_names") or [] if c]
            if not idx.get("name") or not cols:
                continue
            indexes.append({"name": idx["name"], "columns": cols, "unique": bool(idx.get("unique"))})
        return indexes

    def list_foreign_keys(self, table: str) -> list[dict]:
        fks = []
        for fk in self.inspector.get_foreign_keys(table, schema=self.schema):
            for lc, rc in zip(fk["constrained_columns"], fk["referred_columns"]):
                fks.append({
                    "column": lc,
                    "foreign_table": fk["referred_table"],
                    "foreign_column": rc,
                })
        return fks

    # ── Reads ─────────────────────────────────────────────────────────────────

    def select(self, sql: str, bindings: Optional[Bindings] = None,
               max_rows: Optional[int] = None) -> list[dict]:
        """
        Run one statement with bound parameters and return rows as dicts.
        A mapping binds :named placeholders; a sequence binds the driver's
        positional placeholders. Values are never interpolated into the SQL.
        With max_rows set, at most that many rows are fetched from the cursor.
        """
        with self.engine.connect() as conn:
            if isinstance(bindings, Mapping):
                result = conn.execute(text(sql), dict(bindings))
            elif bindings:
                result = conn.exec_driver_sql(sql, tuple(bindings))
            else:
                result = conn.execute(text(sql))
            cols = list(result.keys())
            fetched = result.fetchmany(max_rows) if max_rows is not None else result.fetchall()
            return [dict(zip(cols, r)) for r in fetched]
