"""
Schema catalog — immutable in-memory model of the live database structure.

The catalog holds one SchemaSnapshot at a time. Readers only ever see a
complete snapshot: refresh() builds a new one off to the side and swaps the
reference, so no locking is needed on the read path.
"""
import logging
import threading
import time
from types import MappingProxyType
from typing import Iterable, Optional

from core.exceptions import SchemaLoadError
from models.schema import ColumnSpec, IndexSpec, Reference, Schema, SchemaSnapshot, TableSchema

logger = logging.getLogger(__name__)


def load_table(db, table: str) -> TableSchema:
    """Introspect one table through the database collaborator."""
    columns = {}
    for name in db.list_columns(table):
        meta = db.column_meta(table, name)
        columns[name] = ColumnSpec(
            type=meta.get("type") or "UNKNOWN",
            nullable=meta.get("nullable", True),
            default=meta.get("default"),
            extra=meta.get("extra"),
        )

    foreign_keys = {
        fk["column"]: Reference(foreign_table=fk["foreign_table"], foreign_column=fk["foreign_column"])
        for fk in db.list_foreign_keys(table)
    }
    indexes = {
        idx["name"]: IndexSpec(columns=tuple(idx["columns"]), unique=idx.get("unique", False))
        for idx in db.list_indexes(table)
    }
    return TableSchema(
        columns=columns,
        primary_key=tuple(db.primary_key(table)),
        foreign_keys=foreign_keys,
        indexes=indexes,
    )


def build_snapshot(db, exclude_tables: Iterable[str] = ()) -> SchemaSnapshot:
    """
    Enumerate every base table and introspect it.
    A table that fails to load is logged and left out; one bad table never
    fails the whole catalog.
    """
    if hasattr(db, "reset"):
        db.reset()
    excluded = {t.lower() for t in exclude_tables}
    all_tables = db.list_tables()
    table_names = [t for t in all_tables if t.lower() not in excluded]
    logger.info("Discovered %d tables (%d excluded)", len(table_names), len(all_tables) - len(table_names))

    tables: dict[str, TableSchema] = {}
    skipped: list[str] = []
    for table in table_names:
        try:
            tables[table] = load_table(db, table)
        except Exception as e:
            err = SchemaLoadError(table, e)
            logger.warning("%s; skipping", err)
            skipped.append(table)
    return SchemaSnapshot(tables=tables, skipped=tuple(skipped))


class SchemaCatalog:
    """Holds the current snapshot; refreshes manually or after a TTL."""

    def __init__(self, db, exclude_tables: Iterable[str] = (), ttl_seconds: int = 0):
        self.db = db
        self.exclude_tables = tuple(exclude_tables)
        self.ttl_seconds = ttl_seconds
        self._refresh_lock = threading.Lock()
        self._snapshot: Optional[SchemaSnapshot] = None
        self._built_at = 0.0

    @classmethod
    def from_snapshot(cls, snapshot: SchemaSnapshot) -> "SchemaCatalog":
        """Catalog over a fixed snapshot, with no database behind it."""
        catalog = cls(db=None)
        catalog._snapshot = snapshot
        catalog._built_at = time.monotonic()
        return catalog

    def _expired(self) -> bool:
        return self.ttl_seconds > 0 and time.monotonic() - self._built_at >= self.ttl_seconds

    @property
    def snapshot(self) -> SchemaSnapshot:
        current = self._snapshot
        if self.db is not None and (current is None or self._expired()):
            current = self.refresh(only_if_stale=True)
        return current

    def refresh(self, only_if_stale: bool = False) -> SchemaSnapshot:
        """
        Build a new snapshot and swap it in atomically.
        With only_if_stale, a snapshot that another thread rebuilt while this
        one waited for the lock is returned as-is.
        """
        if self.db is None:
            return self._snapshot
        with self._refresh_lock:
            if only_if_stale and self._snapshot is not None and not self._expired():
                return self._snapshot
            t0 = time.monotonic()
            snapshot = build_snapshot(self.db, self.exclude_tables)
            self._snapshot = snapshot
            self._built_at = time.monotonic()
        logger.info(
            "Schema catalog refreshed: %d tables, %d skipped in %.2fs",
            len(snapshot.tables), len(snapshot.skipped), self._built_at - t0,
        )
        return snapshot

    def build(self) -> Schema:
        """Read-only view of the current schema."""
        return MappingProxyType(self.snapshot.tables)

    def get(self, table: str) -> Optional[TableSchema]:
        return self.snapshot.tables.get(table)
