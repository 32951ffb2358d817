"""Pydantic schemas for the introspected database structure."""
from datetime import datetime, timezone
from typing import Any, Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field


class ColumnSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str                           # database-native type name, e.g. VARCHAR(255)
    nullable: bool = True
    default: Optional[Any] = None
    extra: Optional[str] = None         # "auto_increment" | "identity"


class Reference(BaseModel):
    model_config = ConfigDict(frozen=True)

    foreign_table: str
    foreign_column: str


class IndexSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    columns: tuple[str, ...]
    unique: bool = False


class TableSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    columns: dict[str, ColumnSpec] = Field(default_factory=dict)   # physical order
    primary_key: tuple[str, ...] = ()
    foreign_keys: dict[str, Reference] = Field(default_factory=dict)
    indexes: dict[str, IndexSpec] = Field(default_factory=dict)

    @property
    def column_names(self) -> list[str]:
        return list(self.columns)


# Table name → structure. Always handed out read-only by the catalog.
Schema = Mapping[str, TableSchema]


class SchemaSnapshot(BaseModel):
    """One immutable result of introspecting the live database."""
    model_config = ConfigDict(frozen=True)

    tables: dict[str, TableSchema] = Field(default_factory=dict)
    skipped: tuple[str, ...] = ()
    loaded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
