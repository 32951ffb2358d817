"""Pydantic schemas for query generation, execution and advisory validation."""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union
from pydantic import BaseModel, Field, field_validator


class QueryType(str, Enum):
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    OTHER = "other"
    UNKNOWN = "unknown"

    @classmethod
    def of(cls, sql: str) -> "QueryType":
        """Classify a statement by its leading keyword."""
        head = sql.strip().split(None, 1)
        if not head:
            return cls.UNKNOWN
        keyword = head[0].lower()
        for member in (cls.SELECT, cls.INSERT, cls.UPDATE, cls.DELETE):
            if keyword == member.value:
                return member
        return cls.OTHER


class GenerationResult(BaseModel):
    success: bool
    query_type: QueryType = QueryType.UNKNOWN
    queries: list[str] = []
    tables_used: list[str] = []
    warnings: list[str] = []
    is_ai_generated: bool = False
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    error: Optional[str] = None
    error_type: Optional[str] = None


RISK_LEVELS = ("none", "low", "medium", "high")
VERDICT_TYPES = ("SELECT", "INSERT", "UPDATE", "DELETE", "OTHER", "ERROR")


class VerdictRecord(BaseModel):
    """Advisory verdict for display only. Never used to authorize execution."""
    valid: bool = False
    type: str = "OTHER"
    is_destructive: bool = True
    security_risk: str = "high"
    message: str = "Validation completed"
    suggestions: list[str] = []

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, v: Any) -> str:
        value = str(v or "OTHER").strip().upper()
        return value if value in VERDICT_TYPES else "OTHER"

    @field_validator("security_risk", mode="before")
    @classmethod
    def _normalize_risk(cls, v: Any) -> str:
        value = str(v or "high").strip().lower()
        return value if value in RISK_LEVELS else "high"

    @field_validator("suggestions", mode="before")
    @classmethod
    def _normalize_suggestions(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return [str(s) for s in v]


# ── Request / response bodies for the HTTP surface ────────────────────────────

class GenerateRequest(BaseModel):
    prompt: str
    tables: list[str] = []


class ExecuteRequest(BaseModel):
    sql: str
    bindings: Union[dict[str, Any], list[Any]] = Field(default_factory=list)


class ExecuteResponse(BaseModel):
    columns: list[str]
    rows: list[dict]
    row_count: int
    duration_ms: int


class ValidateRequest(BaseModel):
    sql: str
