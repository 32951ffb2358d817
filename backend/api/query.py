"""POST /api/query/* — generate SQL from a prompt, run SELECTs, advisory validation."""
import logging
import time
from fastapi import APIRouter, HTTPException

from api.deps import get_gate, get_generator
from core.exceptions import EmptyPromptError, ExecutionError, NoTablesError, UnsafeQuery
from models.query import (
    ExecuteRequest,
    ExecuteResponse,
    GenerateRequest,
    GenerationResult,
    ValidateRequest,
    VerdictRecord,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/query/generate", response_model=GenerationResult)
def generate_query(req: GenerateRequest):
    try:
        return get_generator().generate(req.prompt, req.tables)
    except (EmptyPromptError, NoTablesError) as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/query/execute", response_model=ExecuteResponse)
def execute_query(req: ExecuteRequest):
    t0 = time.monotonic()
    try:
        rows = get_gate().execute(req.sql, req.bindings)
    except UnsafeQuery as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ExecutionError as e:
        duration_ms = round((time.monotonic() - t0) * 1000)
        raise HTTPException(status_code=400, detail=f"{e} ({duration_ms}ms)")
    duration_ms = round((time.monotonic() - t0) * 1000)

    # Serialise (Decimal / datetime → str/float)
    def _coerce(v):
        if v is None or isinstance(v, (bool, int, float, str)):
            return v
        return str(v)

    return ExecuteResponse(
        columns=list(rows[0].keys()) if rows else [],
        rows=[{k: _coerce(v) for k, v in r.items()} for r in rows],
        row_count=len(rows),
        duration_ms=duration_ms,
    )


@router.post("/query/validate", response_model=VerdictRecord)
def validate_query(req: ValidateRequest):
    return get_gate().validate_advisory(req.sql)
