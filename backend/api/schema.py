"""GET/POST /api/schema — inspect and refresh the schema catalog."""
import logging
from fastapi import APIRouter, HTTPException

from api.deps import get_catalog

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/schema")
def get_schema():
    snapshot = get_catalog().snapshot
    return {
        "tables": {name: t.model_dump() for name, t in snapshot.tables.items()},
        "skipped": list(snapshot.skipped),
        "loaded_at": snapshot.loaded_at.isoformat(),
    }


@router.get("/schema/{table}")
def get_table(table: str):
    found = get_catalog().get(table)
    if found is None:
        raise HTTPException(404, detail=f"Table '{table}' not found in the schema catalog.")
    return {"table": table, **found.model_dump()}


@router.post("/schema/refresh")
def refresh_schema():
    snapshot = get_catalog().refresh()
    logger.info("Manual schema refresh: %d tables", len(snapshot.tables))
    return {
        "tables": list(snapshot.tables),
        "skipped": list(snapshot.skipped),
        "loaded_at": snapshot.loaded_at.isoformat(),
    }
