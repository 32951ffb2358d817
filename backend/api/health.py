"""GET /api/health — system dependency check."""
import logging
from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from api.deps import get_agent, get_database
from config import settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check():
    db_status     = _check_database()
    ollama_status = _check_ollama()
    overall = "ok" if db_status["status"] == "up" and ollama_status["status"] == "up" else "degraded"
    return {
        "status": overall,
        "services": {
            "database": db_status,
            "ollama":   ollama_status,
        },
    }


def _check_database() -> dict:
    try:
        db = get_database()
        db.ping()
        return {"status": "up", "dialect": db.dialect}
    except (SQLAlchemyError, ValueError) as e:
        logger.warning("Database health check failed: %s", e)
        return {"status": "down", "error": str(e)}


def _check_ollama() -> dict:
    ok, detail = get_agent().is_healthy()
    if ok:
        return {"status": "up", "model": detail, "url": settings.OLLAMA_HOST}
    return {"status": "down", "error": detail}
