"""
Querywright — natural-language to safe SQL
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import health, query, schema
from config import settings

# ── Logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger("querywright")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Querywright starting up…")
    yield
    logger.info("Querywright shutting down.")


# ── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="Querywright — natural-language SQL assistant",
    description="Schema-aware SQL generation with heuristic safety validation and SELECT-only execution.",
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS ──────────────────────────────────────────────────────────────────────
origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(health.router, prefix="/api")
app.include_router(schema.router, prefix="/api")
app.include_router(query.router,  prefix="/api")
