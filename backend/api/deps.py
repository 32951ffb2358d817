"""Process-wide collaborators, built lazily on first use and shared by the routers."""
from functools import lru_cache

from config import settings
from core.db_connector import SQLDatabase
from core.execution_gate import ExecutionGate
from core.query_generator import QueryGenerator
from core.schema_catalog import SchemaCatalog
from integrations.ollama_client import OllamaClient


@lru_cache(maxsize=1)
def get_database() -> SQLDatabase:
    return SQLDatabase.from_url(settings.DATABASE_URL)


@lru_cache(maxsize=1)
def get_catalog() -> SchemaCatalog:
    return SchemaCatalog(
        get_database(),
        exclude_tables=settings.exclude_table_list,
        ttl_seconds=settings.SCHEMA_TTL_SECONDS,
    )


@lru_cache(maxsize=1)
def get_agent() -> OllamaClient:
    return OllamaClient()


@lru_cache(maxsize=1)
def get_generator() -> QueryGenerator:
    return QueryGenerator(
        get_catalog(),
        get_agent(),
        dialect=get_database().dialect,
        locales=settings.intent_locale_list,
        max_context_chars=settings.CONTEXT_MAX_CHARS,
    )


@lru_cache(maxsize=1)
def get_gate() -> ExecutionGate:
    return ExecutionGate(get_database(), get_agent(), max_rows=settings.MAX_RESULT_ROWS)
