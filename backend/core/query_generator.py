"""
Query generator — natural-language prompt to validated SQL.

prompt → relevant tables → schema context → prompting agent → extraction
and validation → (nothing usable) fallback synthesis → GenerationResult.
"""
import logging
from typing import Iterable, Optional

from core.context_builder import render_context
from core.exceptions import EmptyPromptError, NoTablesError, PromptAgentError
from core.fallback_synthesizer import synthesize
from core.schema_catalog import SchemaCatalog
from core.sql_extractor import extract_queries
from core.table_selector import select_tables
from models.query import GenerationResult, QueryType
from prompts.sql_generation import sql_system_prompt

logger = logging.getLogger(__name__)

FALLBACK_WARNING = "Used fallback query generation"


class QueryGenerator:
    """Owns the generate() pipeline over a schema catalog and a prompting agent."""

    def __init__(self, catalog: SchemaCatalog, agent, dialect: str = "generic",
                 locales: Optional[Iterable[str]] = None, max_context_chars: Optional[int] = None):
        self.catalog = catalog
        self.agent = agent
        self.dialect = dialect
        self.locales = list(locales) if locales else None
        self.max_context_chars = max_context_chars

    def _ask_agent(self, prompt: str, context: str) -> str:
        messages = [
            {"role": "system", "content": sql_system_prompt.format(dialect=self.dialect, context=context)},
            {"role": "user", "content": prompt},
        ]
        try:
            output = self.agent.chat(messages)
        except Exception as e:
            # Any transport/provider failure counts as "no usable output"
            raise PromptAgentError(f"AI query generation failed: {e}") from e
        if not output or not output.strip():
            raise PromptAgentError("AI returned an empty response")
        logger.debug("Agent response (%d chars) for prompt: %s", len(output), prompt[:80])
        return output

    def generate(self, prompt: str, tables: Iterable[str] = ()) -> GenerationResult:
        """
        Raises EmptyPromptError / NoTablesError for bad caller input, before
        any network call. Every other failure is reported in the result.
        """
        prompt = (prompt or "").strip()
        if not prompt:
            raise EmptyPromptError("Query prompt cannot be empty")
        tables = list(tables or ())

        try:
            schema = self.catalog.build()
        except Exception as e:
            logger.exception("Schema catalog unavailable")
            return _failed(e)
        if not schema:
            raise NoTablesError("Database schema is empty")
        relevant = select_tables(schema, prompt, tables)
        if not relevant:
            raise NoTablesError(f"None of the requested tables exist: {', '.join(tables)}")

        try:
            context = render_context(relevant, self.max_context_chars)
            warnings: list[str] = []
            try:
                output = self._ask_agent(prompt, context)
                queries, extract_warnings = extract_queries(output)
                warnings.extend(extract_warnings)
            except PromptAgentError as e:
                logger.warning("%s; falling back to synthesis", e)
                queries = []
                warnings.append(str(e))

            is_ai_generated = bool(queries)
            if not queries:
                queries, fallback_warnings = synthesize(prompt, relevant, self.locales)
                warnings.extend(fallback_warnings)
                warnings.append(FALLBACK_WARNING)

            return GenerationResult(
                success=True,
                query_type=QueryType.of(queries[0]) if queries else QueryType.UNKNOWN,
                queries=queries,
                tables_used=list(relevant),
                warnings=warnings,
                is_ai_generated=is_ai_generated,
            )
        except Exception as e:
            logger.exception("Query generation failed")
            return _failed(e)


def _failed(error: Exception) -> GenerationResult:
    return GenerationResult(
        success=False,
        error=str(error),
        error_type=type(error).__name__,
        queries=[],
        warnings=[f"Error generating query: {error}"],
    )
