"""
SQL extractor — pulls candidate statements out of free-text agent output and
keeps only those that pass the safety rules.
"""
import logging
import re

from core.exceptions import ExtractionError, UnsafeStatementError
from core.sql_rules import validate_statement

logger = logging.getLogger(__name__)

# ```sql ... ``` or ``` ... ``` (any language tag)
_FENCE = re.compile(r"```(?:[ \t]*[A-Za-z0-9_+-]*[ \t]*\r?\n)?([\s\S]*?)```")

# Statement-shaped spans in plain text, up to ';', a blank line or end of text
_PLAIN_SQL = re.compile(
    r"\b(?:SELECT\b[\s\S]+?\bFROM\b|INSERT\s+INTO\b|UPDATE\s+\S+\s+SET\b|DELETE\s+FROM\b"
    r"|CREATE\s+\w+|ALTER\s+\w+)[\s\S]*?(?=;|\n\s*\n|$)",
    re.IGNORECASE,
)

PLAIN_TEXT_WARNING = "SQL extracted from plain text - verify carefully"


def _split_statements(block: str) -> list[str]:
    return [s.strip() for s in block.split(";") if s.strip()]


def find_candidates(text: str) -> tuple[list[str], list[str]]:
    """Return (candidates, warnings). Raises ExtractionError when nothing looks like SQL."""
    candidates: list[str] = []
    for body in _FENCE.findall(text):
        candidates.extend(_split_statements(body))
    if candidates:
        return candidates, []

    candidates = [m.group(0).strip() for m in _PLAIN_SQL.finditer(text) if m.group(0).strip()]
    if candidates:
        return candidates, [PLAIN_TEXT_WARNING]
    raise ExtractionError("No SQL statements found in the agent response")


def extract_queries(text: str) -> tuple[list[str], list[str]]:
    """
    Extract and validate statements from agent output.
    A statement that fails validation is dropped with a warning; the rest
    of the batch is kept. An empty list is a normal outcome.
    """
    try:
        candidates, warnings = find_candidates(text or "")
    except ExtractionError as e:
        logger.info("Extraction produced nothing: %s", e)
        return [], [str(e)]

    queries: list[str] = []
    for candidate in candidates:
        try:
            queries.append(validate_statement(candidate))
        except UnsafeStatementError as e:
            logger.warning("Dropped generated statement: %s", e)
            warnings.append(f"Query validation failed: {e}")
    return queries, warnings
