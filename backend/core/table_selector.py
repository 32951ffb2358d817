"""
Table relevance selector — picks the schema tables a prompt is about.

Tiers, first match wins: explicit tables → table names (plural or singular)
→ column names → the whole schema.
"""
import logging
import re
from typing import Iterable, Optional

from models.schema import Schema, TableSchema

logger = logging.getLogger(__name__)


def singularize(word: str) -> str:
    """Best-effort singular form for table-name matching (orders → order)."""
    if word.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if word.endswith(("ses", "xes", "ches", "shes")) and len(word) > 4:
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss") and len(word) > 1:
        return word[:-1]
    return word


def _mentions(prompt: str, word: str) -> bool:
    return re.search(rf"\b{re.escape(word)}\b", prompt, re.IGNORECASE) is not None


def select_tables(
    schema: Schema,
    prompt: str,
    explicit_tables: Optional[Iterable[str]] = None,
) -> dict[str, TableSchema]:
    wanted = set(explicit_tables or ())
    if wanted:
        return {name: t for name, t in schema.items() if name in wanted}

    by_name = {
        name: t for name, t in schema.items()
        if _mentions(prompt, name) or _mentions(prompt, singularize(name))
    }
    if by_name:
        logger.debug("Tables matched by name: %s", list(by_name))
        return by_name

    by_column = {
        name: t for name, t in schema.items()
        if any(_mentions(prompt, col) for col in t.columns)
    }
    if by_column:
        logger.debug("Tables matched by column: %s", list(by_column))
        return by_column

    logger.debug("No table or column mentioned, using the whole schema")
    return dict(schema)
