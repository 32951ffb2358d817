"""
Query execution gate — SELECT-only execution plus an AI advisory verdict.

The advisory verdict is for display. Authorization to execute comes only from
the SELECT check in execute().
"""
import json
import logging
import re
from typing import Optional

from pydantic import ValidationError

from core.db_connector import Bindings
from core.exceptions import ExecutionError, UnsafeQuery
from models.query import VerdictRecord
from prompts.sql_generation import validation_prompt

logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


def _conservative_verdict(message: str) -> VerdictRecord:
    return VerdictRecord(
        valid=False,
        type="ERROR",
        is_destructive=True,
        security_risk="high",
        message=message,
        suggestions=["Check the query syntax and try again"],
    )


def parse_verdict(raw: str) -> VerdictRecord:
    """Parse the agent's JSON verdict; raises ValueError when it is not one."""
    text = raw.strip()
    fenced = _JSON_FENCE.search(text)
    if fenced:
        text = fenced.group(1).strip()
    elif not text.startswith("{"):
        # Tolerate prose around a single JSON object
        start, end = text.find("{"), text.rfind("}")
        if start != -1 and end > start:
            text = text[start:end + 1]
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("verdict is not a JSON object")
    return VerdictRecord.model_validate(data)


class ExecutionGate:
    """Runs SELECTs against the database collaborator; refuses everything else."""

    def __init__(self, database, agent=None, max_rows: Optional[int] = None):
        self.database = database
        self.agent = agent
        self.max_rows = max_rows

    def execute(self, sql: str, bindings: Optional[Bindings] = None) -> list[dict]:
        statement = (sql or "").strip()
        if not statement.upper().startswith("SELECT"):
            raise UnsafeQuery("Only SELECT queries are allowed for safety reasons")
        statement = statement.rstrip(";").rstrip()
        if ";" in statement:
            # Some drivers run stacked statements; one SELECT per call only
            raise UnsafeQuery("Only a single SELECT statement may be executed")
        try:
            rows = self.database.select(
                statement, bindings if bindings is not None else [], max_rows=self.max_rows
            )
        except Exception as e:
            logger.warning("Query execution failed: %s", e)
            raise ExecutionError(f"Query execution failed: {e}") from e
        if self.max_rows is not None and len(rows) > self.max_rows:
            logger.info("Truncating %d rows to %d", len(rows), self.max_rows)
            rows = rows[:self.max_rows]
        return rows

    def validate_advisory(self, sql: str) -> VerdictRecord:
        query = (sql or "").strip()
        if not query:
            return VerdictRecord(valid=False, type="ERROR", message="Query cannot be empty",
                                 suggestions=[])
        if self.agent is None:
            return _conservative_verdict("Failed to validate query: no prompting agent configured")

        try:
            raw = self.agent.chat([{"role": "user", "content": validation_prompt.format(query=query)}])
            return parse_verdict(raw or "")
        except (ValueError, ValidationError) as e:
            logger.warning("Unparseable validation verdict: %s", e)
            return _conservative_verdict(f"Failed to validate query: {e}")
        except Exception as e:
            logger.warning("Advisory validation failed: %s", e)
            return _conservative_verdict(f"Failed to validate query: {e}")
