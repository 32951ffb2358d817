"""Error taxonomy for schema loading, query generation and execution."""


class QuerywrightError(Exception):
    """Base class for every domain error raised by the core."""


class SchemaLoadError(QuerywrightError):
    """Introspecting a single table failed. The table is skipped."""

    def __init__(self, table: str, cause: Exception):
        super().__init__(f"Could not load schema for table '{table}': {cause}")
        self.table = table
        self.cause = cause


class PromptAgentError(QuerywrightError):
    """The prompting agent failed or returned nothing usable."""


class ExtractionError(QuerywrightError):
    """No SQL candidates could be pulled out of the agent output."""


class UnsafeStatementError(QuerywrightError):
    """A single candidate statement failed the safety rules."""


class EmptyPromptError(QuerywrightError, ValueError):
    """The caller supplied an empty prompt."""


class NoTablesError(QuerywrightError, ValueError):
    """No catalogued table is available for the request."""


class UnsafeQuery(QuerywrightError):
    """Execution refused: only SELECT statements may run."""


class ExecutionError(QuerywrightError):
    """The database rejected or failed a SELECT statement."""
