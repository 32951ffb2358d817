from models.schema import ColumnSpec, Reference, IndexSpec, TableSchema, Schema, SchemaSnapshot  # noqa: F401
from models.query import QueryType, GenerationResult, VerdictRecord  # noqa: F401
from models.query import GenerateRequest, ExecuteRequest, ExecuteResponse, ValidateRequest  # noqa: F401
