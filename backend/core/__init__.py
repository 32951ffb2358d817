from core.db_connector import SQLDatabase, create_engine_from_url  # noqa: F401
from core.schema_catalog import SchemaCatalog  # noqa: F401
from core.query_generator import QueryGenerator  # noqa: F401
from core.execution_gate import ExecutionGate  # noqa: F401
