from core.db_connector import EngineRegistry, TableSampler, reflect_schema, sample_table  # noqa: F401
from core.schema_formatter import format_schema_for_ai  # noqa: F401
from core.schema_provider import SchemaProvider  # noqa: F401
from core.arg_repair import sanitize_tool_arguments  # noqa: F401
from core.tool_executor import ToolExecutor, TOOL_DEFINITIONS  # noqa: F401
from core.sql_generator import SqlGenerator  # noqa: F401
from core.query_executor import QueryExecutor  # noqa: F401
