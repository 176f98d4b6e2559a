"""
Tool executor — the single capability exposed to the model: sampleTable.
Parses untrusted tool-call arguments, dispatches, and serializes results back.
"""
import json
import logging
from typing import Any, Optional, Protocol

from pydantic import BaseModel, ValidationError

from core.arg_repair import sanitize_tool_arguments
from core.errors import ToolArgumentError, UnknownToolError
from core.progress import ProgressEmitter
from models.chat import ToolCall

logger = logging.getLogger(__name__)

SAMPLE_TABLE = "sampleTable"

TOOL_DEFINITIONS: list[dict[str, Any]] = [
    {
        "type": "function",
        "function": {
            "name": SAMPLE_TABLE,
            "description": (
                "Get sample rows from a specific table to understand its data structure - "
                "MUST be called before generating SQL for tables not previously sampled"
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "tableName": {
                        "type": "string",
                        "description": "The name of the table to sample from",
                    },
                    "numRows": {
                        "type": "integer",
                        "description": "Number of rows to return (between 1 and 10)",
                    },
                },
                "required": ["tableName", "numRows"],
            },
        },
    }
]


class Sampler(Protocol):
    def sample_table(self, table_name: str, num_rows: int, connection_string: str) -> list[dict[str, Any]]:
        ...


class SampleTableArgs(BaseModel):
    tableName: str
    numRows: int = 5


class ToolResult(BaseModel):
    tool_call_id: str
    name: str
    content: str


class ToolExecutor:
    def __init__(self, sampler: Sampler):
        self.sampler = sampler

    def get_tool_definitions(self) -> list[dict[str, Any]]:
        return TOOL_DEFINITIONS

    def handle_tool_call(
        self,
        tool_call: ToolCall,
        connection_string: str,
        progress: Optional[ProgressEmitter] = None,
    ) -> ToolResult:
        function_name = tool_call.function.name
        args = _parse_arguments(function_name, tool_call.function.arguments)

        if function_name != SAMPLE_TABLE:
            logger.error("Unknown function called: %s", function_name)
            raise UnknownToolError(function_name)

        try:
            sample_args = SampleTableArgs.model_validate(args)
        except ValidationError as e:
            raise ToolArgumentError(f"Invalid arguments for {function_name}: {e}", function_name) from e

        if progress:
            progress.emit("sampling", f"Sampling {sample_args.numRows} rows from `{sample_args.tableName}` table")
        rows = self.sampler.sample_table(sample_args.tableName, sample_args.numRows, connection_string)

        return ToolResult(
            tool_call_id=tool_call.id,
            name=function_name,
            content=json.dumps(rows, default=str),
        )


def _parse_arguments(function_name: str, raw: str) -> Any:
    sanitized = sanitize_tool_arguments(raw)
    try:
        return json.loads(sanitized)
    except ValueError as e:
        logger.error("Failed to parse tool call arguments: %s", e)
        logger.error("Arguments: %s (sanitized: %s)", raw, sanitized)
        raise ToolArgumentError(f"Unable to parse arguments for {function_name}", function_name) from e
