"""
Error types raised by the generation pipeline.
Everything except MalformedOutputError aborts the current generation.
"""
from typing import Optional


class AppError(Exception):
    """Base application error."""


class GatewayError(AppError):
    """The model provider returned a non-2xx status or no choices."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ToolError(AppError):
    """A tool call requested by the model could not be served."""


class ToolArgumentError(ToolError):
    """Tool-call arguments are unusable, even after sanitization."""

    def __init__(self, message: str, function_name: Optional[str] = None):
        super().__init__(message)
        self.function_name = function_name


class InvalidIdentifierError(ToolArgumentError):
    """Table name failed the identifier allow-list."""

    def __init__(self, table_name: str):
        super().__init__(f"Invalid table name: {table_name}", function_name="sampleTable")
        self.table_name = table_name


class UnknownToolError(ToolError):
    def __init__(self, function_name: str):
        super().__init__(f"Unknown function: {function_name}")
        self.function_name = function_name


class SamplingError(ToolError):
    """The database rejected a sampleTable query (unknown table, lost connection, ...)."""

    def __init__(self, table_name: str, detail: str):
        super().__init__(f"Unable to sample table {table_name}: {detail}")
        self.table_name = table_name
        self.function_name = "sampleTable"


class DatabaseError(AppError):
    """The target database could not be reached or introspected."""


class InvalidConnectionStringError(DatabaseError):
    """The connection string is not a usable SQLAlchemy URL."""


class MalformedOutputError(AppError):
    """Final model content is not a usable display payload. Tolerated by the loop."""


class MaxTurnsExceededError(AppError):
    def __init__(self, max_turns: int):
        super().__init__(f"Model did not produce a valid result within {max_turns} turns")
        self.max_turns = max_turns


class QueryExecutionError(AppError):
    """SQL execution failed (syntax, timeout, permission, read-only violation)."""
