from models.schema import DatabaseSchema, DatabaseTable, DatabaseColumn, DatabaseEnum  # noqa: F401
from models.chat import Message, ToolCall, ChatCompletionRequest, ChatCompletionResponse  # noqa: F401
from models.display import DisplayConfig, GenerationResult, QueryContext  # noqa: F401
from models.execution import Execution  # noqa: F401
from models.query import QueryRequest, FollowupRequest, QueryResponse, ExecutionRequest  # noqa: F401
