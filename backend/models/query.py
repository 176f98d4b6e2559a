"""Pydantic schemas for the query API."""
from typing import Any, Optional
from pydantic import BaseModel, Field

from models.display import QueryContext


class QueryRequest(BaseModel):
    query: str = Field(..., min_length=1)
    connection_string: Optional[str] = None   # falls back to DATA_DB_URL


class FollowupRequest(BaseModel):
    followup_instruction: str = Field(..., min_length=1)
    previous_context: QueryContext
    connection_string: Optional[str] = None


class QueryResponse(BaseModel):
    query: str
    original_query: Optional[str] = None
    display: list[dict[str, Any]]
    explanation: Optional[str] = None


class ExecutionRequest(BaseModel):
    dashboard_item_id: str
    sql: str = Field(..., min_length=1)
    connection_string: Optional[str] = None
