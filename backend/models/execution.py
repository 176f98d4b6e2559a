"""Pydantic schemas for dashboard item execution records."""
import uuid
from datetime import datetime, timezone
from typing import Any, Literal, Optional
from pydantic import BaseModel, Field


ExecutionStatus = Literal["pending", "success", "failed"]


class Execution(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    dashboard_item_id: str
    status: ExecutionStatus = "pending"
    executed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    results: Optional[list[dict[str, Any]]] = None
    error_message: Optional[str] = None
