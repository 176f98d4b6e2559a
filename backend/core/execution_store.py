"""
Dashboard item execution store.
The durable store belongs to the persistence layer; this in-memory one is the default.
"""
import threading
from typing import Any, Optional, Protocol

from models.execution import Execution


class ExecutionStore(Protocol):
    def create(self, execution: Execution) -> Execution:
        ...

    def update(self, execution_id: str, **fields: Any) -> Optional[Execution]:
        ...

    def list_for_item(self, dashboard_item_id: str) -> list[Execution]:
        ...


class InMemoryExecutionStore:
    def __init__(self):
        self._executions: dict[str, Execution] = {}
        self._lock = threading.Lock()

    def create(self, execution: Execution) -> Execution:
        with self._lock:
            self._executions[execution.id] = execution
        return execution

    def update(self, execution_id: str, **fields: Any) -> Optional[Execution]:
        with self._lock:
            current = self._executions.get(execution_id)
            if current is None:
                return None
            updated = current.model_copy(update=fields)
            self._executions[execution_id] = updated
            return updated

    def list_for_item(self, dashboard_item_id: str) -> list[Execution]:
        """Newest first."""
        with self._lock:
            items = [e for e in self._executions.values() if e.dashboard_item_id == dashboard_item_id]
        return sorted(items, key=lambda e: e.executed_at, reverse=True)

    def latest_for_item(self, dashboard_item_id: str) -> Optional[Execution]:
        items = self.list_for_item(dashboard_item_id)
        return items[0] if items else None
