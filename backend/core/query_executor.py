"""
Query executor — runs model-authored SQL read-only with a statement timeout,
and records dashboard item executions as pending → success | failed.
"""
import logging
from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from core.db_connector import EngineRegistry, driver_message, read_only_connection
from core.errors import DatabaseError, QueryExecutionError
from core.execution_store import ExecutionStore, InMemoryExecutionStore
from core.progress import ProgressEmitter
from models.display import GenerationResult
from models.execution import Execution

logger = logging.getLogger(__name__)

# Policy constants, not configurable per call
AD_HOC_TIMEOUT_MS = 5_000
REFRESH_TIMEOUT_MS = 10_000


class QueryExecutor:
    def __init__(self, registry: EngineRegistry, store: Optional[ExecutionStore] = None):
        self.registry = registry
        self.store = store if store is not None else InMemoryExecutionStore()

    def execute_read_only_query(
        self,
        sql: str,
        connection_string: str,
        params: Optional[dict[str, Any]] = None,
        timeout_ms: int = AD_HOC_TIMEOUT_MS,
    ) -> list[dict[str, Any]]:
        try:
            engine = self.registry.get(connection_string)
            with read_only_connection(engine, timeout_ms) as conn:
                if params:
                    result = conn.execute(text(sql), params)
                else:
                    # Raw driver path so ':' and '%' in model SQL are not read as bind markers
                    result = conn.exec_driver_sql(sql)
                if not result.returns_rows:
                    return []
                return [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            message = driver_message(e)
            logger.warning("Query failed: %s | %s", message, sql[:500])
            raise QueryExecutionError(message) from e

    def execute_dashboard_item(
        self,
        dashboard_item_id: str,
        sql: str,
        connection_string: str,
        timeout_ms: int = REFRESH_TIMEOUT_MS,
    ) -> Execution:
        """
        Write a pending record first, then always finalize it: success with results,
        or failed with the error message. Query errors are recorded, not raised.
        """
        execution = self.store.create(Execution(dashboard_item_id=dashboard_item_id, status="pending"))

        status, results, error_message = "failed", None, "Execution aborted"
        try:
            results = self.execute_read_only_query(sql, connection_string, timeout_ms=timeout_ms)
            status, error_message = "success", None
        except (QueryExecutionError, DatabaseError) as e:
            logger.error("Error executing query for item %s: %s", dashboard_item_id, e)
            error_message = str(e)
        finally:
            final = self.store.update(
                execution.id, status=status, results=results, error_message=error_message,
            )

        if final is None:
            logger.error("Failed to update execution %s to %s status", execution.id, status)
            return execution
        return final

    def execute_displays(
        self,
        result: GenerationResult,
        connection_string: str,
        progress: Optional[ProgressEmitter] = None,
    ) -> list:
        """Run each display's SQL in order and attach its rows."""
        with_results = []
        total = len(result.display)
        for i, display in enumerate(result.display, start=1):
            if progress:
                progress.emit("executing", f"Executing SQL query {i} of {total}")
            rows = self.execute_read_only_query(display.sql, connection_string)
            with_results.append(display.with_results(rows))
        return with_results
