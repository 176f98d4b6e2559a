"""
Schema provider — reflected schema snapshots cached per connection string with a TTL.
"""
import logging
import threading
import time
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from core.db_connector import EngineRegistry, driver_message, reflect_schema
from core.errors import DatabaseError
from core.schema_formatter import format_schema_for_ai
from models.schema import DatabaseSchema

logger = logging.getLogger(__name__)


class SchemaProvider:
    def __init__(self, registry: EngineRegistry, ttl_seconds: float = 3600):
        self.registry = registry
        self.ttl_seconds = ttl_seconds
        self._cache: dict[str, DatabaseSchema] = {}
        self._lock = threading.Lock()

    def get_full_schema(self, connection_string: str) -> DatabaseSchema:
        with self._lock:
            cached = self._cache.get(connection_string)
        if cached and time.time() - cached.last_updated < self.ttl_seconds:
            return cached

        logger.info("Schema cache miss; reflecting database")
        engine = self.registry.get(connection_string)
        try:
            schema = reflect_schema(engine)
        except SQLAlchemyError as e:
            logger.error("Schema reflection failed: %s", driver_message(e))
            raise DatabaseError(f"Unable to read database schema: {driver_message(e)}") from e
        with self._lock:
            self._cache[connection_string] = schema
        return schema

    def get_formatted_schema(self, connection_string: str) -> str:
        return format_schema_for_ai(self.get_full_schema(connection_string))

    def invalidate(self, connection_string: Optional[str] = None) -> None:
        """Drop one cached snapshot, or all of them when no connection string is given."""
        with self._lock:
            if connection_string is None:
                self._cache.clear()
            else:
                self._cache.pop(connection_string, None)
