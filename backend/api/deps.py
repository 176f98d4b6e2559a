"""Shared services, built once in the app lifespan and injected into routers."""
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Request

from config import settings
from core.db_connector import EngineRegistry, TableSampler
from core.errors import (
    AppError,
    DatabaseError,
    GatewayError,
    InvalidConnectionStringError,
    MaxTurnsExceededError,
    QueryExecutionError,
    ToolError,
)
from core.query_executor import QueryExecutor
from core.schema_provider import SchemaProvider
from core.sql_generator import SqlGenerator
from core.tool_executor import ToolExecutor
from integrations.openrouter_client import OpenRouterClient


@dataclass
class Services:
    registry: EngineRegistry
    schema_provider: SchemaProvider
    gateway: OpenRouterClient
    generator: SqlGenerator
    executor: QueryExecutor

    def close(self) -> None:
        self.gateway.close()
        self.registry.dispose_all()


def build_services() -> Services:
    registry = EngineRegistry()
    schema_provider = SchemaProvider(registry, ttl_seconds=settings.SCHEMA_CACHE_TTL_SECONDS)
    gateway = OpenRouterClient()
    generator = SqlGenerator(
        schema_provider=schema_provider,
        gateway=gateway,
        tool_executor=ToolExecutor(TableSampler(registry)),
    )
    return Services(
        registry=registry,
        schema_provider=schema_provider,
        gateway=gateway,
        generator=generator,
        executor=QueryExecutor(registry),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def resolve_connection_string(explicit: Optional[str]) -> str:
    connection_string = explicit or settings.DATA_DB_URL
    if not connection_string:
        raise HTTPException(400, detail="No connection string given and DATA_DB_URL is not set.")
    return connection_string


def status_for(error: AppError) -> int:
    if isinstance(error, (QueryExecutionError, InvalidConnectionStringError)):
        return 400
    if isinstance(error, MaxTurnsExceededError):
        return 504
    if isinstance(error, (GatewayError, ToolError, DatabaseError)):
        return 502
    return 500


def to_http_error(error: AppError) -> HTTPException:
    return HTTPException(status_for(error), detail=str(error))
