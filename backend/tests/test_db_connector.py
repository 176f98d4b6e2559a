from unittest.mock import MagicMock

import pytest
from core.db_connector import (
    EngineRegistry,
    TableSampler,
    clamp_sample_size,
    reflect_schema,
    sample_table,
)
from core.errors import (
    DatabaseError,
    InvalidConnectionStringError,
    InvalidIdentifierError,
    SamplingError,
    ToolArgumentError,
    ToolError,
)
from core.schema_provider import SchemaProvider


@pytest.mark.parametrize("requested,expected", [(-3, 1), (0, 1), (1, 1), (7, 7), (10, 10), (11, 10), (500, 10)])
def test_clamp_sample_size(requested, expected):
    assert clamp_sample_size(requested) == expected


def test_sample_returns_requested_rows_when_table_is_larger(registry, sqlite_url):
    rows = sample_table(registry.get(sqlite_url), "orders", 3)
    assert len(rows) == 3
    assert set(rows[0]) == {"id", "user_id", "total"}


def test_sample_is_clamped_to_ten(registry, sqlite_url):
    assert len(sample_table(registry.get(sqlite_url), "orders", 50)) == 10
    assert len(sample_table(registry.get(sqlite_url), "orders", 0)) == 1


def test_sample_returns_all_rows_of_small_table(registry, sqlite_url):
    rows = sample_table(registry.get(sqlite_url), "users", 10)
    assert sorted(r["id"] for r in rows) == list(range(1, 11))


def test_sample_of_empty_table(registry, sqlite_url):
    assert sample_table(registry.get(sqlite_url), "empty_table", 5) == []


@pytest.mark.parametrize("name", ["users; DROP TABLE users", "1users", "users-x", 'users"', "", "схема"])
def test_invalid_table_name_never_reaches_database(name):
    engine = MagicMock()
    with pytest.raises(InvalidIdentifierError):
        sample_table(engine, name, 5)
    engine.connect.assert_not_called()


def test_table_sampler_rejects_before_acquiring_engine():
    registry = MagicMock()
    with pytest.raises(ToolArgumentError, match="Invalid table name"):
        TableSampler(registry).sample_table("bad name", 5, "sqlite://")
    registry.get.assert_not_called()


def test_registry_reuses_engine_per_connection_string(sqlite_url):
    registry = EngineRegistry()
    try:
        assert registry.get(sqlite_url) is registry.get(sqlite_url)
        assert len(registry) == 1
        with pytest.raises(ValueError):
            registry.get("")
    finally:
        registry.dispose_all()
    assert len(registry) == 0


def test_reflect_schema_sqlite(registry, sqlite_url):
    schema = reflect_schema(registry.get(sqlite_url))

    assert [t.name for t in schema.tables] == ["empty_table", "orders", "users"]
    assert schema.enums == []

    tables = {t.name: t for t in schema.tables}
    assert tables["users"].row_count == 10
    assert tables["orders"].row_count == 25

    users = {c.name: c for c in tables["users"].columns}
    assert users["id"].is_primary_key
    assert users["name"].nullable is False
    assert users["status"].default_value == "'active'"

    user_id = next(c for c in tables["orders"].columns if c.name == "user_id")
    assert user_id.is_foreign_key
    assert (user_id.foreign_table, user_id.foreign_column) == ("users", "id")


def test_schema_provider_caches_per_connection_string(registry, sqlite_url):
    provider = SchemaProvider(registry, ttl_seconds=3600)
    first = provider.get_full_schema(sqlite_url)
    assert provider.get_full_schema(sqlite_url) is first

    provider.invalidate(sqlite_url)
    assert provider.get_full_schema(sqlite_url) is not first


def test_schema_provider_expires_entries(registry, sqlite_url):
    provider = SchemaProvider(registry, ttl_seconds=0)
    first = provider.get_full_schema(sqlite_url)
    assert provider.get_full_schema(sqlite_url) is not first
    assert "### users (10 rows)" in provider.get_formatted_schema(sqlite_url)


def test_schema_provider_invalidate_all(registry, sqlite_url):
    provider = SchemaProvider(registry)
    first = provider.get_full_schema(sqlite_url)
    provider.invalidate()
    assert provider.get_full_schema(sqlite_url) is not first


UNREACHABLE_SQLITE = "sqlite:////nonexistent-dir/sub/shop.db"


def test_sampling_unknown_table_raises_tool_error(registry, sqlite_url):
    with pytest.raises(ToolError, match="no such table: customers") as exc:
        TableSampler(registry).sample_table("customers", 5, sqlite_url)
    assert isinstance(exc.value, SamplingError)
    assert exc.value.function_name == "sampleTable"
    assert exc.value.table_name == "customers"


@pytest.mark.parametrize("url", ["not-a-url", "nosuchdialect://host/db"])
def test_registry_rejects_malformed_connection_string(url):
    registry = EngineRegistry()
    with pytest.raises(InvalidConnectionStringError):
        registry.get(url)
    assert len(registry) == 0


def test_schema_provider_wraps_unreachable_database(registry):
    with pytest.raises(DatabaseError, match="Unable to read database schema"):
        SchemaProvider(registry).get_full_schema(UNREACHABLE_SQLITE)
