import pytest
from core.errors import InvalidConnectionStringError, QueryExecutionError
from core.execution_store import InMemoryExecutionStore
from core.progress import ProgressEmitter
from core.query_executor import QueryExecutor
from models.display import GenerationResult, StatDisplay, TableDisplay


@pytest.fixture
def executor(registry):
    return QueryExecutor(registry)


def test_select_returns_rows_as_dicts(executor, sqlite_url):
    rows = executor.execute_read_only_query("SELECT id, name FROM users ORDER BY id LIMIT 2", sqlite_url)
    assert rows == [{"id": 1, "name": "User 1"}, {"id": 2, "name": "User 2"}]


def test_bound_parameters(executor, sqlite_url):
    rows = executor.execute_read_only_query(
        "SELECT COUNT(*) AS n FROM orders WHERE user_id = :uid", sqlite_url, params={"uid": 1},
    )
    assert rows == [{"n": 3}]


def test_colons_in_sql_are_not_bind_markers(executor, sqlite_url):
    rows = executor.execute_read_only_query("SELECT 'a:b' AS v", sqlite_url)
    assert rows == [{"v": "a:b"}]


@pytest.mark.parametrize("sql", [
    "DELETE FROM users",
    "UPDATE users SET name = 'x'",
    "INSERT INTO empty_table (id) VALUES (1)",
    "DROP TABLE orders",
])
def test_writes_are_rejected(executor, sqlite_url, sql):
    with pytest.raises(QueryExecutionError):
        executor.execute_read_only_query(sql, sqlite_url)
    # Nothing changed and the pooled connection is usable again
    assert executor.execute_read_only_query("SELECT COUNT(*) AS n FROM users", sqlite_url) == [{"n": 10}]
    assert executor.execute_read_only_query("SELECT COUNT(*) AS n FROM empty_table", sqlite_url) == [{"n": 0}]


def test_invalid_sql_raises_with_driver_message(executor, sqlite_url):
    with pytest.raises(QueryExecutionError, match="no such table"):
        executor.execute_read_only_query("SELECT * FROM missing_table", sqlite_url)


def test_dashboard_item_success_is_recorded(executor, sqlite_url):
    execution = executor.execute_dashboard_item("item-1", "SELECT COUNT(*) AS n FROM orders", sqlite_url)

    assert execution.status == "success"
    assert execution.results == [{"n": 25}]
    assert execution.error_message is None
    assert executor.store.latest_for_item("item-1").id == execution.id


def test_dashboard_item_failure_is_recorded_not_raised(executor, sqlite_url):
    execution = executor.execute_dashboard_item("item-2", "SELECT nope FROM users", sqlite_url)

    assert execution.status == "failed"
    assert execution.results is None
    assert "no such column" in execution.error_message
    assert [e.status for e in executor.store.list_for_item("item-2")] == ["failed"]


def test_dashboard_item_writes_pending_record_first(registry, sqlite_url):
    statuses = []

    class RecordingStore(InMemoryExecutionStore):
        def create(self, execution):
            statuses.append(execution.status)
            return super().create(execution)

        def update(self, execution_id, **fields):
            statuses.append(fields["status"])
            return super().update(execution_id, **fields)

    QueryExecutor(registry, RecordingStore()).execute_dashboard_item("item-3", "SELECT 1 AS one", sqlite_url)
    assert statuses == ["pending", "success"]


def test_dashboard_item_is_failed_when_connection_cannot_be_resolved(executor):
    with pytest.raises(ValueError):
        executor.execute_dashboard_item("item-4", "SELECT 1", "")
    [execution] = executor.store.list_for_item("item-4")
    assert execution.status == "failed"
    assert execution.error_message == "Execution aborted"


def test_execute_displays_attaches_results_in_order(executor, sqlite_url):
    result = GenerationResult(display=[
        StatDisplay(id="n", name="Users", sql="SELECT COUNT(*) AS n FROM users"),
        TableDisplay(sql="SELECT id FROM users ORDER BY id LIMIT 3", columns={"id": "ID"}),
    ])
    progress = ProgressEmitter()

    displays = executor.execute_displays(result, sqlite_url, progress)

    assert displays[0].results == [{"n": 10}]
    assert displays[1].results == [{"id": 1}, {"id": 2}, {"id": 3}]
    assert result.display[0].results is None
    assert progress.messages == ["Executing SQL query 1 of 2", "Executing SQL query 2 of 2"]


def test_malformed_connection_string(executor):
    with pytest.raises(InvalidConnectionStringError):
        executor.execute_read_only_query("SELECT 1", "not-a-url")


def test_unreachable_database_raises_query_error(executor):
    with pytest.raises(QueryExecutionError, match="unable to open database file"):
        executor.execute_read_only_query("SELECT 1", "sqlite:////nonexistent-dir/sub/shop.db")


def test_dashboard_item_with_malformed_connection_string_is_failed(executor):
    execution = executor.execute_dashboard_item("item-5", "SELECT 1", "not-a-url")
    assert execution.status == "failed"
    assert execution.error_message.startswith("Invalid connection string")
