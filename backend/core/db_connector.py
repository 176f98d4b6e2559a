"""
Database connector — pooled SQLAlchemy engines, read-only execution guard,
schema reflection and bounded table sampling.
Supports SQLite and PostgreSQL. Extracts tables, columns, types, PK/FK constraints and enums.
"""
import logging
import re
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from sqlalchemy import Enum, create_engine, inspect, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import ArgumentError, DBAPIError, SQLAlchemyError

from core.errors import InvalidConnectionStringError, InvalidIdentifierError, SamplingError
from models.schema import DatabaseSchema, DatabaseTable, DatabaseColumn, DatabaseEnum

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

MIN_SAMPLE_ROWS = 1
MAX_SAMPLE_ROWS = 10
SAMPLE_TIMEOUT_MS = 5_000


class EngineRegistry:
    """One pooled engine per distinct connection string, created on first use."""

    def __init__(self, **engine_kwargs: Any):
        self._engines: dict[str, Engine] = {}
        self._lock = threading.Lock()
        self._engine_kwargs = {"pool_pre_ping": True, **engine_kwargs}

    def get(self, connection_string: str) -> Engine:
        if not connection_string:
            raise ValueError("A database connection string is required")
        with self._lock:
            engine = self._engines.get(connection_string)
            if engine is None:
                try:
                    engine = create_engine(connection_string, **self._engine_kwargs)
                except ArgumentError as e:
                    raise InvalidConnectionStringError(f"Invalid connection string: {e}") from e
                self._engines[connection_string] = engine
                logger.info("Created connection pool for %s", engine.url.render_as_string(hide_password=True))
            return engine

    def __len__(self) -> int:
        return len(self._engines)

    def dispose_all(self) -> None:
        with self._lock:
            for engine in self._engines.values():
                engine.dispose()
            self._engines.clear()


# ── Read-only guard ──────────────────────────────────────────────────────────

def _begin_read_only(conn: Connection, timeout_ms: int) -> Callable[[], None]:
    """Apply dialect-specific read-only + timeout settings; return the undo hook."""
    dialect = conn.dialect.name
    if dialect == "postgresql":
        # Must be the first statement of the transaction
        conn.exec_driver_sql("SET TRANSACTION READ ONLY")
        conn.exec_driver_sql(f"SET LOCAL statement_timeout = {int(timeout_ms)}")
        return lambda: None

    if dialect == "sqlite":
        raw = conn.connection.driver_connection
        deadline = time.monotonic() + timeout_ms / 1000
        # A non-zero return interrupts the running statement
        raw.set_progress_handler(lambda: int(time.monotonic() > deadline), 1000)
        conn.exec_driver_sql("PRAGMA query_only = ON")

        def _reset() -> None:
            conn.exec_driver_sql("PRAGMA query_only = OFF")
            raw.set_progress_handler(None, 0)
        return _reset

    logger.warning("No read-only guard available for dialect %s", dialect)
    return lambda: None


@contextmanager
def read_only_connection(engine: Engine, timeout_ms: int) -> Iterator[Connection]:
    """
    Yield a pooled connection inside a read-only transaction bounded by timeout_ms.
    The transaction is always rolled back and the connection returned to the pool.
    """
    with engine.connect() as conn:
        reset = _begin_read_only(conn, timeout_ms)
        try:
            yield conn
        finally:
            conn.rollback()
            reset()


# ── Schema reflection ────────────────────────────────────────────────────────

def reflect_schema(engine: Engine) -> DatabaseSchema:
    """
    Reflect all tables from the target database.
    Returns a DatabaseSchema with columns, PK/FK flags, enums and row counts.
    """
    insp = inspect(engine)
    schema_name = _get_default_schema(engine)
    table_names = sorted(insp.get_table_names(schema=schema_name))
    logger.info("Discovered %d tables", len(table_names))

    tables: list[DatabaseTable] = []
    for table_name in table_names:
        pk_cols = set(insp.get_pk_constraint(table_name, schema=schema_name).get("constrained_columns") or [])
        fk_map: dict[str, tuple[str, str]] = {}
        for fk in insp.get_foreign_keys(table_name, schema=schema_name):
            for lc, rc in zip(fk["constrained_columns"], fk["referred_columns"]):
                fk_map[lc] = (fk["referred_table"], rc)

        columns = [
            _to_column(col, engine, pk_cols, fk_map)
            for col in insp.get_columns(table_name, schema=schema_name)
        ]
        tables.append(DatabaseTable(
            name=table_name,
            columns=columns,
            row_count=get_row_count(engine, table_name, schema_name),
        ))

    return DatabaseSchema(
        tables=tables,
        enums=_reflect_enums(insp, schema_name),
        last_updated=time.time(),
    )


def _to_column(col: dict, engine: Engine, pk_cols: set[str], fk_map: dict[str, tuple[str, str]]) -> DatabaseColumn:
    sa_type = col["type"]
    if isinstance(sa_type, Enum):
        data_type, udt_name = "ENUM", sa_type.name or "ENUM"
    else:
        try:
            data_type = sa_type.compile(dialect=engine.dialect)
        except Exception:   # NullType and other uncompilable reflected types
            data_type = type(sa_type).__name__.upper()
        udt_name = data_type

    foreign = fk_map.get(col["name"])
    default = col.get("default")
    return DatabaseColumn(
        name=col["name"],
        type=data_type,
        udt_name=udt_name,
        nullable=col.get("nullable", True),
        default_value=str(default) if default is not None else None,
        max_length=getattr(sa_type, "length", None),
        numeric_precision=getattr(sa_type, "precision", None),
        numeric_scale=getattr(sa_type, "scale", None),
        is_primary_key=col["name"] in pk_cols,
        is_foreign_key=foreign is not None,
        foreign_table=foreign[0] if foreign else None,
        foreign_column=foreign[1] if foreign else None,
    )


def _reflect_enums(insp, schema_name: Optional[str]) -> list[DatabaseEnum]:
    # Only the PostgreSQL inspector knows about enum types
    if not hasattr(insp, "get_enums"):
        return []
    return [
        DatabaseEnum(name=e["name"], values=list(e["labels"]))
        for e in sorted(insp.get_enums(schema=schema_name), key=lambda e: e["name"])
    ]


def _get_default_schema(engine: Engine) -> Optional[str]:
    if engine.dialect.name == "postgresql":
        return "public"
    return None   # SQLite has no schema concept


def _quote(table_name: str, schema: Optional[str] = None) -> str:
    validate_table_name(table_name)
    return f'"{schema}"."{table_name}"' if schema else f'"{table_name}"'


def get_row_count(engine: Engine, table_name: str, schema: Optional[str] = None) -> int:
    """Fetch row count for a single table using a pushdown COUNT query."""
    qualified = _quote(table_name, schema)
    with engine.connect() as conn:
        result = conn.execute(text(f"SELECT COUNT(*) FROM {qualified}"))
        return result.scalar() or 0


# ── Sampling ─────────────────────────────────────────────────────────────────

def driver_message(e: SQLAlchemyError) -> str:
    """The DBAPI error text without SQLAlchemy's statement/parameter suffix."""
    if isinstance(e, DBAPIError) and e.orig is not None:
        return str(e.orig).strip()
    return str(e)


def validate_table_name(table_name: str) -> None:
    """Allow-list check; the only path by which model text reaches SQL identifiers."""
    if not isinstance(table_name, str) or not _IDENTIFIER_RE.fullmatch(table_name):
        raise InvalidIdentifierError(str(table_name))


def clamp_sample_size(num_rows: int) -> int:
    return max(MIN_SAMPLE_ROWS, min(int(num_rows), MAX_SAMPLE_ROWS))


def sample_table(
    engine: Engine,
    table_name: str,
    num_rows: int,
    timeout_ms: int = SAMPLE_TIMEOUT_MS,
) -> list[dict[str, Any]]:
    """
    Return up to 10 rows from table_name: all rows if the table is that small,
    otherwise a uniform random sample. Runs read-only with a statement timeout.
    """
    qualified = _quote(table_name)
    limit = clamp_sample_size(num_rows)

    with read_only_connection(engine, timeout_ms) as conn:
        count = conn.execute(text(f"SELECT COUNT(*) FROM {qualified}")).scalar() or 0
        if count == 0:
            return []
        if count <= limit:
            result = conn.execute(text(f"SELECT * FROM {qualified}"))
        else:
            result = conn.execute(
                text(f"SELECT * FROM {qualified} ORDER BY RANDOM() LIMIT :limit"),
                {"limit": limit},
            )
        return [dict(row._mapping) for row in result]


class TableSampler:
    """Binds sample_table to the shared engine registry."""

    def __init__(self, registry: EngineRegistry):
        self.registry = registry

    def sample_table(self, table_name: str, num_rows: int, connection_string: str) -> list[dict[str, Any]]:
        logger.info("Sampling table %s (%s rows)", table_name, num_rows)
        validate_table_name(table_name)
        engine = self.registry.get(connection_string)
        try:
            return sample_table(engine, table_name, num_rows)
        except SQLAlchemyError as e:
            logger.warning("Sampling %s failed: %s", table_name, driver_message(e))
            raise SamplingError(table_name, driver_message(e)) from e
