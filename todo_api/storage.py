import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, NamedTuple

from sqlalchemy import (
    Boolean,
    Column,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    exc,
    text,
)
from sqlalchemy.engine import Connection, Engine

from todo_api.config import Settings
from todo_api.errors import QueryError, StorageConnectionError

logger = logging.getLogger(__name__)

metadata = MetaData()

todos = Table(
    "todos",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("detail", String(255), nullable=False),
    Column("point", Integer, nullable=False),
    Column("done", Boolean, nullable=False),
    sqlite_autoincrement=True,
)


class ExecResult(NamedTuple):
    rows_affected: int
    last_insert_id: int | None


class Database:
    """Thin accessor over one SQLAlchemy engine and its connection pool.

    Statements are plain SQL strings with named ``:param`` placeholders;
    values are always bound by the driver.
    """

    def __init__(self, engine: Engine):
        self._engine = engine

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        engine = create_engine(
            settings.sqlalchemy_url,
            pool_size=settings.db_pool_size,
            pool_pre_ping=True,
        )
        return cls(engine)

    @contextmanager
    def _transaction(self) -> Iterator[Connection]:
        try:
            conn = self._engine.connect()
        except exc.SQLAlchemyError as err:
            raise StorageConnectionError("fail to connect database") from err

        try:
            with conn, conn.begin():
                yield conn
        except exc.DBAPIError as err:
            if err.connection_invalidated:
                raise StorageConnectionError("lost database connection") from err
            raise QueryError("fail to exec query") from err
        except exc.SQLAlchemyError as err:
            raise QueryError("fail to exec query") from err

    def execute(self, statement: str, params: Mapping[str, Any] | None = None) -> ExecResult:
        with self._transaction() as conn:
            result = conn.execute(text(statement), dict(params or {}))
            return ExecResult(result.rowcount, result.lastrowid)

    def query(self, statement: str, params: Mapping[str, Any] | None = None) -> list[dict]:
        with self._transaction() as conn:
            result = conn.execute(text(statement), dict(params or {}))
            return [dict(row) for row in result.mappings()]

    def query_one(self, statement: str, params: Mapping[str, Any] | None = None) -> dict | None:
        with self._transaction() as conn:
            row = conn.execute(text(statement), dict(params or {})).mappings().first()
            return dict(row) if row is not None else None

    def ping(self) -> None:
        with self._transaction() as conn:
            conn.execute(text("SELECT 1"))

    def create_schema(self) -> None:
        try:
            metadata.create_all(self._engine)
        except exc.SQLAlchemyError as err:
            raise QueryError("fail to create schema") from err
        logger.info("todos table ready")

    def close(self) -> None:
        self._engine.dispose()
