"""
Backoffice API: Database Gateway
=================================

What:  Async SQLAlchemy engine with a bounded connection pool, parameterized
       statement execution, and the FastAPI dependency that hands it to routes.
How:   A process-scoped `Database` handle is created by the application
       lifespan, verified with connect(), stored on app.state and disposed at
       shutdown. Routes receive it through get_database(); nothing in the
       application reaches for a module-level engine.
Who:   Used by ResourceService (execute), the health route (ping) and the
       lifespan (connect, dispose).

Connection Pooling:
    pool_size=DB_POOL_SIZE (default 10), max_overflow=0:
        never more than DB_POOL_SIZE live connections.
    pool_timeout=DB_POOL_TIMEOUT (default None):
        a request that finds the pool exhausted waits for a release.
    pool_pre_ping:
        validates connections before use (catches stale connections).
    SQLite URLs (used by the test suite) keep the dialect's default pool.

Statement Logging (logger "backoffice.db"):
    DB QUERY   compiled statement text, before execution
    DB PARAMS  bound parameter values, before execution (when non-empty)
    DB RESULT  rows / affected rows / generated key, after execution
    DB ERROR   raw driver error, after a failed execution
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from fastapi import Request
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql import Executable

from app.config import Settings
from app.exceptions import StorageError

logger = logging.getLogger("backoffice.db")

# Drivers raise plain OverflowError, TypeError or ValueError when a parameter
# cannot be bound; SQLAlchemy passes those through unwrapped
_EXECUTION_ERRORS = (SQLAlchemyError, OSError, OverflowError, TypeError, ValueError)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for the resource tables (employees, clients, suppliers)."""
    pass


@dataclass
class RowSet:
    """
    Raw outcome of one statement.

    rows:          selected rows as plain dicts (empty for writes)
    rowcount:      number of rows selected, or affected by a write
    inserted_key:  primary key generated by an INSERT, else None
    """
    rows: List[Dict[str, Any]] = field(default_factory=list)
    rowcount: int = 0
    inserted_key: Optional[Any] = None


def _storage_message(exc: BaseException) -> str:
    # DBAPIError wraps the driver exception in .orig; its text is the raw message
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


class Database:
    """
    Owner of the connection pool and the only component that talks SQL.

    Error Handling:
        Every SQLAlchemy, socket-level or parameter-binding failure is logged
        and re-raised as StorageError carrying the raw driver message. Callers
        never see SQLAlchemy or driver exceptions.
    """

    def __init__(self, settings: Settings):
        self.url = settings.sqlalchemy_url
        engine_kwargs: Dict[str, Any] = {}
        if self.url.get_backend_name() != "sqlite":
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=0,
                pool_timeout=settings.db_pool_timeout,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )
        self.engine: AsyncEngine = create_async_engine(self.url, **engine_kwargs)

    @property
    def display_url(self) -> str:
        """Connection URL with the password masked, safe for logs."""
        return self.url.render_as_string(hide_password=True)

    async def connect(self, expected_tables: Iterable[str] = ()) -> None:
        """
        What:  Opens a connection, runs SELECT 1 and checks the expected tables.
        When:  Once at startup, before the app accepts requests.
        Raises:
            StorageError: the database is unreachable. The lifespan treats
            this as fatal.
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
                tables = await conn.run_sync(
                    lambda sync_conn: inspect(sync_conn).get_table_names()
                )
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Could not connect to %s: %s", self.display_url, _storage_message(exc))
            raise StorageError(
                message=_storage_message(exc),
                context={"url": self.display_url},
            ) from exc

        logger.info("Connected to %s", self.display_url)
        logger.info("Tables available: %d", len(tables))
        missing = sorted(set(expected_tables) - set(tables))
        if missing:
            logger.warning("Missing tables: %s", ", ".join(missing))

    async def execute(
        self,
        statement: Executable,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> RowSet:
        """
        Execute one parameterized statement in its own transaction.

        Values are always bound by the driver, never interpolated into the
        SQL text. Explicit `parameters` are passed through for text()
        statements; Core constructs carry their own bound values.

        Returns:
            RowSet with selected rows, affected row count and generated key.

        Raises:
            StorageError: the statement failed (message is the raw driver text).
        """
        try:
            compiled = statement.compile(dialect=self.engine.dialect)
            bound = parameters if parameters is not None else compiled.params
            logger.info("DB QUERY: %s", " ".join(str(compiled).split()))
            if bound:
                logger.info("DB PARAMS: %s", list(bound.values()))

            async with self.engine.begin() as conn:
                result = await conn.execute(statement, parameters)
                rows: List[Dict[str, Any]] = []
                if result.returns_rows:
                    rows = [dict(row) for row in result.mappings().all()]
                    rowcount = len(rows)
                else:
                    rowcount = result.rowcount
                inserted_key = None
                if result.is_insert and result.inserted_primary_key:
                    inserted_key = result.inserted_primary_key[0]
        except _EXECUTION_ERRORS as exc:
            message = _storage_message(exc)
            logger.error("DB ERROR: %s", message)
            raise StorageError(message=message) from exc

        row_set = RowSet(rows=rows, rowcount=rowcount, inserted_key=inserted_key)
        logger.info(
            "DB RESULT: rowcount=%d inserted_key=%s",
            row_set.rowcount,
            row_set.inserted_key,
        )
        logger.debug("DB ROWS: %s", row_set.rows)
        return row_set

    async def ping(self) -> bool:
        """Lightweight connectivity probe for /health."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("Database ping failed: %s", _storage_message(exc))
            return False

    async def dispose(self) -> None:
        """Closes all pooled connections (application shutdown)."""
        await self.engine.dispose()
        logger.info("Connection pool closed")


# ── Dependency ────────────────────────────────────────────────────────────
def get_database(request: Request) -> Database:
    """
    FastAPI dependency returning the process-scoped Database handle.

    The handle is created by the lifespan and stored on app.state; it is
    never mutated by request handling, only used to acquire connections.
    """
    return request.app.state.database
