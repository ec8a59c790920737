"""
core/database.py -- Engine construction and scoped connection checkout.

The engine (and its connection pool) is built once by the application
lifespan from Settings and handed to the stores. Nothing in this module holds
a global engine.

checkout() is the only way stores reach the database:
  - the connection comes from the pool inside a `with engine.connect()` block,
    so it goes back to the pool on success and on every error path;
  - any SQLAlchemyError is logged and re-raised as core.errors.StoreError with
    the operation-level message the API returns to the client.

Timeouts: the stores add no retry logic, so every call must be bounded.
STORE_TIMEOUT_SECONDS is applied as the driver connect timeout, the pool
checkout timeout (pooled backends), and PostgreSQL statement_timeout.

Layer rule: core/ is the kernel. No imports from api/, auth/, or records/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import QueuePool, SingletonThreadPool

from core.errors import StoreError

logger = logging.getLogger("cvregistry.store")


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _is_memory_sqlite(db_url: str) -> bool:
    url = make_url(db_url)
    database = url.database or ""
    return database in ("", ":memory:") or "mode=memory" in db_url


def create_store_engine(db_url: str, timeout_seconds: float = 10.0, echo: bool = False) -> Engine:
    """Build the pooled engine shared by every store.

    Usage:
        engine = create_store_engine("postgresql://user:pw@host/db", timeout_seconds=5)
        users = UserStore(engine)
        records = RecordStore(engine)
        ...
        engine.dispose()
    """
    connect_args: dict = {}
    engine_kwargs: dict = {"echo": echo, "pool_pre_ping": True}

    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        connect_args["timeout"] = timeout_seconds
        # In-memory SQLite keeps one connection per thread (SingletonThreadPool,
        # no checkout timeout); file databases get a QueuePool.
        if _is_memory_sqlite(db_url):
            engine_kwargs["poolclass"] = SingletonThreadPool
        else:
            engine_kwargs["poolclass"] = QueuePool
            engine_kwargs["pool_timeout"] = timeout_seconds
    else:
        connect_args["connect_timeout"] = max(1, int(timeout_seconds))
        connect_args["options"] = f"-c statement_timeout={int(timeout_seconds * 1000)}"
        engine_kwargs["pool_timeout"] = timeout_seconds

    engine = create_engine(db_url, connect_args=connect_args, **engine_kwargs)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine


@contextmanager
def checkout(engine: Engine, failure_message: str) -> Iterator[Connection]:
    """Yield a pooled connection; convert driver failures into StoreError."""
    try:
        with engine.connect() as conn:
            yield conn
    except SQLAlchemyError as exc:
        logger.error("%s: %s", failure_message, exc)
        raise StoreError(failure_message, detail=str(exc)) from exc


def ping(engine: Engine) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        with checkout(engine, "Database unreachable") as conn:
            conn.execute(text("SELECT 1"))
        return True
    except StoreError:
        return False
