from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker


def make_engine(
    database_url: str,
    echo: bool = False,
    timeout: Optional[float] = None,
) -> Engine:
    """Create an engine for ``database_url`` with a bounded wait on I/O.

    ``timeout`` maps to the SQLite busy timeout. On PostgreSQL it bounds the
    connect, every statement (``statement_timeout``) and the pool checkout.
    """

    url = make_url(database_url)
    backend = url.get_backend_name()
    kwargs: dict = {"echo": echo, "future": True}
    if timeout is not None:
        if backend == "sqlite":
            kwargs["connect_args"] = {"timeout": timeout, "check_same_thread": False}
        elif backend == "postgresql":
            kwargs["connect_args"] = {
                "connect_timeout": max(1, int(timeout)),
                "options": f"-c statement_timeout={int(timeout * 1000)}",
            }
            kwargs["pool_timeout"] = timeout
            kwargs["pool_pre_ping"] = True
    engine = create_engine(url, **kwargs)
    if backend == "sqlite":
        # ensure FK constraints are enforced on SQLite
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def get_sessionmaker(engine: Engine):
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,  # Keep results readable after the transaction closes
        future=True,
    )
