from pathlib import Path
from typing import Any, Iterable, Mapping

from sqlalchemy import Table
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.sql.dml import Insert


def resolve_sqlite_url(url: str, project_root: Path) -> str:
    """Resolve 'sqlite:///./relative/path' to an absolute sqlite:/// URL.

    Keeps other URL forms unchanged.
    """
    prefix = "sqlite:///./"
    if not url.startswith(prefix):
        return url
    rel = url[len(prefix) :]
    return f"sqlite:///{(project_root / rel).resolve()}"


SUPPORTED_DIALECTS = frozenset({"sqlite", "postgresql"})


def _dialect_insert(dialect_name: str, table: Table):
    if dialect_name == "sqlite":
        return sqlite.insert(table)
    if dialect_name == "postgresql":
        return postgresql.insert(table)
    raise NotImplementedError(
        f"Conflict-aware inserts are not supported for the {dialect_name!r} dialect"
    )


def insert_ignore(dialect_name: str, table: Table, values: Mapping[str, Any]) -> Insert:
    """Build ``INSERT ... ON CONFLICT DO NOTHING`` for ``table``.

    The statement's rowcount is 1 when the row was created and 0 when a row
    with the same primary key already existed.
    """

    return _dialect_insert(dialect_name, table).values(**values).on_conflict_do_nothing()


def upsert(
    dialect_name: str,
    table: Table,
    values: Mapping[str, Any],
    *,
    index_elements: Iterable[str],
    update_columns: Iterable[str],
) -> Insert:
    """Build ``INSERT ... ON CONFLICT (...) DO UPDATE`` for ``table``.

    ``update_columns`` are overwritten with the incoming values on conflict.
    """

    stmt = _dialect_insert(dialect_name, table).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=list(index_elements),
        set_={name: stmt.excluded[name] for name in update_columns},
    )


def upsert_max(
    dialect_name: str,
    table: Table,
    values: Mapping[str, Any],
    *,
    index_elements: Iterable[str],
    column: str,
) -> Insert:
    """Build an upsert that only ever raises ``column``.

    On conflict the stored value is replaced by the incoming one when the
    incoming value is larger; otherwise the row is left untouched.
    """

    stmt = _dialect_insert(dialect_name, table).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=list(index_elements),
        set_={column: stmt.excluded[column]},
        where=table.c[column] < stmt.excluded[column],
    )
