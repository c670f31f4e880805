"""Small durable key-value stores used for on-device state."""

from __future__ import annotations

import threading
from typing import Optional, Protocol

from sqlalchemy import Column, LargeBinary, MetaData, String, Table, delete, select
from sqlalchemy.engine import Engine

from .daykey import now_ms
from .db.engine import make_engine
from .db.utils import upsert
from .models.id_type import BIG_INT

local_metadata = MetaData()

kv_entries = Table(
    "kv_entries",
    local_metadata,
    Column("key", String(255), primary_key=True),
    Column("value", LargeBinary, nullable=False),
    Column("updated_at", BIG_INT, nullable=False),
)


class KeyValueStore(Protocol):
    """Byte-oriented storage keyed by string. Failures raise."""

    def get(self, key: str) -> Optional[bytes]: ...

    def set(self, key: str, value: bytes) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store, handy for tests and ephemeral clients."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class SqlKeyValueStore:
    """Key-value store persisted in a local (SQLite) database.

    The table is created on first use. The database is separate from the
    draw store and never synchronised with it.
    """

    def __init__(self, database_url: Optional[str] = None, *, engine: Optional[Engine] = None) -> None:
        if engine is None:
            if not database_url:
                raise ValueError("database_url or engine is required")
            engine = make_engine(database_url, timeout=5.0)
        self._engine = engine
        self._ready = False
        self._lock = threading.Lock()

    def _ensure_table(self) -> None:
        if self._ready:
            return
        with self._lock:
            if not self._ready:
                local_metadata.create_all(self._engine)
                self._ready = True

    def get(self, key: str) -> Optional[bytes]:
        self._ensure_table()
        with self._engine.connect() as conn:
            return conn.scalar(select(kv_entries.c.value).where(kv_entries.c.key == key))

    def set(self, key: str, value: bytes) -> None:
        self._ensure_table()
        stmt = upsert(
            self._engine.dialect.name,
            kv_entries,
            {"key": key, "value": bytes(value), "updated_at": now_ms()},
            index_elements=["key"],
            update_columns=["value", "updated_at"],
        )
        with self._engine.begin() as conn:
            conn.execute(stmt)

    def delete(self, key: str) -> None:
        self._ensure_table()
        with self._engine.begin() as conn:
            conn.execute(delete(kv_entries).where(kv_entries.c.key == key))


__all__ = ["KeyValueStore", "InMemoryKeyValueStore", "SqlKeyValueStore"]
