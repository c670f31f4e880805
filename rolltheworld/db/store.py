"""Access layer for the authoritative draw store.

The store owns the SQLAlchemy engine, the one-time schema bootstrap and the
translation of driver failures into the package's error taxonomy. Query
logic lives with the components that need it (engine, ranking, leaderboard).
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from ..config import Settings
from ..daykey import today_day_key
from ..errors import ConfigurationError, ConnectivityError, IntegrityError
from ..models import Base, PopulationBound
from .engine import get_sessionmaker, make_engine
from .utils import SUPPORTED_DIALECTS, upsert_max

logger = logging.getLogger(__name__)

PopulationSource = Callable[[int], int]
"""Callable returning the population bound for a day key."""


class SchemaState:
    """Single-flight latch for the schema bootstrap.

    Concurrent first callers serialize on the lock; whoever runs second finds
    ``initialized`` already set and returns. A failed bootstrap leaves the
    flag unset so that the next caller retries. Once set the flag is never
    cleared.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.initialized = False
        self.runs = 0

    def ensure(self, bootstrap: Callable[[], None]) -> None:
        if self.initialized:
            return
        with self._lock:
            if self.initialized:
                return
            self.runs += 1
            bootstrap()
            self.initialized = True


def _check_dialect(name: str) -> None:
    if name not in SUPPORTED_DIALECTS:
        raise ConfigurationError(
            f"Unsupported store backend {name!r}; use one of {sorted(SUPPORTED_DIALECTS)}"
        )


def upsert_population(session: Session, day_key: int, population: int) -> None:
    """Insert the population bound for ``day_key`` or raise the stored one.

    A stored bound is never lowered: draws already taken that day must stay
    within it.
    """

    if population <= 0:
        raise ValueError("population bound must be positive")
    dialect = session.get_bind().dialect.name
    session.execute(
        upsert_max(
            dialect,
            PopulationBound.__table__,
            {"day_key": day_key, "population": population},
            index_elements=["day_key"],
            column="population",
        )
    )


class DrawStore:
    """Authoritative relational store for population bounds and draws.

    Parameters
    ----------
    settings : Optional[Settings], default: None
        Settings used to build the engine lazily on first access. A missing
        endpoint surfaces as :class:`~rolltheworld.errors.ConfigurationError`
        at that point, not at construction.
    engine : Optional[Engine], default: None
        Pre-built engine, mainly for tests. Takes precedence over
        ``settings``.
    population : Optional[PopulationSource], default: None
        Source of per-day population bounds. Defaults to
        ``settings.population_today`` for every day.
    clock : Optional[Callable[[], int]], default: None
        Returns today's day key; used when bootstrapping today's bound.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        engine: Optional[Engine] = None,
        population: Optional[PopulationSource] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        if engine is not None:
            _check_dialect(engine.dialect.name)
        self._settings = settings or Settings()
        self._engine = engine
        self._sessionmaker: Optional[sessionmaker] = None
        self._engine_lock = threading.Lock()
        self._population = population or (lambda _day: self._settings.population_today)
        self._clock = clock or today_day_key
        self.schema = SchemaState()

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            with self._engine_lock:
                if self._engine is None:
                    url = self._settings.store_url()
                    _check_dialect(make_url(url).get_backend_name())
                    self._engine = make_engine(url, timeout=self._settings.store_timeout)
        return self._engine

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def population_for(self, day_key: int) -> int:
        population = int(self._population(day_key))
        if population <= 0:
            raise ValueError(f"population bound for {day_key} must be positive")
        return population

    def today(self) -> int:
        return self._clock()

    @contextmanager
    def begin(self) -> Iterator[Session]:
        """Open a session inside a transaction, committed on success.

        Raises
        ------
        ConfigurationError
            If the store endpoint or credential is missing.
        ConnectivityError
            If the store is unreachable, times out, or drops the connection.
        IntegrityError
            If the store rejects a write because of a constraint violation.
        """

        if self._sessionmaker is None:
            self._sessionmaker = get_sessionmaker(self.engine)
        try:
            with self._sessionmaker.begin() as session:
                yield session
        except sa_exc.IntegrityError as exc:
            raise IntegrityError(f"Store rejected write: {exc.orig}") from exc
        except (sa_exc.OperationalError, sa_exc.InterfaceError, sa_exc.TimeoutError) as exc:
            logger.debug(f"Store round trip failed: {exc}")
            raise ConnectivityError(f"Store unreachable: {exc}") from exc
        except sa_exc.DBAPIError as exc:
            if exc.connection_invalidated:
                raise ConnectivityError(f"Store connection lost: {exc}") from exc
            raise

    def ensure_schema(self) -> None:
        """Create tables and today's population bound, once per store."""

        self.schema.ensure(self._bootstrap)

    def _bootstrap(self) -> None:
        engine = self.engine
        logger.debug("Bootstrapping draw store schema")
        try:
            Base.metadata.create_all(engine)
        except (sa_exc.OperationalError, sa_exc.InterfaceError, sa_exc.TimeoutError) as exc:
            raise ConnectivityError(f"Store unreachable: {exc}") from exc
        today = self.today()
        with self.begin() as session:
            upsert_population(session, today, self.population_for(today))
        logger.debug(f"Draw store ready; population bound set for {today}")


__all__ = ["DrawStore", "SchemaState", "PopulationSource", "upsert_population"]
