"""Runtime settings read from the environment (and a ``.env`` file)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from .db.utils import resolve_sqlite_url
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Project root directory (repo root)
ROOT_DIR = Path(__file__).resolve().parents[1]

DEFAULT_POPULATION = 8_142_000_000
DEFAULT_CACHE_URL = "sqlite:///./.rolltheworld-cache.db"
DEFAULT_TIMEOUT_SECONDS = 10.0


def _population_from_env(raw: Optional[str]) -> int:
    if not raw:
        return DEFAULT_POPULATION
    try:
        parsed = int(raw)
    except (ValueError, OverflowError):
        logger.warning(f"Ignoring non-numeric WORLD_POPULATION_TODAY={raw!r}")
        return DEFAULT_POPULATION
    if parsed <= 0:
        logger.warning(f"Ignoring non-positive WORLD_POPULATION_TODAY={raw!r}")
        return DEFAULT_POPULATION
    return parsed


def _timeout_from_env(raw: Optional[str]) -> float:
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        parsed = float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric DB_TIMEOUT_SECONDS={raw!r}")
        return DEFAULT_TIMEOUT_SECONDS
    return parsed if parsed > 0 else DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class Settings:
    """Configuration consumed by the store, cache and draw engine.

    Attributes
    ----------
    database_url : Optional[str]
        SQLAlchemy URL of the authoritative store. Its absence is only
        reported when the store is first used.
    auth_token : Optional[str]
        Credential for the store, injected as the URL password.
    population_today : int
        Inclusive upper bound of today's draw range.
    local_cache_url : str
        SQLAlchemy URL of the on-device key-value database.
    store_timeout : float
        Seconds before a store connection attempt or lock wait gives up.
    """

    database_url: Optional[str] = None
    auth_token: Optional[str] = None
    population_today: int = DEFAULT_POPULATION
    local_cache_url: str = DEFAULT_CACHE_URL
    store_timeout: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if self.population_today <= 0:
            raise ValueError("population_today must be positive")

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        database_url = (os.getenv("DB_URL") or "").strip().rstrip("/") or None
        if database_url is not None:
            database_url = resolve_sqlite_url(database_url, ROOT_DIR)
        return cls(
            database_url=database_url,
            auth_token=os.getenv("DB_AUTH_TOKEN") or None,
            population_today=_population_from_env(os.getenv("WORLD_POPULATION_TODAY")),
            local_cache_url=resolve_sqlite_url(
                os.getenv("LOCAL_CACHE_URL") or DEFAULT_CACHE_URL, ROOT_DIR
            ),
            store_timeout=_timeout_from_env(os.getenv("DB_TIMEOUT_SECONDS")),
        )

    def store_url(self) -> str:
        """Return the store URL with the credential applied.

        Raises
        ------
        ConfigurationError
            If the endpoint is missing, cannot be parsed, or a non-SQLite
            endpoint has no credential.
        """

        if not self.database_url:
            raise ConfigurationError("Store endpoint is missing. Set DB_URL.")
        try:
            url = make_url(self.database_url)
        except ArgumentError as exc:
            raise ConfigurationError(f"Store endpoint is not a valid URL: {exc}") from exc
        if url.get_backend_name() == "sqlite":
            return self.database_url
        if not self.auth_token:
            raise ConfigurationError("Store credential is missing. Set DB_AUTH_TOKEN.")
        return url.set(password=self.auth_token).render_as_string(hide_password=False)


__all__ = ["Settings", "DEFAULT_POPULATION"]
