from __future__ import annotations

import sys
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import func, inspect, select

from rolltheworld.config import Settings
from rolltheworld.daykey import format_day_key
from rolltheworld.db.store import DrawStore
from rolltheworld.errors import ConfigurationError, ConnectivityError
from rolltheworld.models import Draw, PopulationBound

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def alembic_config() -> Config:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    return cfg


def upgrade_db(target_revision: str = "head") -> None:
    """Apply Alembic migrations up to the requested revision."""
    command.upgrade(alembic_config(), target_revision)


def report(store: DrawStore) -> None:
    """Print the draw tables and today's bound and draw count."""
    tables = sorted(inspect(store.engine).get_table_names())
    print("Current tables:", ", ".join(tables))
    today = store.today()
    with store.begin() as session:
        bound = PopulationBound.for_day(session, today)
        draws = session.scalar(
            select(func.count()).select_from(Draw).where(Draw.day_key == today)
        )
    print(f"{format_day_key(today)}: population bound {bound}, {draws} draw(s)")


def main() -> int:
    """Migrate to head, record today's population bound and report."""
    try:
        store = DrawStore(Settings.from_env())
        store.engine
    except ConfigurationError as exc:
        print(f"init_db: ERROR: {exc}", file=sys.stderr)
        return 2
    upgrade_db()
    try:
        store.ensure_schema()
        report(store)
    except ConnectivityError as exc:
        print(f"init_db: ERROR: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
