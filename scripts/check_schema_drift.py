from __future__ import annotations

import sys
from pathlib import Path

from alembic.autogenerate import api as ag_api
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory

from rolltheworld.config import Settings
from rolltheworld.db.store import DrawStore
from rolltheworld.errors import ConfigurationError
from rolltheworld.models import Base

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _print_ops(ops, indent: int = 0) -> None:
    prefix = "  " * indent
    for op in ops:
        print(f"{prefix}- {op}")
        sub_ops = getattr(op, "ops", None)
        if sub_ops:
            _print_ops(sub_ops, indent + 1)


def migration_head() -> str:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    return ScriptDirectory.from_config(cfg).get_current_head()


def check(context: MigrationContext, head: str) -> int:
    """Compare the database with the draw models and the migration head.

    Returns 0 when the store matches both, 1 when it has drifted.
    """

    current = context.get_current_revision()
    status = 0
    if current != head:
        print(f"- store is at revision {current or '<none>'}, migrations head is {head}")
        status = 1
    upgrade_ops = ag_api.produce_migrations(context, Base.metadata).upgrade_ops
    if upgrade_ops is not None and not upgrade_ops.is_empty():
        _print_ops(upgrade_ops.ops or [])
        status = 1
    return status


def main() -> int:
    try:
        engine = DrawStore(Settings.from_env()).engine
    except ConfigurationError as exc:
        print(f"Schema drift check: ERROR: {exc}", file=sys.stderr)
        return 2
    url_display = engine.url.render_as_string(hide_password=True)
    try:
        head = migration_head()
        with engine.connect() as connection:
            context = MigrationContext.configure(
                connection=connection,
                opts={
                    "compare_type": True,
                    "compare_server_default": True,
                    "render_as_batch": connection.dialect.name == "sqlite",
                },
            )
            status = check(context, head)
    except Exception as exc:
        print(f"Schema drift check: ERROR for {url_display}: {exc}", file=sys.stderr)
        return 2
    if status:
        print(f"Schema drift check: FAILED for {url_display}.")
    else:
        print(f"Schema drift check: OK (at {head}, no differences) for {url_display}.")
    return status


if __name__ == "__main__":
    raise SystemExit(main())
