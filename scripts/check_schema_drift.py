"""Report differences between the ORM models and the configured database.

Exit codes: 0 when the database matches the models and is at the latest
migration, 1 when anything differs, 2 when the check could not run.
"""

from __future__ import annotations

import sys
from pathlib import Path

from alembic.autogenerate import compare_metadata
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy.engine import Connection

from clubdraw.db.engine import make_engine
from clubdraw.models import Base

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def head_revision() -> str | None:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    return ScriptDirectory.from_config(cfg).get_current_head()


def schema_differences(connection: Connection) -> tuple[str | None, list]:
    """Return the database's current revision and the model/database diffs."""
    context = MigrationContext.configure(
        connection=connection,
        opts={
            "compare_type": True,
            "render_as_batch": connection.dialect.name == "sqlite",
        },
    )
    return context.get_current_revision(), compare_metadata(context, Base.metadata)


def main() -> int:
    engine = make_engine()
    target = engine.url.render_as_string(hide_password=True)
    try:
        expected = head_revision()
        with engine.connect() as connection:
            current, diffs = schema_differences(connection)
    except Exception as exc:
        print(f"Schema check could not run against {target}: {exc}", file=sys.stderr)
        return 2

    status = 0
    if current != expected:
        print(f"{target} is at revision {current!r}, latest is {expected!r}.")
        status = 1
    if diffs:
        print(f"{target} differs from the models:")
        for diff in diffs:
            print(f"  - {diff}")
        status = 1
    if status == 0:
        print(f"{target} matches the models at revision {current}.")
    return status


if __name__ == "__main__":
    raise SystemExit(main())
