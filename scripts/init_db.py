"""Migrate the configured database and summarize what it holds."""

from __future__ import annotations

import argparse
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import func, inspect, select
from sqlalchemy.orm import Session

from clubdraw.db.engine import make_engine
from clubdraw.models import Member, Prize, Winner

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def alembic_config() -> Config:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    return cfg


def summarize(session: Session) -> list[str]:
    """Return one report line per draw table."""
    lines = [
        f"participants: {session.scalar(select(func.count()).select_from(Member))}",
    ]
    for label, model in (("prizes", Prize), ("winners", Winner)):
        rows = session.execute(
            select(model.scope, func.count()).group_by(model.scope).order_by(model.scope)
        ).all()
        per_scope = ", ".join(f"{scope}={count}" for scope, count in rows) or "none"
        lines.append(f"{label}: {per_scope}")
    return lines


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--revision",
        default="head",
        help="Alembic revision to upgrade to (default: head)",
    )
    args = parser.parse_args()

    command.upgrade(alembic_config(), args.revision)

    engine = make_engine()
    tables = sorted(inspect(engine).get_table_names())
    print("Tables:", ", ".join(tables))
    if {"participants", "prizes", "winners"} <= set(tables):
        with Session(engine) as session:
            for line in summarize(session):
                print(" ", line)


if __name__ == "__main__":
    main()
