from __future__ import annotations

import os
import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))
load_dotenv(ROOT_DIR / ".env")

from clubdraw.db.engine import DEFAULT_SQLITE_URL, make_engine  # noqa: E402
from clubdraw.db.utils import resolve_sqlite_url  # noqa: E402
from clubdraw.models import Base  # noqa: E402

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def database_url() -> str:
    """Pick the target database.

    ``alembic -x db_url=...`` wins over ``DB_URL``, which wins over the
    default development database.
    """
    override = context.get_x_argument(as_dictionary=True).get("db_url")
    url = override or os.getenv("DB_URL")
    if not url:
        return DEFAULT_SQLITE_URL
    return resolve_sqlite_url(url, ROOT_DIR)


def configure_options(url: str) -> dict:
    # SQLite can only alter tables by copying them.
    return {
        "target_metadata": Base.metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_offline(url: str) -> None:
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **configure_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online(url: str) -> None:
    engine = make_engine(database_url=url)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, **configure_options(url))
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


url = database_url()
config.set_main_option("sqlalchemy.url", url.replace("%", "%%"))

if context.is_offline_mode():
    run_offline(url)
else:
    run_online(url)
