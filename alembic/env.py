"""Alembic environment for the planner schema."""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from planner.config import get_settings
from planner.db import models  # noqa: F401 - Import models to register them
from planner.db.base import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# Migrations always use the sync driver (psycopg2, or pysqlite for local files)
database_url = get_settings().database_url_sync


def migration_options(url: str) -> dict:
    """
    Options shared by offline and online runs.

    SQLite cannot ALTER most columns in place, so batch mode (copy and
    recreate the table) is turned on for it.
    """
    return {
        "target_metadata": target_metadata,
        "render_as_batch": url.startswith("sqlite"),
        "compare_type": True,
    }


def run_migrations_offline() -> None:
    """Emit SQL to the script output instead of touching a database."""
    context.configure(
        url=database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **migration_options(database_url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(database_url, poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, **migration_options(database_url))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
