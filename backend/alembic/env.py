"""Alembic environment for the meetmatch schema. URL comes from meetmatch.config (DATABASE_URL)."""
from logging.config import fileConfig
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool
from alembic import context

load_dotenv(Path(__file__).resolve().parent.parent / ".env")

import meetmatch.models  # noqa: E402,F401  registers every table on Base.metadata
from meetmatch.config import settings  # noqa: E402
from meetmatch.db.base import Base  # noqa: E402
from meetmatch.db.tables import ALL_TABLE_NAMES  # noqa: E402


def _check_table_registry() -> None:
    # user_blocks / user_profiles belong to other subsystems but are still created here for local runs
    registered = set(Base.metadata.tables)
    expected = set(ALL_TABLE_NAMES)
    if registered != expected:
        raise RuntimeError(
            f"meetmatch models define {sorted(registered)} but ALL_TABLE_NAMES lists {sorted(expected)}; "
            "update meetmatch/db/tables.py together with the models and a migration."
        )


_check_table_registry()

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
config.set_main_option("sqlalchemy.url", settings.database_url)


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        # SQLite needs batch mode for ALTER TABLE in later revisions
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
