from __future__ import annotations

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

from finance_analytics import models  # noqa: F401 - registers the tables on Base.metadata
from finance_analytics.core.config import settings
from finance_analytics.core.database import Base, is_sqlite


config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# FA_DATABASE_URL wins over alembic.ini
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)


def _options(url: str) -> dict:
    # SQLite cannot ALTER constraints in place; batch mode rebuilds the table
    return {
        "target_metadata": Base.metadata,
        "compare_type": True,
        "render_as_batch": is_sqlite(url),
    }


def run_offline(url: str) -> None:
    context.configure(url=url, literal_binds=True, dialect_opts={"paramstyle": "named"}, **_options(url))
    with context.begin_transaction():
        context.run_migrations()


def run_online(url: str) -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, **_options(url))
        with context.begin_transaction():
            context.run_migrations()


database_url = config.get_main_option("sqlalchemy.url")
if context.is_offline_mode():
    run_offline(database_url)
else:
    run_online(database_url)
