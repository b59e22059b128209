from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from infra.config import load_settings
from infra.db.base import Base
import infra.db.models  # noqa: F401


config = context.config

# runtime callers configure logging themselves
if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata

_SHARED_OPTIONS = {
    "target_metadata": target_metadata,
    "render_as_batch": True,
    "compare_type": True,
}


def _db_url() -> str:
    url = config.get_main_option("sqlalchemy.url")
    return url or load_settings().db_url


def run_migrations_offline() -> None:
    context.configure(
        url=_db_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_SHARED_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connection = config.attributes.get("connection")
    if connection is not None:
        context.configure(connection=connection, **_SHARED_OPTIONS)
        with context.begin_transaction():
            context.run_migrations()
        return

    engine = create_engine(_db_url(), future=True, poolclass=pool.NullPool)
    with engine.connect() as conn:
        context.configure(connection=conn, **_SHARED_OPTIONS)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
