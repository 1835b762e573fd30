from __future__ import annotations

import asyncio
import os
import sys
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from boardroom.db.models import Base

print(f"[alembic-env] loaded: {__file__}", file=sys.stderr)

# Alembic Config object
config = context.config

# Logging
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _choose_url() -> str:
    # -x sqlalchemy_url=... wins, then the usual env names
    x = context.get_x_argument(as_dictionary=True)
    if x.get("sqlalchemy_url"):
        return x["sqlalchemy_url"]
    for k in ("ALEMBIC_DATABASE_URL", "DATABASE_URL", "ASYNC_DATABASE_URL"):
        v = os.getenv(k)
        if v:
            return v
    from boardroom.core.config import settings
    return settings.DATABASE_URL


def run_migrations_offline() -> None:
    """Render SQL without a database connection."""
    context.configure(
        url=_choose_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def _do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        # SQLite needs batch mode for ALTERs
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    cfg = dict(config.get_section(config.config_ini_section) or {})
    cfg["sqlalchemy.url"] = _choose_url()
    print(f"[alembic-env] url={cfg['sqlalchemy.url'].split('@')[-1]}", file=sys.stderr)

    connectable = async_engine_from_config(cfg, prefix="sqlalchemy.", poolclass=pool.NullPool)
    async with connectable.connect() as connection:
        await connection.run_sync(_do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
