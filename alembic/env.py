"""
Alembic Environment Configuration
──────────────────────────────────
- Reads DATABASE_URL from ceresense/config.py (which reads from .env)
- Imports ALL models via ceresense/models/__init__.py so Alembic can detect schema changes
- Runs in "offline" mode (generates SQL) or "online" mode (applies to DB)
"""

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

# ─── Import settings & Base ────────────────────────────────────────────────────
from ceresense.config import settings
from ceresense.database import Base

# ─── Import ALL models so Alembic detects them ────────────────────────────────
import ceresense.models  # noqa: F401  registers models on Base.metadata

# ─── Alembic config object ────────────────────────────────────────────────────
config = context.config

# DATABASE_URL from settings wins over alembic.ini
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


# ─── Offline Mode ─────────────────────────────────────────────────────────────
def run_migrations_offline() -> None:
    """Emit the migration as SQL without connecting to the database."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


# ─── Online Mode ──────────────────────────────────────────────────────────────
def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            # SQLite cannot ALTER most constraints in place
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


# ─── Entry Point ──────────────────────────────────────────────────────────────
if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
