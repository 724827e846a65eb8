"""Alembic environment configuration"""

from alembic import context
from sqlalchemy import create_engine, pool
from sqlmodel import SQLModel

# Importing the models registers their tables on the metadata
import tinbr.models  # noqa: F401
from tinbr.core.config import get_settings

# this is the Alembic Config object
config = context.config
settings = get_settings()

target_metadata = SQLModel.metadata


def get_url():
    """Database URL from application settings"""
    return settings.DATABASE_URL


def run_migrations_offline():
    """Run migrations in 'offline' mode"""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    """Run migrations against a live connection"""
    connectable = create_engine(get_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
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
