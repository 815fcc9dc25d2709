"""Alembic environment for the chatbot service."""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context
from chatbot_service.core.config import settings
from chatbot_service.core.database import Base
from chatbot_service.models.conversation import Conversation  # noqa: F401
from chatbot_service.models.message import Message  # noqa: F401
from chatbot_service.models.session import SessionRecord  # noqa: F401
from chatbot_service.models.user_patient_mapping import UserPatientMapping  # noqa: F401
from chatbot_service.models.user_practitioner_mapping import (  # noqa: F401
    UserPractitionerMapping,
)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

database_url = settings.database.async_url

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Run migrations in 'online' mode over the asyncpg engine."""
    engine = create_async_engine(database_url, poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
