import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from agent_directory.config import settings
from agent_directory.db.base import Base
# Import all models so they register with Base.metadata
from agent_directory.agents.models import Agent  # noqa: F401
from agent_directory.audit.models import AuditLog  # noqa: F401
from agent_directory.auth.models import Permission, Role, RolePermission, User, UserRole  # noqa: F401
from agent_directory.orgs.models import Organization  # noqa: F401
from agent_directory.platforms.models import Platform  # noqa: F401
from agent_directory.projects.models import Project, ProjectMember  # noqa: F401
from agent_directory.tags.models import Tag  # noqa: F401
from agent_directory.technologies.models import Technology  # noqa: F401
from agent_directory.templates.models import Template  # noqa: F401
from agent_directory.versioning.models import ConfigurationVersion  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# DATABASE_URL (used in Docker) wins over the application settings
DATABASE_URL = os.environ.get("DATABASE_URL", settings.database_url)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    engine = create_async_engine(DATABASE_URL, poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await engine.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
