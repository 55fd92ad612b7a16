"""
Database Connection and Session Management.

This module sets up the asynchronous SQLAlchemy engine and session factory
from the server settings, and exposes the SQL repositories the agent core
persists through.
"""

from venture_ai.agent_core.repos.sql import (
    SqlRepoBundle,
    build_sql_repos,
    create_all,
    create_engine,
    create_sessionmaker,
)
from venture_ai.server.core.config import settings

"""
engine:
    The global SQLAlchemy AsyncEngine instance.
    Configured with the connection URL from settings (Postgres via asyncpg,
    or SQLite via aiosqlite).
"""
engine = create_engine(settings.database_url)

"""
async_session_maker:
    A global factory for creating new AsyncSession instances.
    Bound to the `engine` and configured to NOT expire on commit (typical for async).
"""
async_session_maker = create_sessionmaker(engine)


def get_repositories() -> SqlRepoBundle:
    """Build the SQL conversation and project repositories on the global session factory."""
    return build_sql_repos(session_factory=async_session_maker)


async def init_db() -> None:
    """
    Initialize the database.

    Creates the ``va_*`` tables defined in the agent core ORM metadata when
    they do not exist yet.
    """
    await create_all(engine)
