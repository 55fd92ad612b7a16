from __future__ import annotations

"""SQLAlchemy async repository implementations.

This module provides SQL persistence for the repository interfaces defined in
``venture_ai.agent_core.repos.interfaces``. It runs on Postgres (asyncpg) or
SQLite (aiosqlite).

Usage
-----

- Create an async engine with ``create_engine``.
- Create tables with ``create_all`` (tests/dev).
- Create a session factory with ``create_sessionmaker``.
- Build repository instances with ``build_sql_repos``.

Transaction model
-----------------

Each repository method opens an ``AsyncSession``, performs its operation, and
commits, so every write is durable when the method returns.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..schemas.domain import (
    ConversationContext,
    ConversationMessage,
    ConversationState,
    HistoryMatch,
    MessageRole,
    Project,
    ProjectStatus,
)
from .interfaces import ConversationRepository, ProjectRepository
from .models import Base, ConversationRow, MessageRow, ProjectRow


def create_engine(db_url: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    Postgres URLs are normalized to the asyncpg driver (``postgresql://`` and
    other variants become ``postgresql+asyncpg://``). SQLite URLs without a
    driver are switched to aiosqlite.
    """
    url = re.sub(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://", "postgresql+asyncpg://", db_url, count=1)
    url = re.sub(r"^sqlite://", "sqlite+aiosqlite://", url, count=1)
    if url.startswith("sqlite"):
        return create_async_engine(url)
    return create_async_engine(url, pool_pre_ping=True)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an ``async_sessionmaker`` with safe defaults for this project."""
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create all tables for the current ORM metadata."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _message_from_row(row: MessageRow) -> ConversationMessage:
    return ConversationMessage(
        role=MessageRole(row.role),
        content=row.content,
        author_id=row.author_id,
        author_name=row.author_name,
        timestamp=_as_utc(row.created_at),
        tool_call_id=row.tool_call_id,
        tool_name=row.tool_name,
    )


@dataclass(frozen=True)
class SqlConversationRepository(ConversationRepository):
    """SQL implementation of ``ConversationRepository``."""

    session_factory: async_sessionmaker[AsyncSession]

    async def load(self, key: str, *, message_limit: int) -> Optional[ConversationContext]:
        async with self.session_factory() as s:
            row = await s.get(ConversationRow, key)
            messages: List[MessageRow] = []
            if message_limit > 0:
                res = await s.execute(
                    select(MessageRow)
                    .where(MessageRow.context_key == key)
                    .order_by(MessageRow.id.desc())
                    .limit(message_limit)
                )
                messages = list(reversed(res.scalars().all()))
        if row is None and not messages:
            return None
        ctx = ConversationContext(key=key, messages=[_message_from_row(m) for m in messages])
        if row is not None:
            ctx.state = ConversationState(row.state)
            ctx.project_id = row.project_id
            ctx.last_activity = _as_utc(row.last_activity)
        return ctx

    async def save_state(
        self,
        key: str,
        *,
        state: ConversationState,
        project_id: Optional[str],
        last_activity: datetime,
    ) -> None:
        async with self.session_factory() as s:
            row = await s.get(ConversationRow, key)
            if row is None:
                s.add(
                    ConversationRow(
                        key=key, state=state.value, project_id=project_id, last_activity=last_activity
                    )
                )
            else:
                row.state = state.value
                row.project_id = project_id
                row.last_activity = last_activity
            await s.commit()

    async def append_message(self, key: str, message: ConversationMessage) -> None:
        async with self.session_factory() as s:
            s.add(
                MessageRow(
                    context_key=key,
                    role=message.role.value,
                    content=message.content,
                    author_id=message.author_id,
                    author_name=message.author_name,
                    tool_call_id=message.tool_call_id,
                    tool_name=message.tool_name,
                    created_at=message.timestamp,
                )
            )
            await s.commit()

    async def search_messages(self, query: str, *, limit: int = 20) -> List[HistoryMatch]:
        async with self.session_factory() as s:
            res = await s.execute(
                select(MessageRow)
                .where(func.lower(MessageRow.content).contains(query.lower(), autoescape=True))
                .order_by(MessageRow.id.desc())
                .limit(limit)
            )
            rows = res.scalars().all()
        return [HistoryMatch(context_key=r.context_key, message=_message_from_row(r)) for r in rows]


@dataclass(frozen=True)
class SqlProjectRepository(ProjectRepository):
    """SQL implementation of ``ProjectRepository``."""

    session_factory: async_sessionmaker[AsyncSession]

    async def save(self, project: Project) -> None:
        server = project.resources.chat_server
        async with self.session_factory() as s:
            row = await s.get(ProjectRow, project.id)
            if row is None:
                row = ProjectRow(id=project.id, created_at=project.created_at)
                s.add(row)
            row.name = project.name
            row.status = project.status.value
            row.thread_id = project.thread_id
            row.chat_server_id = server.server_id if server is not None else None
            row.data = project.model_dump(mode="json")
            row.updated_at = project.updated_at
            await s.commit()

    async def get(self, project_id: str) -> Optional[Project]:
        async with self.session_factory() as s:
            row = await s.get(ProjectRow, project_id)
            if row is None:
                return None
            return Project.model_validate(row.data)

    async def find_by_thread(self, thread_id: str) -> Optional[Project]:
        async with self.session_factory() as s:
            res = await s.execute(select(ProjectRow).where(ProjectRow.thread_id == thread_id).limit(1))
            row = res.scalars().first()
            return Project.model_validate(row.data) if row is not None else None

    async def find_by_chat_server(self, server_id: str) -> Optional[Project]:
        async with self.session_factory() as s:
            res = await s.execute(select(ProjectRow).where(ProjectRow.chat_server_id == server_id).limit(1))
            row = res.scalars().first()
            return Project.model_validate(row.data) if row is not None else None

    async def list(self, *, status: Optional[ProjectStatus] = None) -> List[Project]:
        async with self.session_factory() as s:
            stmt = select(ProjectRow).order_by(ProjectRow.created_at.desc())
            if status is not None:
                stmt = stmt.where(ProjectRow.status == status.value)
            res = await s.execute(stmt)
            return [Project.model_validate(r.data) for r in res.scalars().all()]


@dataclass(frozen=True)
class SqlRepoBundle:
    """Convenience bundle for wiring SQL repositories."""

    conversations: SqlConversationRepository
    projects: SqlProjectRepository


def build_sql_repos(*, session_factory: async_sessionmaker[AsyncSession]) -> SqlRepoBundle:
    """Build all SQL repositories from a session factory."""
    return SqlRepoBundle(
        conversations=SqlConversationRepository(session_factory),
        projects=SqlProjectRepository(session_factory),
    )
