from __future__ import annotations

"""SQLAlchemy ORM models for conversation and project persistence.

These ORM models define the SQL schema used by the SQL repository
implementation in ``venture_ai.agent_core.repos.sql``.

Design
------

- Conversations store the current state and linked project per context key.
- Messages form an append-only log per context key, ordered by an
  auto-incrementing id.
- Projects are stored as a JSON document plus the few columns that are
  queried directly (status, thread id, chat server id).

Table names are prefixed with ``va_`` to avoid collisions in shared databases.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class ConversationRow(Base):
    """Row model for ``va_conversations``: one row per context key."""

    __tablename__ = "va_conversations"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    state: Mapped[str] = mapped_column(String(32))
    project_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    last_activity: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class MessageRow(Base):
    """Row model for ``va_messages``.

    Append-only; ``tool_call_id``/``tool_name`` link tool results to the call
    that produced them.
    """

    __tablename__ = "va_messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    context_key: Mapped[str] = mapped_column(String(255), index=True)

    role: Mapped[str] = mapped_column(String(16))
    content: Mapped[str] = mapped_column(Text)

    author_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    author_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    tool_call_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    tool_name: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class ProjectRow(Base):
    """Row model for ``va_projects``.

    ``data`` holds the full serialized ``Project``; the other columns are
    denormalized copies used for lookups.
    """

    __tablename__ = "va_projects"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(32), index=True)

    thread_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    chat_server_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)

    data: Mapped[Dict[str, Any]] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
