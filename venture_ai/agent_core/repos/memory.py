from __future__ import annotations

"""In-memory repository implementations.

Used by tests and by single-process deployments that do not need history to
survive a restart. Stored objects are deep-copied on the way in and out so
callers can never mutate repository state by accident.
"""

from datetime import datetime
from typing import Dict, List, Optional

from ..schemas.domain import (
    ConversationContext,
    ConversationMessage,
    ConversationState,
    HistoryMatch,
    Project,
    ProjectStatus,
)
from .interfaces import ConversationRepository, ProjectRepository


class InMemoryConversationRepository(ConversationRepository):
    def __init__(self) -> None:
        self._states: Dict[str, ConversationContext] = {}
        self._messages: Dict[str, List[ConversationMessage]] = {}

    async def load(self, key: str, *, message_limit: int) -> Optional[ConversationContext]:
        ctx = self._states.get(key)
        messages = self._messages.get(key)
        if ctx is None and messages is None:
            return None
        out = ctx.model_copy(deep=True) if ctx is not None else ConversationContext(key=key)
        tail = (messages or [])[-message_limit:] if message_limit > 0 else []
        out.messages = [m.model_copy() for m in tail]
        return out

    async def save_state(
        self,
        key: str,
        *,
        state: ConversationState,
        project_id: Optional[str],
        last_activity: datetime,
    ) -> None:
        self._states[key] = ConversationContext(
            key=key, state=state, project_id=project_id, last_activity=last_activity
        )

    async def append_message(self, key: str, message: ConversationMessage) -> None:
        self._messages.setdefault(key, []).append(message.model_copy())

    async def search_messages(self, query: str, *, limit: int = 20) -> List[HistoryMatch]:
        needle = query.lower()
        matches: List[HistoryMatch] = []
        for key, messages in self._messages.items():
            for m in messages:
                if needle in m.content.lower():
                    matches.append(HistoryMatch(context_key=key, message=m.model_copy()))
        matches.sort(key=lambda h: h.message.timestamp, reverse=True)
        return matches[:limit]


class InMemoryProjectRepository(ProjectRepository):
    def __init__(self) -> None:
        self._projects: Dict[str, Project] = {}

    async def save(self, project: Project) -> None:
        self._projects[project.id] = project.model_copy(deep=True)

    async def get(self, project_id: str) -> Optional[Project]:
        p = self._projects.get(project_id)
        return p.model_copy(deep=True) if p is not None else None

    async def find_by_thread(self, thread_id: str) -> Optional[Project]:
        for p in self._projects.values():
            if p.thread_id == thread_id:
                return p.model_copy(deep=True)
        return None

    async def find_by_chat_server(self, server_id: str) -> Optional[Project]:
        for p in self._projects.values():
            server = p.resources.chat_server
            if server is not None and server.server_id == server_id:
                return p.model_copy(deep=True)
        return None

    async def list(self, *, status: Optional[ProjectStatus] = None) -> List[Project]:
        items = [p for p in self._projects.values() if status is None or p.status == status]
        items.sort(key=lambda p: p.created_at, reverse=True)
        return [p.model_copy(deep=True) for p in items]
