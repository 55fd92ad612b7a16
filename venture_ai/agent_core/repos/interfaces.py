from __future__ import annotations

"""Repository interface contracts.

The stores depend on these Protocols instead of concrete persistence
implementations.

Contract guidelines
-------------------

- All methods are async.
- Implementations must not leak sessions/transactions to callers.
- Writes are upserts where reasonable (saving a conversation state for a new
  key creates it).
- The message log is append-only.
"""

from datetime import datetime
from typing import List, Optional, Protocol

from ..schemas.domain import (
    ConversationContext,
    ConversationMessage,
    ConversationState,
    HistoryMatch,
    Project,
    ProjectStatus,
)


class ConversationRepository(Protocol):
    """Persist conversation state and message history by context key."""

    async def load(self, key: str, *, message_limit: int) -> Optional[ConversationContext]:
        """
        Load a conversation with its most recent messages.

        Args:
            key: Context identity key (thread id or channel id).
            message_limit: Maximum number of trailing messages to return.

        Returns:
            The stored conversation (without any pending invocation), or None.
        """
        ...

    async def save_state(
        self,
        key: str,
        *,
        state: ConversationState,
        project_id: Optional[str],
        last_activity: datetime,
    ) -> None:
        """Create or update the state row for ``key``."""
        ...

    async def append_message(self, key: str, message: ConversationMessage) -> None:
        """Append a message to the history of ``key``."""
        ...

    async def search_messages(self, query: str, *, limit: int = 20) -> List[HistoryMatch]:
        """
        Case-insensitive substring search over every stored message.

        Returns:
            Newest matches first.
        """
        ...


class ProjectRepository(Protocol):
    """Persist long-lived projects."""

    async def save(self, project: Project) -> None:
        """Insert or replace a project."""
        ...

    async def get(self, project_id: str) -> Optional[Project]:
        ...

    async def find_by_thread(self, thread_id: str) -> Optional[Project]:
        ...

    async def find_by_chat_server(self, server_id: str) -> Optional[Project]:
        ...

    async def list(self, *, status: Optional[ProjectStatus] = None) -> List[Project]:
        """List projects, newest first, optionally filtered by status."""
        ...
