from __future__ import annotations

"""Bounded in-memory conversation store.

``ConversationStore`` keeps recently active ``ConversationContext`` objects in
an LRU cache with a time-to-live, backed by a ``ConversationRepository``:

- a miss (or an expired entry) rehydrates the context from the repository by
  key;
- state changes and messages are written through to the repository;
- pending invocations live in a separate per-key map that eviction and
  expiry never touch; they are not persisted.

The store does not serialize access itself. Callers hold the per-key lock
(``KeyedLock``) for the duration of a turn.
"""

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from ..repos.interfaces import ConversationRepository
from ..schemas.domain import (
    ConversationContext,
    ConversationMessage,
    ConversationState,
    HistoryMatch,
    MessageRole,
    PendingInvocation,
)

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _Entry:
    context: ConversationContext
    touched: float


class ConversationStore:
    """Cache of conversation contexts keyed by thread or channel id.

    Attributes:
        max_contexts: Maximum number of cached contexts (least recently used is evicted).
        ttl_seconds: Idle time after which a cached context is reloaded from the repository.
        max_messages: Messages retained per context.
    """

    def __init__(
        self,
        repo: ConversationRepository,
        *,
        max_contexts: int = 200,
        ttl_seconds: float = 3600.0,
        max_messages: int = 50,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._repo = repo
        self._cache: "OrderedDict[str, _Entry]" = OrderedDict()
        self._pending: Dict[str, PendingInvocation] = {}
        self.max_contexts = max_contexts
        self.ttl_seconds = ttl_seconds
        self.max_messages = max_messages
        self._clock = clock

    def size(self) -> int:
        """Get the current cache size."""
        return len(self._cache)

    def _cached(self, key: str) -> Optional[ConversationContext]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        now = self._clock()
        if now - entry.touched > self.ttl_seconds:
            del self._cache[key]
            return None
        entry.touched = now
        self._cache.move_to_end(key)
        return entry.context

    def _put(self, key: str, context: ConversationContext) -> None:
        self._cache[key] = _Entry(context=context, touched=self._clock())
        self._cache.move_to_end(key)
        while len(self._cache) > self.max_contexts:
            evicted, _ = self._cache.popitem(last=False)
            logger.debug("Evicted conversation %s from cache", evicted)

    async def get_context(self, key: str) -> ConversationContext:
        """Return the cached context for ``key``, loading or creating it on a miss."""
        ctx = self._cached(key)
        if ctx is not None:
            return ctx
        loaded = await self._repo.load(key, message_limit=self.max_messages)
        # Another task may have populated the entry while we were loading.
        ctx = self._cached(key)
        if ctx is not None:
            return ctx
        ctx = loaded if loaded is not None else ConversationContext(key=key)
        ctx.pending_invocation = self._pending.get(key)
        self._put(key, ctx)
        return ctx

    async def get_state(self, key: str) -> ConversationState:
        return (await self.get_context(key)).state

    async def set_state(
        self,
        key: str,
        state: ConversationState,
        project_id: Optional[str] = None,
    ) -> None:
        """Persist a new state; ``project_id`` (when given) also links the context to a project."""
        ctx = await self.get_context(key)
        ctx.state = state
        if project_id is not None:
            ctx.project_id = project_id
        ctx.last_activity = _utc_now()
        await self._save(ctx)

    async def get_project_id(self, key: str) -> Optional[str]:
        return (await self.get_context(key)).project_id

    async def set_project_id(self, key: str, project_id: Optional[str]) -> None:
        ctx = await self.get_context(key)
        ctx.project_id = project_id
        ctx.last_activity = _utc_now()
        await self._save(ctx)

    async def add_message(
        self,
        key: str,
        role: MessageRole,
        content: str,
        *,
        author_id: Optional[str] = None,
        author_name: Optional[str] = None,
        tool_call_id: Optional[str] = None,
        tool_name: Optional[str] = None,
    ) -> ConversationMessage:
        """Append a message to the history, trimming it to ``max_messages``."""
        ctx = await self.get_context(key)
        message = ConversationMessage(
            role=role,
            content=content,
            author_id=author_id,
            author_name=author_name,
            tool_call_id=tool_call_id,
            tool_name=tool_name,
        )
        ctx.messages.append(message)
        if len(ctx.messages) > self.max_messages:
            del ctx.messages[: len(ctx.messages) - self.max_messages]
        ctx.last_activity = message.timestamp
        await self._repo.append_message(key, message)
        await self._save(ctx)
        return message

    async def get_messages(self, key: str, limit: Optional[int] = None) -> List[ConversationMessage]:
        messages = list((await self.get_context(key)).messages)
        if limit is not None:
            messages = messages[-limit:] if limit > 0 else []
        return messages

    async def get_pending_invocation(self, key: str) -> Optional[PendingInvocation]:
        return self._pending.get(key)

    async def set_pending_invocation(self, key: str, invocation: PendingInvocation) -> None:
        """Store ``invocation`` as the single pending invocation, replacing any previous one."""
        previous = self._pending.get(key)
        if previous is not None:
            logger.info(
                "Replacing pending invocation %s with %s for %s",
                previous.tool_name.value,
                invocation.tool_name.value,
                key,
            )
        self._pending[key] = invocation
        (await self.get_context(key)).pending_invocation = invocation

    async def clear_pending_invocation(self, key: str) -> Optional[PendingInvocation]:
        """Remove and return the pending invocation, if any."""
        pending = self._pending.pop(key, None)
        (await self.get_context(key)).pending_invocation = None
        return pending

    async def search_history(self, query: str, *, limit: int = 20) -> List[HistoryMatch]:
        return await self._repo.search_messages(query, limit=limit)

    async def _save(self, ctx: ConversationContext) -> None:
        await self._repo.save_state(
            ctx.key, state=ctx.state, project_id=ctx.project_id, last_activity=ctx.last_activity
        )
