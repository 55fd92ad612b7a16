from __future__ import annotations

"""Conversation turn orchestration.

``ConversationService`` is the entry point a messaging front end calls once
per inbound message.

Workflow
--------

1. Acquire the lock of the message's conversation key. Turns on the same
   key run one at a time; turns on different keys run in parallel.
2. Let the ``ApprovalGate`` resolve a pending invocation. When it consumes
   the turn, its result is final.
3. Otherwise run the turn through ``AgentEngine``.

The service never raises to the front end: any unexpected exception becomes
the apology reply with outcome ``service_error``.
"""

import logging
import time
from dataclasses import dataclass

from ..core.monitoring import log_error, log_turn_completed, log_turn_started
from .approval.gate import ApprovalGate
from .context.conversation_store import ConversationStore
from .context.locks import KeyedLock
from .context.project_store import ProjectStore
from .runtime.engine import SERVICE_ERROR_REPLY, AgentEngine
from .schemas.domain import ConversationState, MessageContext, TurnOutcome, TurnResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationServiceDeps:
    """Dependency bundle for ``ConversationService``."""

    conversations: ConversationStore
    projects: ProjectStore
    gate: ApprovalGate
    engine: AgentEngine
    locks: KeyedLock


class ConversationService:
    """Serialize and run conversation turns."""

    def __init__(self, *, deps: ConversationServiceDeps) -> None:
        self._deps = deps

    @property
    def conversations(self) -> ConversationStore:
        return self._deps.conversations

    @property
    def projects(self) -> ProjectStore:
        return self._deps.projects

    async def handle_message(self, text: str, message: MessageContext) -> TurnResult:
        """Process one user message and return the turn's result."""
        key = message.context_key
        async with self._deps.locks.acquire(key):
            started = time.perf_counter()
            result = await self._run(text, message)
            log_turn_completed(
                key,
                outcome=result.outcome.value,
                state=result.state.value,
                iterations=result.iterations,
                tools_used=result.tools_used,
                duration_ms=(time.perf_counter() - started) * 1000.0,
            )
            return result

    async def _run(self, text: str, message: MessageContext) -> TurnResult:
        key = message.context_key
        try:
            pending = await self._deps.conversations.get_pending_invocation(key)
            log_turn_started(key, message.author_id, pending is not None)

            gated = await self._deps.gate.handle(text, message)
            if gated is not None:
                return gated
            return await self._deps.engine.run_turn(text, message)
        except Exception as exc:
            logger.exception("Turn failed for %s", key)
            log_error(type(exc).__name__, str(exc), {"context_key": key})
            return TurnResult(
                reply=SERVICE_ERROR_REPLY,
                tools_used=[],
                iterations=0,
                state=await self._safe_state(key),
                outcome=TurnOutcome.service_error,
            )

    async def _safe_state(self, key: str) -> ConversationState:
        try:
            return await self._deps.conversations.get_state(key)
        except Exception:
            logger.warning("Could not read state for %s after a failed turn", key)
            return ConversationState.idle
