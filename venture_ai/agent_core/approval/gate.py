from __future__ import annotations

"""Approval gate for the per-turn pending invocation.

When a conversation has a pending invocation, the gate classifies the new
user message before anything else happens in the turn:

- approval above the confidence threshold: the pending call is executed with
  the per-turn override, the invocation is cleared and the turn ends;
- rejection above the threshold: the invocation is cleared, the action is
  cancelled and the turn ends;
- anything else: the gate does nothing. The pending invocation stays exactly
  as it was and the turn continues through routing and the agent loop.

A classifier error or timeout counts as "anything else".
"""

import asyncio
import json
import logging
from typing import Optional

from ..context.conversation_store import ConversationStore
from ..context.project_store import ProjectStore
from ..policy.global_policy import GlobalPolicy
from ..schemas.domain import (
    MessageContext,
    MessageRole,
    PendingInvocation,
    TurnOutcome,
    TurnResult,
)
from ..services.classifier import ApprovalVerdict, IntentClassifier
from ..tools.executor import ToolExecutor

logger = logging.getLogger(__name__)

CANCELLED_REPLY = "No problem, I've cancelled that. What would you like to do instead?"
CANCELLED_HISTORY = "Understood, I've cancelled that action."
DEFAULT_DONE = "Action completed successfully."


class ApprovalGate:
    def __init__(
        self,
        *,
        classifier: IntentClassifier,
        policy: GlobalPolicy,
        conversations: ConversationStore,
        projects: ProjectStore,
        executor: ToolExecutor,
    ) -> None:
        self._classifier = classifier
        self._policy = policy
        self._conversations = conversations
        self._projects = projects
        self._executor = executor

    async def _classify(self, text: str) -> ApprovalVerdict:
        timeout = self._policy.config.timeout_policy.classifier_seconds
        try:
            verdict = await asyncio.wait_for(self._classifier.classify_approval(text), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Approval classifier timed out after %ss", timeout)
            return ApprovalVerdict.no_signal()
        except Exception as exc:
            logger.warning("Approval classifier failed: %s", exc)
            return ApprovalVerdict.no_signal()
        if not isinstance(verdict, ApprovalVerdict):
            return ApprovalVerdict.no_signal()
        return verdict

    async def handle(self, text: str, message: MessageContext) -> Optional[TurnResult]:
        """
        Resolve the pending invocation of ``message``'s conversation, if the reply allows it.

        Args:
            text: The user's message for this turn.
            message: Origin of the message.

        Returns:
            The final ``TurnResult`` when the gate consumed the turn, or None
            when the turn must continue through the agent loop.
        """
        key = message.context_key
        pending = await self._conversations.get_pending_invocation(key)
        if pending is None:
            return None

        verdict = await self._classify(text)
        if verdict.is_approval and self._policy.is_confident(verdict.confidence):
            return await self._approve(text, message, pending)
        if verdict.is_rejection and self._policy.is_confident(verdict.confidence):
            return await self._reject(text, message, pending)

        logger.info(
            "Reply on %s is neither approval nor rejection (confidence=%.2f); %s stays pending",
            key,
            verdict.confidence,
            pending.tool_name.value,
        )
        return None

    async def _approve(self, text: str, message: MessageContext, pending: PendingInvocation) -> TurnResult:
        key = message.context_key
        await self._conversations.clear_pending_invocation(key)
        project_id = await self._conversations.get_project_id(key)
        logger.info("Approved %s on %s by %s", pending.tool_name.value, key, message.author_id)

        executed = await self._executor.execute_approved(pending, message=message, project_id=project_id)
        result = executed.result

        if result.success:
            await self._record_standing_approval(pending, message, project_id)

        await self._conversations.add_message(
            key, MessageRole.user, text, author_id=message.author_id, author_name=message.author_name
        )
        if result.success:
            history = f"Approved! {json.dumps(result.data, default=str)}"
            data_message = result.data.get("message") if isinstance(result.data, dict) else None
            reply = f"Done! {data_message or DEFAULT_DONE}"
        else:
            history = f"Failed: {result.error}"
            reply = f"Sorry, that failed: {result.error}"
        await self._conversations.add_message(key, MessageRole.assistant, history)

        return TurnResult(
            reply=reply,
            tools_used=[pending.tool_name.value],
            iterations=1,
            state=await self._conversations.get_state(key),
            outcome=TurnOutcome.approval_granted,
        )

    async def _reject(self, text: str, message: MessageContext, pending: PendingInvocation) -> TurnResult:
        key = message.context_key
        await self._conversations.clear_pending_invocation(key)
        logger.info("Rejected %s on %s by %s", pending.tool_name.value, key, message.author_id)

        await self._conversations.add_message(
            key, MessageRole.user, text, author_id=message.author_id, author_name=message.author_name
        )
        await self._conversations.add_message(key, MessageRole.assistant, CANCELLED_HISTORY)
        return TurnResult(
            reply=CANCELLED_REPLY,
            tools_used=[],
            iterations=1,
            state=await self._conversations.get_state(key),
            outcome=TurnOutcome.approval_rejected,
        )

    async def _record_standing_approval(
        self, pending: PendingInvocation, message: MessageContext, project_id: Optional[str]
    ) -> None:
        """An approved call of a categorised tool approves its category for the project."""
        catalog = self._executor.catalog
        if not catalog.has(pending.tool_name):
            return
        category = getattr(catalog.get(pending.tool_name), "category", None)
        target = pending.tool_args.get("project_id") or project_id
        if category is None or not target:
            return
        if await self._projects.get_project(str(target)) is None:
            return
        await self._projects.set_standing_approval(str(target), category, approved_by=message.author_id)
