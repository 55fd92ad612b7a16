from __future__ import annotations

"""Tool call execution.

``ToolExecutor`` turns one tool call requested by the reasoning service into
a ``ToolResult``. Every step that can go wrong is reported as a failed
result, never as an exception:

1. parse the JSON argument string;
2. resolve the name against the closed catalog;
3. ask ``GlobalPolicy.decide`` whether the tool may run in the current state
   (skipped for an invocation the user has just approved);
4. check argument size and validate against the tool's input model;
5. execute under the configured timeout.

Only calls that reach step 5 are reported as dispatched.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..policy.global_policy import GlobalPolicy
from ..schemas.domain import ConversationState, MessageContext, PendingInvocation, ToolName, ToolResult
from .base import ToolContext, fail
from .deps import ToolDeps
from .registry import ToolCatalog, UnknownToolError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutedCall:
    """Outcome of one requested tool call.

    Attributes:
        tool_name: Resolved tool name, or None when the name was unknown.
        args: Parsed arguments (empty when parsing failed).
        result: The result fed back to the reasoning service.
        dispatched: True when the tool implementation was actually invoked.
    """

    tool_name: Optional[ToolName]
    args: Dict[str, Any]
    result: ToolResult
    dispatched: bool = False


def parse_arguments(raw: Optional[str]) -> Dict[str, Any]:
    """Parse a JSON-encoded argument payload; raises ValueError when it is not a JSON object."""
    if raw is None or not raw.strip():
        return {}
    parsed = json.loads(raw)
    if not isinstance(parsed, dict):
        raise ValueError("tool arguments must be a JSON object")
    return parsed


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        parts.append(f"{loc}: {err.get('msg')}")
    return "invalid arguments: " + "; ".join(parts)


class ToolExecutor:
    def __init__(self, *, catalog: ToolCatalog, policy: GlobalPolicy, deps: ToolDeps) -> None:
        self._catalog = catalog
        self._policy = policy
        self._deps = deps

    @property
    def catalog(self) -> ToolCatalog:
        return self._catalog

    async def execute_call(
        self,
        raw_name: str,
        raw_arguments: Optional[str],
        *,
        state: ConversationState,
        message: MessageContext,
        project_id: Optional[str],
    ) -> ExecutedCall:
        """Execute a call requested by the reasoning service in ``state``."""
        try:
            args = parse_arguments(raw_arguments)
        except ValueError as exc:
            logger.warning("Malformed arguments for %s: %s", raw_name, exc)
            return ExecutedCall(tool_name=None, args={}, result=fail(f"malformed arguments: {exc}"))

        try:
            name = self._catalog.resolve(raw_name)
        except UnknownToolError as exc:
            logger.warning("Reasoning service requested unknown tool %s", raw_name)
            return ExecutedCall(tool_name=None, args=args, result=fail(str(exc)))

        decision = self._policy.decide(state, name)
        if decision.block:
            logger.warning("Refused %s in %s: %s", name.value, state.value, decision.block_reason)
            return ExecutedCall(tool_name=name, args=args, result=fail(decision.block_reason or "tool refused"))

        return await self._run(name, args, message=message, project_id=project_id, approved=False)

    async def execute_approved(
        self,
        invocation: PendingInvocation,
        *,
        message: MessageContext,
        project_id: Optional[str],
    ) -> ExecutedCall:
        """Execute a pending invocation the user approved, with the per-turn override set.

        The state guard is not re-applied: the call was reachable when it was
        requested. The deployment deny list still is.
        """
        name = invocation.tool_name
        if name in self._policy.config.tool_policy.blocked_tools:
            return ExecutedCall(tool_name=name, args=dict(invocation.tool_args), result=fail(f"tool blocked: {name.value}"))
        if not self._catalog.has(name):
            return ExecutedCall(tool_name=name, args=dict(invocation.tool_args), result=fail(f"unknown tool: {name.value}"))
        return await self._run(name, dict(invocation.tool_args), message=message, project_id=project_id, approved=True)

    async def _run(
        self,
        name: ToolName,
        args: Dict[str, Any],
        *,
        message: MessageContext,
        project_id: Optional[str],
        approved: bool,
    ) -> ExecutedCall:
        err = self._policy.validate_tool_args(args)
        if err is not None:
            return ExecutedCall(tool_name=name, args=args, result=fail(err))

        tool = self._catalog.get(name)
        try:
            parsed = tool.input_model.model_validate(args)
        except ValidationError as exc:
            return ExecutedCall(tool_name=name, args=args, result=fail(_validation_message(exc)))

        ctx = ToolContext(
            author_id=message.author_id,
            author_name=message.author_name,
            context_key=message.context_key,
            project_id=project_id,
            approved=approved,
            deps=self._deps,
            server_id=message.server_id,
        )
        logger.info(
            "Executing %s (approved=%s) args=%s",
            name.value,
            approved,
            self._policy.redact(json.dumps(args, default=str)),
        )
        timeout = self._policy.config.timeout_policy.tool_seconds
        try:
            result = await asyncio.wait_for(tool.execute(ctx, args=parsed), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Tool %s timed out after %ss", name.value, timeout)
            result = fail(f"{name.value} timed out")
        except Exception as exc:
            logger.exception("Tool %s raised", name.value)
            result = fail(f"{name.value} failed: {exc}")
        return ExecutedCall(tool_name=name, args=args, result=result, dispatched=True)
