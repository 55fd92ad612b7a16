from __future__ import annotations

"""Backend tools that need approval before they run.

- ``ProvisioningTool`` creates a billable resource for a project (a domain, a
  repository, a chat server). It runs when the project holds a standing
  approval for the tool's category or the user approved this exact call,
  and links the created resource to the project afterwards.
- ``DestructiveTool`` deletes or disconnects something. Standing approvals
  never cover it; only the per-turn override does.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from ..approval.standing import require_standing_approval, require_turn_approval
from ..schemas.domain import ToolResult
from .backends import DelegatingTool
from .base import ToolArgs, ToolContext, fail
from .project import NO_PROJECT, resolve_project_id

logger = logging.getLogger(__name__)

PromptFn = Callable[[Any], str]
LinkFn = Callable[[ToolContext, str, Dict[str, Any], Any], Awaitable[None]]


def _with_message(result: ToolResult, message: str) -> ToolResult:
    if result.success and isinstance(result.data, dict) and not result.data.get("message"):
        return result.model_copy(update={"data": {**result.data, "message": message}})
    return result


@dataclass(frozen=True)
class ProvisioningTool(DelegatingTool):
    """Delegating tool behind a standing approval on the project's ``category``.

    ``prompt(args)`` phrases the approval request, ``done(args)`` the success
    message, and ``link(ctx, project_id, data, args)`` records the created
    resource on the project.
    """

    prompt: Optional[PromptFn] = None
    done: Optional[PromptFn] = None
    link: Optional[LinkFn] = None

    async def execute(self, ctx: ToolContext, *, args: ToolArgs) -> ToolResult:
        project_id = resolve_project_id(ctx, args)
        if not project_id:
            return fail(NO_PROJECT)
        project = await ctx.deps.projects.get_project(project_id)
        if project is None:
            return fail(f"Project {project_id} not found")

        if self.category is not None:
            prompt = self.prompt(args) if self.prompt is not None else f"I'd like to run {self.name.value}. Do you approve?"
            gated = await require_standing_approval(ctx, category=self.category, project_id=project.id, prompt=prompt)
            if gated is not None:
                return gated

        result = await self.call_backend(ctx, args)
        if result.success and self.link is not None:
            await self.link(ctx, project.id, result.data or {}, args)
            logger.info("Linked %s result to project %s", self.name.value, project.id)
        if self.done is not None:
            result = _with_message(result, self.done(args))
        return result


@dataclass(frozen=True)
class DestructiveTool(DelegatingTool):
    """Delegating tool that only runs with the per-turn override."""

    prompt: Optional[PromptFn] = None
    done: Optional[PromptFn] = None
    destructive: bool = True

    async def execute(self, ctx: ToolContext, *, args: ToolArgs) -> ToolResult:
        prompt = self.prompt(args) if self.prompt is not None else f"I'm about to run {self.name.value}. Do you approve?"
        gated = require_turn_approval(ctx, prompt)
        if gated is not None:
            return gated
        result = await self.call_backend(ctx, args)
        if self.done is not None:
            result = _with_message(result, self.done(args))
        return result
