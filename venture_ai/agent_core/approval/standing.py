from __future__ import annotations

"""Approval checks used inside tool implementations.

Two kinds of approval can let a costly or destructive tool run:

- the per-turn override (``ToolContext.approved``), set only when the user
  approved this exact pending invocation;
- a standing approval on the linked project for the tool's resource
  category, recorded once and honoured for the lifetime of the project.

Each helper returns ``None`` when the tool may proceed, or the
``needs_approval`` result the tool must return instead of executing.
"""

from typing import Optional

from ..schemas.domain import ResourceCategory, ToolResult
from ..tools.base import ToolContext

DEFAULT_APPROVAL_PROMPT = "I need your approval to proceed."


def needs_approval(prompt: Optional[str]) -> ToolResult:
    return ToolResult(success=False, needs_approval=True, approval_prompt=prompt or DEFAULT_APPROVAL_PROMPT)


def require_turn_approval(ctx: ToolContext, prompt: str) -> Optional[ToolResult]:
    """Gate for destructive actions: only the per-turn override lets them run."""
    if ctx.approved:
        return None
    return needs_approval(prompt)


async def require_standing_approval(
    ctx: ToolContext,
    *,
    category: ResourceCategory,
    project_id: str,
    prompt: str,
) -> Optional[ToolResult]:
    """Gate for costly actions: the per-turn override or a standing approval lets them run."""
    if ctx.approved:
        return None
    if await ctx.deps.projects.has_standing_approval(project_id, category):
        return None
    return needs_approval(prompt)
