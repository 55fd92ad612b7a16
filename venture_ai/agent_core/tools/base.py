from __future__ import annotations

"""Tool protocol and execution data models.

A tool is the concrete execution unit behind a function the reasoning service
may call.

The runtime engine resolves the requested name through the ``ToolCatalog``,
validates the JSON arguments against the tool's ``input_model`` and executes
the implementation with a ``ToolContext``.

Tools should:

- return structured data in ``ToolResult.data`` or an ``error`` string,
- never raise for expected failures (a missing backend, an unknown project),
- report ``needs_approval`` instead of executing a costly or destructive
  action the user has not approved yet.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol, Type

from pydantic import BaseModel, ConfigDict

from ..schemas.domain import ResourceCategory, ToolName, ToolResult


class ToolArgs(BaseModel):
    """Base class for tool input models.

    Unknown keys sent by the model are ignored rather than rejected.
    """

    model_config = ConfigDict(extra="ignore")


class NoArgs(ToolArgs):
    pass


@dataclass(frozen=True)
class ToolContext:
    """Execution context passed to tool implementations.

    Attributes
    ----------
    author_id / author_name:
        The user whose message triggered the call.
    context_key:
        Conversation the call belongs to.
    project_id:
        Project linked to the conversation, if any.
    approved:
        Per-turn override: the user explicitly approved this exact call.
    deps:
        ``ToolDeps`` bundle (stores and external backends).
    """

    author_id: str
    author_name: str
    context_key: str
    project_id: Optional[str]
    approved: bool
    deps: Any
    server_id: Optional[str] = None


class Tool(Protocol):
    """Protocol for tool implementations."""

    name: ToolName
    description: str
    input_model: Type[ToolArgs]
    category: Optional[ResourceCategory]
    destructive: bool

    async def execute(self, ctx: ToolContext, *, args: ToolArgs) -> ToolResult: ...


ToolFn = Callable[[ToolContext, Any], Awaitable[ToolResult]]


@dataclass(frozen=True)
class FunctionTool:
    """Tool backed by a plain async function ``fn(ctx, args)``."""

    name: ToolName
    description: str
    input_model: Type[ToolArgs]
    fn: ToolFn
    category: Optional[ResourceCategory] = None
    destructive: bool = False

    async def execute(self, ctx: ToolContext, *, args: ToolArgs) -> ToolResult:
        return await self.fn(ctx, args)


def ok(data: Any = None) -> ToolResult:
    return ToolResult(success=True, data=data)


def fail(error: str) -> ToolResult:
    return ToolResult(success=False, error=error)
