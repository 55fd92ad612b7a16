from __future__ import annotations

"""External backends behind the domain, repository, chat, payments and research tools.

The agent core never talks to a registrar, code host or payments API itself.
Deployments inject backend objects through ``ToolBackends``; each tool
delegates to the backend method with the same name as the tool, passing the
validated arguments as keyword arguments.

A missing backend (or a backend lacking the method) is reported as a failed
tool result, ``"<group> backend not configured"``, never as an exception.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional, Protocol, Type

from ..schemas.domain import ResourceCategory, ToolName, ToolResult
from .base import ToolArgs, ToolContext, fail, ok

logger = logging.getLogger(__name__)


class DomainRegistrar(Protocol):
    async def search_domains(self, *, keyword: str, tlds: list[str]) -> Dict[str, Any]: ...

    async def register_domain(self, *, domain: str, years: int) -> Dict[str, Any]: ...


class RepositoryHost(Protocol):
    async def create_repository(self, *, name: str, description: Optional[str], private: bool) -> Dict[str, Any]: ...

    async def delete_repository(self, *, owner: str, name: str) -> Dict[str, Any]: ...


class ChatPlatform(Protocol):
    async def create_server(self, *, name: str) -> Dict[str, Any]: ...

    async def delete_server(self, *, server_id: str) -> Dict[str, Any]: ...


class PaymentsProvider(Protocol):
    async def list_payment_accounts(self) -> Dict[str, Any]: ...


class ResearchProvider(Protocol):
    async def web_search(self, *, query: str, max_results: int, search_depth: str) -> Dict[str, Any]: ...

    async def extract_content(self, *, urls: list[str]) -> Dict[str, Any]: ...


@dataclass(frozen=True)
class ToolBackends:
    """Optional external backends; any of them may be absent.

    The Protocols above name the core operations; backends implement one
    method per tool of their group (``list_domains``, ``get_balance``, ...).
    """

    domains: Optional[DomainRegistrar] = None
    repositories: Optional[RepositoryHost] = None
    chat: Optional[ChatPlatform] = None
    payments: Optional[PaymentsProvider] = None
    research: Optional[ResearchProvider] = None


def resolve_backend_call(backends: Optional[ToolBackends], group: str, operation: str) -> Any:
    """Return the bound backend method or None when it is not configured."""
    svc = getattr(backends, group, None) if backends is not None else None
    if svc is None:
        return None
    return getattr(svc, operation, None)


def as_data(result: Any) -> Dict[str, Any]:
    if isinstance(result, dict):
        return result
    return {"result": result}


@dataclass(frozen=True)
class DelegatingTool:
    """Tool that forwards validated arguments to ``backends.<group>.<tool name>``.

    Fields listed in ``local_fields`` are consumed by the tool itself and not
    forwarded (for instance ``project_id``).
    """

    name: ToolName
    description: str
    input_model: Type[ToolArgs]
    group: str
    category: Optional[ResourceCategory] = None
    destructive: bool = False
    local_fields: FrozenSet[str] = field(default_factory=lambda: frozenset({"project_id"}))

    def backend_kwargs(self, args: ToolArgs) -> Dict[str, Any]:
        return args.model_dump(exclude=set(self.local_fields))

    async def call_backend(self, ctx: ToolContext, args: ToolArgs) -> ToolResult:
        fn = resolve_backend_call(getattr(ctx.deps, "backends", None), self.group, self.name.value)
        if fn is None:
            return fail(f"{self.group} backend not configured")
        result = await fn(**self.backend_kwargs(args))
        return ok(as_data(result))

    async def execute(self, ctx: ToolContext, *, args: ToolArgs) -> ToolResult:
        return await self.call_backend(ctx, args)
