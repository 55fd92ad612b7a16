from __future__ import annotations

"""Runtime dependency bundle and LangGraph state types.

- ``AgentDeps`` collects the stores, catalog, executor and collaborators the
  engine needs.
- ``_LoopState`` is the mutable state passed between LangGraph nodes for one
  turn.
"""

from dataclasses import dataclass
from typing import Any, List, NotRequired, Optional, Required, TypedDict

from ..context.conversation_store import ConversationStore
from ..context.project_store import ProjectStore
from ..schemas.domain import MessageContext
from ..services.reasoning import ChatMessage, ReasoningService, ToolCallRequest, ToolSpec
from ..state.router import IntentRouter
from ..tools.executor import ToolExecutor
from ..tools.registry import ToolCatalog


@dataclass(frozen=True)
class AgentDeps:
    """Dependency bundle for ``AgentEngine``.

    ``model`` overrides the reasoning service's default model when set.
    """

    conversations: ConversationStore
    projects: ProjectStore
    catalog: ToolCatalog
    executor: ToolExecutor
    reasoning: ReasoningService
    router: IntentRouter
    model: Optional[Any] = None


class _LoopState(TypedDict):
    """Mutable LangGraph state for a single turn.

    Required keys:

    - ``message``: origin of the user message.
    - ``state``: conversation state the loop runs in (value of ``ConversationState``).
    - ``messages``: reasoning history for this turn (system prompt first).
    - ``tools``: function definitions offered to the reasoning service.
    - ``iteration``: reasoning calls made so far.
    - ``tools_used``: names of dispatched tools, in call order, duplicates kept.

    Optional keys:

    - ``reply`` / ``outcome``: set once the loop has a terminal result.
    - ``_tool_calls``: calls returned by the last reasoning call, consumed by ``act``.
    """

    message: Required[MessageContext]
    state: Required[str]
    messages: Required[List[ChatMessage]]
    tools: Required[List[ToolSpec]]
    iteration: Required[int]
    tools_used: Required[List[str]]
    reply: NotRequired[str]
    outcome: NotRequired[str]
    _tool_calls: NotRequired[List[ToolCallRequest]]
