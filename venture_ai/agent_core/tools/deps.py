from __future__ import annotations

from dataclasses import dataclass, field

from ..context.conversation_store import ConversationStore
from ..context.project_store import ProjectStore
from .backends import ToolBackends


@dataclass(frozen=True)
class ToolDeps:
    """Dependency bundle handed to tools as ``ToolContext.deps``."""

    projects: ProjectStore
    conversations: ConversationStore
    backends: ToolBackends = field(default_factory=ToolBackends)
