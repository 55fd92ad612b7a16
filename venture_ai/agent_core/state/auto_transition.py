from __future__ import annotations

"""Post-turn auto-transition heuristic.

Looks at the tools invoked during a finished turn and proposes a trigger when
the work of the current mode looks done. The trigger is applied through the
transition table after the loop, never while it runs.
"""

from typing import FrozenSet, Iterable, Optional

from ..schemas.domain import ConversationState, ToolName, Trigger

CREATION_TOOLS: FrozenSet[ToolName] = frozenset(
    {
        ToolName.register_domain,
        ToolName.create_repository,
        ToolName.fork_repository,
        ToolName.create_server,
    }
)
RESEARCH_TOOLS: FrozenSet[ToolName] = frozenset(
    {
        ToolName.web_search,
        ToolName.deep_research,
        ToolName.market_research,
    }
)
DESTRUCTIVE_TOOLS: FrozenSet[ToolName] = frozenset(
    {
        ToolName.delete_repository,
        ToolName.delete_server,
        ToolName.cleanup_project,
    }
)

MIN_CREATION_TOOLS = 2
MIN_RESEARCH_TOOLS = 3


def _distinct(tools_used: Iterable[str], allowed: FrozenSet[ToolName]) -> set[str]:
    names = {t.value for t in allowed}
    return {str(getattr(t, "value", t)) for t in tools_used} & names


def should_auto_transition(
    state: ConversationState,
    tools_used: Iterable[str],
    reply: str,
) -> Optional[Trigger]:
    """
    Propose a trigger from the tools a turn invoked.

    Args:
        state: The state the turn ended in.
        tools_used: Tool names invoked during the turn (duplicates allowed).
        reply: The final reply text. Not used by the current rules.

    Returns:
        ``Trigger.task_complete`` when the mode's work looks finished, else None.
    """
    tools_used = list(tools_used)
    if state == ConversationState.creating:
        if len(_distinct(tools_used, CREATION_TOOLS)) >= MIN_CREATION_TOOLS:
            return Trigger.task_complete
    elif state == ConversationState.researching:
        if len(_distinct(tools_used, RESEARCH_TOOLS)) >= MIN_RESEARCH_TOOLS:
            return Trigger.task_complete
    elif state == ConversationState.cleanup:
        if _distinct(tools_used, DESTRUCTIVE_TOOLS):
            return Trigger.task_complete
    return None
