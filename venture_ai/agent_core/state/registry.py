from __future__ import annotations

"""State registry.

Static table describing every ``ConversationState``:

- the tools reachable from it (the only capability restriction the agent
  loop applies),
- human-readable exit conditions and hints (display only, never evaluated),
- the mode-specific addition to the system prompt.

An empty tool set means "no restriction": the whole catalog is offered.

``validate_state_registry`` is run once at startup against the tool catalog
so that a typo in a tool set fails fast instead of silently hiding a tool.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Protocol, Tuple

from ..schemas.domain import ConversationState, ToolName
from .machine import TRANSITIONS, TransitionRule, WILDCARD, valid_transitions

logger = logging.getLogger(__name__)

INITIAL_STATE = ConversationState.idle


class StateRegistryError(ValueError):
    """Raised when the state registry is inconsistent with the tool catalog or transition table."""

    def __init__(self, problems: List[str]) -> None:
        self.problems = list(problems)
        super().__init__("invalid state registry: " + "; ".join(self.problems))


@dataclass(frozen=True)
class StateDefinition:
    name: ConversationState
    description: str
    tools: FrozenSet[ToolName] = field(default_factory=frozenset)
    exit_conditions: Tuple[str, ...] = ()
    prompt_addition: str = ""
    hints: Tuple[str, ...] = ()


_N = ToolName

STATE_REGISTRY: Dict[ConversationState, StateDefinition] = {
    ConversationState.idle: StateDefinition(
        name=ConversationState.idle,
        description="Waiting for a conversation to start",
        exit_conditions=("Any user message",),
        hints=("Say something to start chatting",),
    ),
    ConversationState.chat: StateDefinition(
        name=ConversationState.chat,
        description="Casual conversation and quick project lookups",
        tools=frozenset(
            {
                _N.list_projects,
                _N.get_project,
                _N.get_overview,
                _N.search_history,
                _N.get_server_info,
                _N.list_payment_accounts,
            }
        ),
        exit_conditions=(
            "User describes a business idea",
            "User asks to create resources",
            "User asks to manage or clean up a project",
            "User asks for research",
        ),
        prompt_addition=(
            "You are in casual chat mode. Have a friendly conversation with the user.\n"
            "If they start discussing business ideas, offer to plan them properly.\n"
            "If they want to check on projects, help them with that."
        ),
        hints=(
            "Tell me about a business idea to start planning",
            "Ask to check on your projects",
            'Say "let\'s create" to set up new resources',
        ),
    ),
    ConversationState.planning: StateDefinition(
        name=ConversationState.planning,
        description="Brainstorming and planning business ideas",
        tools=frozenset(
            {
                _N.create_project,
                _N.get_project,
                _N.list_projects,
                _N.add_project_idea,
                _N.add_project_research,
                _N.set_business_plan,
                _N.web_search,
                _N.deep_research,
                _N.market_research,
                _N.search_domains,
                _N.get_domain_pricing,
                _N.list_repositories,
            }
        ),
        exit_conditions=(
            "User is ready to create resources",
            "User wants deeper research",
            "User changes the topic",
        ),
        prompt_addition=(
            "You are in business planning mode. Help the user develop their idea.\n"
            "- Ask clarifying questions about their vision\n"
            "- Suggest market research to validate the idea\n"
            "- Brainstorm domain names and check availability\n"
            "- Create a project early and record ideas and research on it\n"
            "- Do not rush into creating resources"
        ),
        hints=(
            "Ask me to research the market",
            'Say "let\'s build this" when ready to create resources',
            "Keep refining your business plan",
        ),
    ),
    ConversationState.creating: StateDefinition(
        name=ConversationState.creating,
        description="Creating project resources (domains, repositories, chat servers, payments)",
        tools=frozenset(
            {
                _N.get_project,
                _N.list_projects,
                _N.search_domains,
                _N.get_domain_pricing,
                _N.register_domain,
                _N.list_domains,
                _N.set_dns_records,
                _N.create_repository,
                _N.create_repository_from_template,
                _N.fork_repository,
                _N.list_repositories,
                _N.get_repository,
                _N.create_file,
                _N.create_server,
                _N.setup_channels,
                _N.invite_users,
                _N.link_domain,
                _N.link_repository,
                _N.link_chat_server,
                _N.set_project_status,
                _N.connect_payment_account,
                _N.list_payment_accounts,
                _N.create_product,
                _N.create_price,
            }
        ),
        exit_conditions=(
            "Requested resources have been created",
            "User goes back to planning",
        ),
        prompt_addition=(
            "You are in resource creation mode. Help create the project's infrastructure.\n"
            "Always get explicit approval before registering a domain, creating a chat\n"
            "server or creating/forking repositories. Propose the action with its cost,\n"
            "wait for a clear yes, execute, then record the resource on the project."
        ),
        hints=(
            "Approve resource creation when prompted",
            'Say "cancel" to go back to planning',
        ),
    ),
    ConversationState.managing: StateDefinition(
        name=ConversationState.managing,
        description="Managing existing projects and their resources",
        tools=frozenset(
            {
                _N.get_project,
                _N.list_projects,
                _N.get_project_status,
                _N.list_domains,
                _N.get_domain_info,
                _N.get_dns_records,
                _N.set_dns_records,
                _N.list_repositories,
                _N.get_repository,
                _N.update_repository,
                _N.create_file,
                _N.list_servers,
                _N.list_payment_accounts,
                _N.get_balance,
                _N.list_customers,
                _N.create_customer,
                _N.list_payments,
                _N.list_subscriptions,
                _N.list_products,
                _N.get_revenue,
                _N.list_invoices,
                _N.create_payment_link,
                _N.get_overview,
                _N.search_history,
                _N.get_server_info,
            }
        ),
        exit_conditions=(
            "User wants to clean up a project",
            "User shares a new business idea",
            "User changes the topic",
        ),
        prompt_addition=(
            "You are in project management mode. Check project status and health,\n"
            "update DNS records or repository settings and help with maintenance.\n"
            "If the user wants to remove a project, suggest cleaning it up."
        ),
        hints=(
            "Ask about project status",
            'Say "clean up" to remove a project',
            "Share a new business idea",
        ),
    ),
    ConversationState.researching: StateDefinition(
        name=ConversationState.researching,
        description="Deep research mode for market analysis",
        tools=frozenset(
            {
                _N.web_search,
                _N.deep_research,
                _N.market_research,
                _N.competitor_analysis,
                _N.extract_content,
                _N.add_project_research,
                _N.get_project,
            }
        ),
        exit_conditions=(
            "Research is complete",
            "User is ready to create resources",
            "User changes the topic",
        ),
        prompt_addition=(
            "You are in deep research mode. Use several queries, analyse competitors\n"
            "and trends, extract content from key sites and record a summary of the\n"
            "findings on the project. Quality over speed."
        ),
        hints=(
            "Ask follow-up research questions",
            'Say "that\'s enough research" to return to planning',
        ),
    ),
    ConversationState.cleanup: StateDefinition(
        name=ConversationState.cleanup,
        description="Cleaning up and deleting project resources",
        tools=frozenset(
            {
                _N.get_project,
                _N.list_projects,
                _N.cleanup_project,
                _N.set_project_status,
                _N.list_domains,
                _N.list_repositories,
                _N.delete_repository,
                _N.delete_server,
                _N.list_servers,
                _N.list_payment_accounts,
                _N.disconnect_payment_account,
            }
        ),
        exit_conditions=(
            "Resources have been deleted",
            "User cancels the cleanup",
        ),
        prompt_addition=(
            "You are in cleanup mode. List every resource of the project, explain what\n"
            "will be deleted, and get explicit confirmation before deleting anything.\n"
            "Deleted resources cannot be recovered; domains are left to expire."
        ),
        hints=(
            "Confirm deletion of each resource",
            'Say "stop" to cancel cleanup',
        ),
    ),
}


class _ToolLookup(Protocol):
    def has(self, name: ToolName) -> bool: ...


def get_state_definition(state: ConversationState) -> StateDefinition:
    return STATE_REGISTRY[state]


def reachable_tools(state: ConversationState) -> FrozenSet[ToolName]:
    """Return the tools declared for ``state``; an empty set means every tool."""
    return STATE_REGISTRY[state].tools


def is_tool_reachable(state: ConversationState, tool: ToolName) -> bool:
    tools = reachable_tools(state)
    return not tools or tool in tools


def state_hints(state: ConversationState) -> List[str]:
    return list(STATE_REGISTRY[state].hints)


def format_state_info(state: ConversationState) -> str:
    """Render a short Markdown description of a state for display."""
    definition = STATE_REGISTRY[state]
    tools = ", ".join(sorted(t.value for t in definition.tools)) if definition.tools else "All tools"
    lines = [
        f"**State: {state.value}**",
        definition.description,
        "",
        f"Available tools: {tools}",
        "",
        "Possible transitions:",
    ]
    lines.extend(f"- {trigger.value} -> {target.value}" for trigger, target in valid_transitions(state))
    return "\n".join(lines)


def _reachable_states(rules: Iterable[TransitionRule]) -> set[ConversationState]:
    rules = tuple(rules)
    seen = {INITIAL_STATE}
    queue = deque([INITIAL_STATE])
    while queue:
        current = queue.popleft()
        for _trigger, target in valid_transitions(current, rules=rules):
            if target not in seen:
                seen.add(target)
                queue.append(target)
    return seen


def validate_state_registry(
    catalog: _ToolLookup,
    *,
    registry: Dict[ConversationState, StateDefinition] | None = None,
    rules: Tuple[TransitionRule, ...] = TRANSITIONS,
) -> None:
    """
    Check the state registry against the tool catalog and transition table.

    Args:
        catalog: Anything exposing ``has(ToolName)``, typically the ``ToolCatalog``.
        registry: Registry to validate (defaults to ``STATE_REGISTRY``).
        rules: Transition rules used for the reachability check.

    Raises:
        StateRegistryError: If a state lists a tool missing from the catalog,
            a state is missing from the registry, or a non-initial state
            cannot be reached from the initial state.
    """
    registry = STATE_REGISTRY if registry is None else registry
    problems: List[str] = []

    for state in ConversationState:
        definition = registry.get(state)
        if definition is None:
            problems.append(f"state {state.value} has no definition")
            continue
        for tool in sorted(definition.tools, key=lambda t: t.value):
            if not catalog.has(tool):
                problems.append(f"state {state.value} lists unknown tool {tool.value}")

    for rule in rules:
        if rule.source != WILDCARD and rule.source not in registry:
            problems.append(f"transition from undefined state {rule.source}")

    reachable = _reachable_states(rules)
    for state in ConversationState:
        if state != INITIAL_STATE and state not in reachable:
            problems.append(f"state {state.value} is unreachable from {INITIAL_STATE.value}")

    if problems:
        raise StateRegistryError(problems)

    listed = set().union(*(d.tools for d in registry.values()))
    unlisted = [t.value for t in ToolName if t not in listed and catalog.has(t)]
    if unlisted:
        logger.warning("Tools not reachable from any state: %s", ", ".join(unlisted))
