from __future__ import annotations

"""System prompt and conversation digest builders."""

from typing import Iterable, List, Optional

from .schemas.domain import (
    ConversationMessage,
    ConversationState,
    MessageRole,
    Project,
    ResourceCategory,
    ToolName,
)
from .state.registry import get_state_definition

BASE_PROMPT = """# Venture Partner

You are a friendly business partner and a core member of this company. You help
brainstorm, plan and launch online businesses, and you treat users as equal
partners in the creative process.

## Personality
- Conversational, like chatting with a smart friend
- Enthusiastic about good ideas, honest about potential problems
- Patient with planning: good businesses take time to develop
- Protective of company resources: always confirm before spending money or creating infrastructure

## Team Memory
- Use `search_history` to recall past discussions and decisions
- Use `get_overview` to understand the current project landscape
- Use `get_server_info` to learn which project the current chat server belongs to

## Approval Rules
ALWAYS get human approval before registering a domain (it costs money), creating a
repository, creating a chat server, or deleting anything.
When approval is needed, explain what you want to do and why, state any costs, and
wait for an explicit confirmation. Never assume approval.

## Projects
- Create a project early when an idea is discussed in depth and record ideas and research on it
- Every resource you create is linked to the project so it can be cleaned up later
- Domains cannot be deleted; they are left to expire

## Conversation
- Several users may take part; each user message starts with the author in brackets, like [Name]
- Keep responses concise, use markdown, and summarise research instead of dumping raw results"""

_CATEGORY_LABELS = {
    ResourceCategory.domain: "Domain",
    ResourceCategory.repository: "Repository",
    ResourceCategory.chat_server: "Chat server",
}


def _project_section(project: Project) -> str:
    res = project.resources
    planning = project.planning
    lines = [
        "## Active Project",
        "",
        f"**Project**: {project.name} ({project.id})",
        f"**Status**: {project.status.value}",
        f"**Description**: {project.description or 'No description'}",
        "",
        "**Resources**:",
        f"- Domain: {res.domain.name if res.domain else 'Not set up'}",
        f"- Repository: {f'{res.repository.owner}/{res.repository.name}' if res.repository else 'Not set up'}",
        f"- Chat server: {res.chat_server.name if res.chat_server else 'Not set up'}",
        "",
        "**Planning**:",
        f"- Ideas collected: {len(planning.ideas)}",
        f"- Research entries: {len(planning.research)}",
        f"- Business plan: {'Yes' if planning.business_plan else 'Not yet'}",
        "",
        "**Approvals**:",
    ]
    for category, label in _CATEGORY_LABELS.items():
        approval = planning.approvals.get(category)
        lines.append(f"- {label}: {'Approved' if approval is not None and approval.approved else 'Pending'}")
    lines.append("")
    lines.append(
        "All actions in this conversation relate to this project unless the user explicitly starts "
        "discussing something else."
    )
    return "\n".join(lines)


def build_system_prompt(
    state: ConversationState,
    project: Optional[Project] = None,
    tools: Iterable[ToolName] = (),
) -> str:
    """Assemble the system prompt for one reasoning call.

    Args:
        state: Conversation state the turn runs in; contributes its prompt addition.
        project: Project linked to the conversation, if any.
        tools: Tools offered in this call, listed so the model knows its current reach.
    """
    parts: List[str] = [BASE_PROMPT]
    addition = get_state_definition(state).prompt_addition
    if addition:
        parts.append(f"## Current Mode: {state.value}\n\n{addition}")
    names = [t.value for t in tools]
    if names:
        parts.append("## Available Tools\n\n" + ", ".join(names))
    if project is not None:
        parts.append(_project_section(project))
    return "\n\n".join(parts)


def build_context_summary(
    messages: Iterable[ConversationMessage],
    *,
    max_messages: int = 10,
    max_line: int = 100,
    max_length: int = 500,
) -> str:
    """Short digest of the latest messages for the intent classifier."""
    recent = list(messages)[-max_messages:]
    lines = []
    for m in recent:
        prefix = "User" if m.role == MessageRole.user else "Bot"
        content = m.content if len(m.content) <= max_line else m.content[:max_line] + "..."
        lines.append(f"{prefix}: {content}")
    summary = "\n".join(lines)
    if len(summary) <= max_length:
        return summary
    return summary[:max_length] + "..."
