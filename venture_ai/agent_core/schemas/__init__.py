"""Schemas and DTOs for the agent core."""

from .domain import (
    ConversationContext,
    ConversationMessage,
    ConversationState,
    HistoryMatch,
    MessageContext,
    MessageRole,
    PendingInvocation,
    Project,
    ProjectStatus,
    ResourceCategory,
    StandingApproval,
    ToolName,
    ToolResult,
    Trigger,
    TurnOutcome,
    TurnResult,
)

__all__ = [
    "ConversationContext",
    "ConversationMessage",
    "ConversationState",
    "HistoryMatch",
    "MessageContext",
    "MessageRole",
    "PendingInvocation",
    "Project",
    "ProjectStatus",
    "ResourceCategory",
    "StandingApproval",
    "ToolName",
    "ToolResult",
    "Trigger",
    "TurnOutcome",
    "TurnResult",
]
