"""External collaborator contracts (reasoning service, intent classifier) and their pydantic-ai adapters."""

from .classifier import (
    ApprovalVerdict,
    IntentClassifier,
    PydanticAIIntentClassifier,
    RouterVerdict,
)
from .reasoning import (
    ChatMessage,
    Completion,
    PydanticAIReasoningService,
    ReasoningService,
    ToolCallRequest,
    ToolSpec,
)

__all__ = [
    "ApprovalVerdict",
    "IntentClassifier",
    "PydanticAIIntentClassifier",
    "RouterVerdict",
    "ChatMessage",
    "Completion",
    "PydanticAIReasoningService",
    "ReasoningService",
    "ToolCallRequest",
    "ToolSpec",
]
