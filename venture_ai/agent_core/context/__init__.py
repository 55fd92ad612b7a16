"""Conversation and project stores plus per-key turn serialization."""

from .conversation_store import ConversationStore
from .locks import KeyedLock
from .project_store import ProjectNotFoundError, ProjectStore

__all__ = [
    "ConversationStore",
    "KeyedLock",
    "ProjectNotFoundError",
    "ProjectStore",
]
