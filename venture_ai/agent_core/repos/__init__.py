"""Repository interfaces, in-memory and SQL implementations for conversation persistence.

Responsibilities
----------------

- Provide small async repository interfaces (Protocols) the stores depend on.
- Persist conversation state and the append-only message log per context key.
- Persist long-lived projects with their resources and standing approvals.

Design notes
------------

The stores are written against interfaces so they can be used with:

- a SQL database (async SQLAlchemy implementation in ``repos.sql``),
- the in-memory implementation in ``repos.memory`` (tests, single process).

The SQL implementation commits at repository-method boundaries.
"""

from .interfaces import ConversationRepository, ProjectRepository
from .memory import InMemoryConversationRepository, InMemoryProjectRepository

__all__ = [
    "ConversationRepository",
    "ProjectRepository",
    "InMemoryConversationRepository",
    "InMemoryProjectRepository",
]
