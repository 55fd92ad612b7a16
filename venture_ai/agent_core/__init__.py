"""Core conversational agent runtime, policies, and persistence abstractions.

This package contains the "engine room" of the agent.

Design overview
---------------

A turn is processed in a fixed order:

- The ``ApprovalGate`` first resolves a pending invocation left by the
  previous turn. A confident approval runs the stored call; a confident
  rejection cancels it; anything else falls through to the normal turn.
- The ``IntentRouter`` may move the conversation to a new state based on a
  classifier verdict above the confidence threshold.
- ``runtime.AgentEngine`` runs a bounded reason/act loop with LangGraph,
  offering only the tools reachable from the current state and guarding every
  requested call against ``(state, tool)``.
- The auto-transition heuristic may close the turn with ``task_complete``.

Typical usage
-------------

Build a ``ConversationService`` with ``factory.build_conversation_service``
and call ``handle_message(text, message)``. Turns on the same conversation
key are serialized; turns on different keys run concurrently.
"""

from .factory import build_conversation_service, build_default_catalog
from .schemas.domain import (
    ConversationState,
    MessageContext,
    ToolName,
    TurnOutcome,
    TurnResult,
)
from .service import ConversationService, ConversationServiceDeps

__all__ = [
    "ConversationService",
    "ConversationServiceDeps",
    "build_conversation_service",
    "build_default_catalog",
    "ConversationState",
    "MessageContext",
    "ToolName",
    "TurnOutcome",
    "TurnResult",
]
