"""LangGraph-based agent loop.

 The runtime takes one user message through a turn: history, state routing,
 then a bounded reason/act loop in which the reasoning service calls tools
 reachable from the current conversation state.

 - Every requested call passes the ``(state, tool)`` guard before execution,
   independently of which tools were offered.
 - A tool asking for approval ends the turn and becomes the conversation's
   pending invocation.

 The main entry point is ``AgentEngine``; its collaborators are bundled in
 ``AgentDeps``.
 """

from .engine import AgentEngine
from .models import AgentDeps

__all__ = [
    "AgentEngine",
    "AgentDeps",
]
