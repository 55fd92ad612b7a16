"""Venture-AI.

A stateful, tool-calling conversational agent that helps a team take a
business idea from brainstorming to a launched project.

High-level architecture
-----------------------

Every conversation (a chat thread or channel) carries a *state*. The state
decides which tools the reasoning service may call, and the conversation
moves between states through a fixed transition table.

Core subpackages
----------------

- ``venture_ai.agent_core``:

  - The state registry, transition table, intent router and auto-transition
    heuristic.
  - The closed tool catalog with its executor and external backends.
  - The approval gate (per-turn pending invocation, per-project standing
    approvals).
  - A LangGraph-based bounded reason/act loop.
  - Repository interfaces with in-memory and SQL implementations.

- ``venture_ai.core``: logging configuration and Logfire monitoring.

- ``venture_ai.server``: a FastAPI application exposing the agent over HTTP.

Typical workflow
----------------

Most integrations should use
``venture_ai.agent_core.service.ConversationService``, built with
``venture_ai.agent_core.factory.build_conversation_service``, and call
``handle_message`` once per inbound message.
"""

__version__ = "0.1.0"
