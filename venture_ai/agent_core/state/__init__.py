"""Conversation state machine.

- ``registry``: which tools are reachable from each state, plus display data.
- ``machine``: the ordered transition table and pure ``transition`` function.
- ``router``: classifier-driven routing with a confidence threshold.
- ``auto_transition``: post-turn heuristic proposing ``task_complete``.
"""

from .auto_transition import should_auto_transition
from .machine import TRANSITIONS, TransitionRule, can_transition, transition, valid_transitions
from .registry import (
    INITIAL_STATE,
    STATE_REGISTRY,
    StateDefinition,
    StateRegistryError,
    format_state_info,
    get_state_definition,
    is_tool_reachable,
    reachable_tools,
    state_hints,
    validate_state_registry,
)

__all__ = [
    "should_auto_transition",
    "TRANSITIONS",
    "TransitionRule",
    "can_transition",
    "transition",
    "valid_transitions",
    "INITIAL_STATE",
    "STATE_REGISTRY",
    "StateDefinition",
    "StateRegistryError",
    "format_state_info",
    "get_state_definition",
    "is_tool_reachable",
    "reachable_tools",
    "state_hints",
    "validate_state_registry",
]
