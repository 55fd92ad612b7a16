from __future__ import annotations

"""Transition table for the conversation state machine.

The table is an ordered list of ``(from_state | "*", trigger) -> to_state``
rules. Lookup is deterministic: rules for a concrete state are consulted
before the wildcard rule for the same trigger, and the first match wins.

A trigger with no matching rule leaves the state unchanged. That is a normal
outcome, not an error; callers compare the returned state with the input to
learn whether anything moved.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from ..schemas.domain import ConversationState, Trigger

WILDCARD = "*"


@dataclass(frozen=True)
class TransitionRule:
    source: Union[ConversationState, str]
    trigger: Trigger
    target: ConversationState

    def matches(self, state: ConversationState, trigger: Trigger) -> bool:
        return self.trigger == trigger and (self.source == state or self.source == WILDCARD)


_S = ConversationState
_T = Trigger

TRANSITIONS: Tuple[TransitionRule, ...] = (
    TransitionRule(_S.idle, _T.user_message, _S.chat),
    TransitionRule(_S.chat, _T.business_idea_detected, _S.planning),
    TransitionRule(_S.chat, _T.create_request, _S.creating),
    TransitionRule(_S.chat, _T.manage_request, _S.managing),
    TransitionRule(_S.chat, _T.cleanup_request, _S.cleanup),
    TransitionRule(_S.chat, _T.research_request, _S.researching),
    TransitionRule(_S.planning, _T.create_request, _S.creating),
    TransitionRule(_S.planning, _T.research_request, _S.researching),
    TransitionRule(_S.planning, _T.topic_change, _S.chat),
    TransitionRule(_S.creating, _T.task_complete, _S.managing),
    TransitionRule(_S.creating, _T.topic_change, _S.planning),
    TransitionRule(_S.managing, _T.cleanup_request, _S.cleanup),
    TransitionRule(_S.managing, _T.business_idea_detected, _S.planning),
    TransitionRule(_S.managing, _T.topic_change, _S.chat),
    TransitionRule(_S.researching, _T.task_complete, _S.planning),
    TransitionRule(_S.researching, _T.create_request, _S.creating),
    TransitionRule(_S.researching, _T.topic_change, _S.chat),
    TransitionRule(_S.cleanup, _T.task_complete, _S.chat),
    TransitionRule(_S.cleanup, _T.topic_change, _S.managing),
    TransitionRule(WILDCARD, _T.topic_change, _S.chat),
)


def can_transition(
    state: ConversationState,
    trigger: Trigger,
    *,
    rules: Tuple[TransitionRule, ...] = TRANSITIONS,
) -> Optional[ConversationState]:
    """Return the target state for ``(state, trigger)`` or None when no rule applies."""
    for rule in rules:
        if rule.source == state and rule.trigger == trigger:
            return rule.target
    for rule in rules:
        if rule.source == WILDCARD and rule.trigger == trigger:
            return rule.target
    return None


def transition(
    state: ConversationState,
    trigger: Trigger,
    *,
    rules: Tuple[TransitionRule, ...] = TRANSITIONS,
) -> ConversationState:
    """Apply ``trigger`` to ``state``; the state is returned unchanged when no rule applies."""
    target = can_transition(state, trigger, rules=rules)
    return state if target is None else target


def valid_transitions(
    state: ConversationState,
    *,
    rules: Tuple[TransitionRule, ...] = TRANSITIONS,
) -> List[Tuple[Trigger, ConversationState]]:
    """List the ``(trigger, target)`` pairs that would move ``state`` somewhere.

    Wildcard rules shadowed by a concrete rule for the same trigger are left out.
    """
    out: List[Tuple[Trigger, ConversationState]] = []
    seen: set[Trigger] = set()
    for rule in rules:
        if rule.trigger in seen or not rule.matches(state, rule.trigger):
            continue
        target = can_transition(state, rule.trigger, rules=rules)
        if target is None:
            continue
        seen.add(rule.trigger)
        out.append((rule.trigger, target))
    return out
