from __future__ import annotations

"""Intent router.

Turns a free-text message plus a short conversation digest into a state
transition:

1. The classifier labels the message with a mode ("planning", "cleanup", ...)
   and a confidence.
2. The label maps to a ``Trigger`` through ``INTENT_TO_TRIGGER``; an unknown
   label means "no transition".
3. The trigger is applied through the transition table, but only when the
   confidence is strictly above the policy threshold.

Classifier errors and timeouts are treated as "no signal" and never abort the
turn.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional

from ..schemas.domain import ConversationState, Trigger
from ..services.classifier import IntentClassifier, RouterVerdict
from .machine import transition

if TYPE_CHECKING:
    from ..policy.global_policy import GlobalPolicy

logger = logging.getLogger(__name__)

INTENT_TO_TRIGGER: Dict[str, Trigger] = {
    "chat": Trigger.topic_change,
    "planning": Trigger.business_idea_detected,
    "creating": Trigger.create_request,
    "managing": Trigger.manage_request,
    "researching": Trigger.research_request,
    "cleanup": Trigger.cleanup_request,
}


@dataclass(frozen=True)
class RouteDecision:
    """Outcome of routing one message.

    ``new_state`` equals the input state unless ``committed`` is True.
    """

    trigger: Optional[Trigger]
    confidence: float
    new_state: ConversationState
    reasoning: str = ""
    committed: bool = False


class IntentRouter:
    """Classify a message and decide whether the conversation changes mode."""

    def __init__(self, *, classifier: IntentClassifier, policy: "GlobalPolicy") -> None:
        self._classifier = classifier
        self._policy = policy

    async def _classify(self, text: str, digest: str) -> RouterVerdict:
        timeout = self._policy.config.timeout_policy.classifier_seconds
        try:
            verdict = await asyncio.wait_for(self._classifier.classify_intent(text, digest), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Intent classifier timed out after %ss; no transition", timeout)
            return RouterVerdict.no_signal("timeout")
        except Exception as e:
            logger.warning(f"Intent classifier failed; no transition: {e}")
            return RouterVerdict.no_signal("error")
        if not isinstance(verdict, RouterVerdict):
            logger.warning("Intent classifier returned %r; no transition", type(verdict).__name__)
            return RouterVerdict.no_signal("malformed")
        return verdict

    async def route(self, state: ConversationState, text: str, digest: str) -> RouteDecision:
        """
        Route a message.

        Args:
            state: Current conversation state.
            text: The user's message.
            digest: Short summary of recent conversation for the classifier.

        Returns:
            A RouteDecision. The transition is committed only when the mapped
            trigger moves the state and the confidence clears the threshold.
        """
        verdict = await self._classify(text, digest)
        label = (verdict.intent or "").strip().lower()
        trigger = INTENT_TO_TRIGGER.get(label)
        if trigger is None:
            return RouteDecision(
                trigger=None, confidence=verdict.confidence, new_state=state, reasoning=verdict.reasoning
            )

        if not self._policy.is_confident(verdict.confidence):
            logger.debug(
                "Discarding trigger %s for state %s: confidence %.2f below threshold",
                trigger.value,
                state.value,
                verdict.confidence,
            )
            return RouteDecision(
                trigger=trigger, confidence=verdict.confidence, new_state=state, reasoning=verdict.reasoning
            )

        new_state = transition(state, trigger)
        committed = new_state != state
        if committed:
            logger.info(
                "Routing %s -> %s via %s (confidence %.2f)",
                state.value,
                new_state.value,
                trigger.value,
                verdict.confidence,
            )
        return RouteDecision(
            trigger=trigger,
            confidence=verdict.confidence,
            new_state=new_state,
            reasoning=verdict.reasoning,
            committed=committed,
        )
