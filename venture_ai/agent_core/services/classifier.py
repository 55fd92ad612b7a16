from __future__ import annotations

"""Lightweight intent classifier used by the router and the approval gate.

Two questions are asked of a small, fast model:

- *routing*: which conversation mode does this message belong to, and how
  sure is the model?
- *approval*: is this message approving or rejecting the pending action?

A failed, malformed or empty answer never propagates: it becomes the
"no signal" verdict (no intent and zero confidence).
"""

import logging
from typing import Any, Optional, Protocol

from pydantic import Field
from pydantic_ai import Agent

from ..schemas.base import BaseSchema

logger = logging.getLogger(__name__)


class RouterVerdict(BaseSchema):
    intent: Optional[str] = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    reasoning: str = ""

    @classmethod
    def no_signal(cls, reasoning: str = "") -> "RouterVerdict":
        return cls(intent=None, confidence=0.0, reasoning=reasoning)


class ApprovalVerdict(BaseSchema):
    is_approval: bool = False
    is_rejection: bool = False
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    @classmethod
    def no_signal(cls) -> "ApprovalVerdict":
        return cls(is_approval=False, is_rejection=False, confidence=0.0)


class IntentClassifier(Protocol):
    """Protocol for the routing/approval classifier."""

    async def classify_intent(self, text: str, digest: str) -> RouterVerdict: ...

    async def classify_approval(self, text: str) -> ApprovalVerdict: ...


ROUTER_SYSTEM_PROMPT = """You are an intent router for a business assistant bot. \
Decide which mode should handle the user's message.

Available modes:
- chat: general conversation, greetings, off-topic discussion
- planning: discussing business ideas, brainstorming, strategy
- creating: ready to create resources (domains, repositories, chat servers)
- managing: managing existing projects, checking status
- researching: deep research, market analysis, competitor research
- cleanup: cleaning up or deleting projects and their resources

Context from the conversation:
{digest}

Answer with the mode as `intent`, a `confidence` between 0.0 and 1.0 and a
brief `reasoning`."""

APPROVAL_SYSTEM_PROMPT = """Decide whether the message approves or rejects a proposed action.

Approval signals: yes, approve, go ahead, do it, sounds good, confirmed, ok.
Rejection signals: no, reject, don't, cancel, stop, not now, wait.

Set `is_approval` / `is_rejection` accordingly and give a `confidence`
between 0.0 and 1.0. If the message is neither, set both to false."""


class PydanticAIIntentClassifier:
    """``IntentClassifier`` backed by pydantic-ai structured output."""

    def __init__(self, *, model: Any) -> None:
        self._model = model

    async def classify_intent(self, text: str, digest: str) -> RouterVerdict:
        try:
            agent: Agent = Agent(
                self._model,
                output_type=RouterVerdict,
                system_prompt=ROUTER_SYSTEM_PROMPT.format(digest=digest or "(no prior messages)"),
            )
            result = await agent.run(text)
        except Exception as e:
            logger.warning(f"Intent classification failed, treating as no signal: {e}")
            return RouterVerdict.no_signal("classification failed")
        return result.output

    async def classify_approval(self, text: str) -> ApprovalVerdict:
        try:
            agent: Agent = Agent(
                self._model,
                output_type=ApprovalVerdict,
                system_prompt=APPROVAL_SYSTEM_PROMPT,
            )
            result = await agent.run(text)
        except Exception as e:
            logger.warning(f"Approval classification failed, treating as no signal: {e}")
            return ApprovalVerdict.no_signal()
        return result.output
