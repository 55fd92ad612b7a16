from __future__ import annotations

import asyncio

import pytest

from venture_ai.agent_core.policy.global_policy import GlobalPolicy
from venture_ai.agent_core.policy.models import PolicyConfig, TimeoutPolicy
from venture_ai.agent_core.schemas.domain import ConversationState, Trigger
from venture_ai.agent_core.services.classifier import RouterVerdict
from venture_ai.agent_core.state.router import IntentRouter

S = ConversationState


def _router(classifier, **cfg) -> IntentRouter:
    return IntentRouter(classifier=classifier, policy=GlobalPolicy(PolicyConfig(**cfg)))


@pytest.mark.asyncio
async def test_confidence_at_threshold_does_not_route(classifier) -> None:
    classifier.route_to("planning", 0.70)
    decision = await _router(classifier).route(S.chat, "I have an idea", "")
    assert decision.trigger == Trigger.business_idea_detected
    assert decision.committed is False
    assert decision.new_state == S.chat


@pytest.mark.asyncio
async def test_confidence_above_threshold_routes(classifier) -> None:
    classifier.route_to("planning", 0.71)
    decision = await _router(classifier).route(S.chat, "I have an idea", "")
    assert decision.committed is True
    assert decision.new_state == S.planning


@pytest.mark.asyncio
async def test_unknown_label_means_no_transition(classifier) -> None:
    classifier.route_to("shopping", 0.99)
    decision = await _router(classifier).route(S.chat, "buy stuff", "")
    assert decision.trigger is None
    assert decision.new_state == S.chat


@pytest.mark.asyncio
async def test_trigger_without_rule_is_not_committed(classifier) -> None:
    classifier.route_to("managing", 0.95)
    decision = await _router(classifier).route(S.planning, "how is it going", "")
    assert decision.trigger == Trigger.manage_request
    assert decision.committed is False
    assert decision.new_state == S.planning


@pytest.mark.asyncio
async def test_label_is_normalised(classifier) -> None:
    classifier.route_to("  Cleanup ", 0.9)
    decision = await _router(classifier).route(S.managing, "tear it down", "")
    assert decision.new_state == S.cleanup


@pytest.mark.asyncio
async def test_classifier_error_is_no_signal() -> None:
    class _Broken:
        async def classify_intent(self, text: str, digest: str) -> RouterVerdict:
            raise RuntimeError("boom")

    decision = await _router(_Broken()).route(S.chat, "hello", "")
    assert decision.trigger is None
    assert decision.confidence == 0.0
    assert decision.new_state == S.chat


@pytest.mark.asyncio
async def test_classifier_timeout_is_no_signal() -> None:
    class _Slow:
        async def classify_intent(self, text: str, digest: str) -> RouterVerdict:
            await asyncio.sleep(1)
            return RouterVerdict(intent="planning", confidence=1.0)

    router = _router(_Slow(), timeout_policy=TimeoutPolicy(classifier_seconds=0.01))
    decision = await router.route(S.chat, "hello", "")
    assert decision.new_state == S.chat
    assert decision.committed is False


@pytest.mark.asyncio
async def test_digest_is_forwarded(classifier) -> None:
    await _router(classifier).route(S.chat, "hi", "User: earlier")
    assert classifier.intent_calls == [("hi", "User: earlier")]
