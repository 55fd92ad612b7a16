from __future__ import annotations

import pytest

from venture_ai.agent_core.approval.gate import CANCELLED_REPLY
from venture_ai.agent_core.schemas.domain import (
    ConversationState,
    MessageRole,
    PendingInvocation,
    ResourceCategory,
    ToolName,
    TurnOutcome,
)
from venture_ai.agent_core.services.classifier import ApprovalVerdict


async def _cleanup_turn_pending_delete(service, reasoning, completions, message_for):
    """Drive a cleanup turn that ends with ``delete_server`` awaiting approval."""
    tool_calls, _ = completions
    await service.conversations.set_state("chan-1", ConversationState.cleanup)
    reasoning.script(tool_calls(("delete_server", {"id": "X"}), ("list_servers", {})))
    return await service.handle_message("delete server X", message_for())


@pytest.mark.asyncio
async def test_delete_server_waits_for_approval_then_runs_on_yes(
    build_service, reasoning, classifier, completions, fake_backends, message_for
) -> None:
    service = build_service()
    asked = await _cleanup_turn_pending_delete(service, reasoning, completions, message_for)

    assert asked.outcome == TurnOutcome.approval_required
    assert asked.iterations == 15
    assert "chat server **X**" in asked.reply
    # Requesting delete_server completes the cleanup mode.
    assert asked.state == ConversationState.chat
    # list_servers came after the approval request in the same batch.
    assert fake_backends.chat.calls == []

    classifier.answer(approve=True)
    done = await service.handle_message("yes", message_for())

    assert done.outcome == TurnOutcome.approval_granted
    assert done.reply == "Done! Deleted chat server X"
    assert done.tools_used == ["delete_server"]
    assert done.iterations == 1
    assert fake_backends.chat.calls == [("delete_server", {"server_id": "X"})]
    assert await service.conversations.get_pending_invocation("chan-1") is None
    assert len(reasoning.calls) == 1
    assert classifier.approval_calls == ["yes"]

    history = await service.conversations.get_messages("chan-1")
    assert history[-2].content == "yes"
    assert history[-1].role == MessageRole.assistant
    assert history[-1].content.startswith("Approved! ")


@pytest.mark.asyncio
async def test_approval_still_runs_after_context_is_evicted(
    build_service, reasoning, classifier, completions, fake_backends, message_for
) -> None:
    service = build_service(max_contexts=2)
    await _cleanup_turn_pending_delete(service, reasoning, completions, message_for)

    await service.handle_message("hi", message_for("chan-2"))
    await service.handle_message("hello", message_for("chan-3"))
    assert service.conversations.size() == 2

    classifier.answer(approve=True)
    done = await service.handle_message("yes go ahead", message_for())

    assert done.outcome == TurnOutcome.approval_granted
    assert fake_backends.chat.calls == [("delete_server", {"server_id": "X"})]
    assert await service.conversations.get_pending_invocation("chan-1") is None


@pytest.mark.asyncio
async def test_rejection_cancels_pending_invocation(
    build_service, reasoning, classifier, completions, fake_backends, message_for
) -> None:
    service = build_service()
    await _cleanup_turn_pending_delete(service, reasoning, completions, message_for)

    classifier.answer(reject=True)
    result = await service.handle_message("no, keep it", message_for())

    assert result.outcome == TurnOutcome.approval_rejected
    assert result.reply == CANCELLED_REPLY
    assert result.tools_used == []
    assert result.state == ConversationState.chat
    assert fake_backends.chat.calls == []
    assert await service.conversations.get_pending_invocation("chan-1") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "confidence, executed",
    [
        (0.70, False),
        (0.71, True),
    ],
)
async def test_approval_confidence_must_exceed_threshold(
    build_service, reasoning, classifier, completions, fake_backends, message_for, confidence: float, executed: bool
) -> None:
    service = build_service()
    await _cleanup_turn_pending_delete(service, reasoning, completions, message_for)

    classifier.answer(approve=True, confidence=confidence)
    await service.handle_message("yeah I guess", message_for())

    assert (fake_backends.chat.ops() == ["delete_server"]) is executed
    assert (await service.conversations.get_pending_invocation("chan-1") is None) is executed


@pytest.mark.asyncio
async def test_ambiguous_reply_falls_through_and_keeps_pending(
    build_service, reasoning, classifier, completions, fake_backends, message_for
) -> None:
    service = build_service()
    await _cleanup_turn_pending_delete(service, reasoning, completions, message_for)
    before = await service.conversations.get_pending_invocation("chan-1")

    classifier.answer()
    result = await service.handle_message("what does that server host again?", message_for())

    # The reply runs as an ordinary turn; the invocation is neither executed nor dropped.
    assert result.outcome == TurnOutcome.completed
    assert result.reply == "All done."
    assert len(reasoning.calls) == 2
    assert fake_backends.chat.calls == []
    assert await service.conversations.get_pending_invocation("chan-1") == before


@pytest.mark.asyncio
async def test_classifier_failure_counts_as_no_signal(
    build_service, reasoning, classifier, completions, fake_backends, message_for
) -> None:
    service = build_service()
    await _cleanup_turn_pending_delete(service, reasoning, completions, message_for)

    async def broken(text: str) -> ApprovalVerdict:
        raise RuntimeError("classifier down")

    classifier.classify_approval = broken
    result = await service.handle_message("yes", message_for())

    assert result.outcome == TurnOutcome.completed
    assert fake_backends.chat.calls == []
    assert await service.conversations.get_pending_invocation("chan-1") is not None


@pytest.mark.asyncio
async def test_approving_provisioning_records_standing_approval(
    build_service, reasoning, classifier, completions, fake_backends, message_for
) -> None:
    tool_calls, reply = completions
    service = build_service()
    project = await service.projects.create_project(name="Brewly")
    await service.conversations.set_state("chan-1", ConversationState.creating, project_id=project.id)

    reasoning.script(tool_calls(("register_domain", {"domain": "brewly.com"})))
    await service.handle_message("grab brewly.com", message_for())
    classifier.answer(approve=True)
    done = await service.handle_message("go ahead", message_for())

    assert done.reply == "Done! Successfully registered brewly.com!"
    assert await service.projects.has_standing_approval(project.id, ResourceCategory.domain)

    # The next domain registration for this project no longer asks.
    classifier.answer()
    reasoning.script(tool_calls(("register_domain", {"domain": "brewly.io"})), reply("Registered brewly.io too."))
    follow_up = await service.handle_message("also get brewly.io", message_for())

    assert follow_up.outcome == TurnOutcome.completed
    assert fake_backends.domains.ops() == ["register_domain", "register_domain"]


@pytest.mark.asyncio
async def test_failed_approved_call_reports_error(build_service, classifier, message_for) -> None:
    service = build_service()
    await service.conversations.set_pending_invocation(
        "chan-1",
        PendingInvocation(tool_name=ToolName.register_domain, tool_args={"domain": "brewly.com"}, approval_prompt="?"),
    )

    classifier.answer(approve=True)
    result = await service.handle_message("yes", message_for())

    assert result.outcome == TurnOutcome.approval_granted
    assert result.reply.startswith("Sorry, that failed: ")
    assert "no project linked" in result.reply
