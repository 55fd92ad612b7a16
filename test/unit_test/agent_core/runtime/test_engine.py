from __future__ import annotations

import pytest

from venture_ai.agent_core.policy.models import LoopPolicy, PolicyConfig
from venture_ai.agent_core.runtime.engine import (
    ITERATION_CAP_REPLY,
    SERVICE_ERROR_REPLY,
    render_user_content,
)
from venture_ai.agent_core.schemas.domain import (
    ConversationMessage,
    ConversationState,
    MessageRole,
    ResourceCategory,
    TurnOutcome,
)

CHAT_TOOLS = {
    "list_projects",
    "get_project",
    "get_overview",
    "search_history",
    "get_server_info",
    "list_payment_accounts",
}


def test_render_user_content_prefixes_author() -> None:
    user = ConversationMessage(role=MessageRole.user, content="hi", author_name="Alice")
    bot = ConversationMessage(role=MessageRole.assistant, content="hello")
    anonymous = ConversationMessage(role=MessageRole.user, content="hey")
    assert render_user_content(user) == "[Alice]: hi"
    assert render_user_content(bot) == "hello"
    assert render_user_content(anonymous) == "hey"


@pytest.mark.asyncio
async def test_first_message_moves_idle_to_chat_and_offers_chat_tools(build_service, reasoning, message_for) -> None:
    service = build_service()
    result = await service.handle_message("hello there", message_for())

    assert result.state == ConversationState.chat
    assert result.outcome == TurnOutcome.completed
    assert result.reply == "All done."
    assert result.iterations == 1
    assert set(reasoning.calls[0]["tools"]) == CHAT_TOOLS

    history = await service.conversations.get_messages("chan-1")
    assert [(m.role, m.content) for m in history] == [
        (MessageRole.user, "hello there"),
        (MessageRole.assistant, "All done."),
    ]


@pytest.mark.asyncio
async def test_history_renders_authors_and_reply_context(build_service, reasoning, message_for) -> None:
    service = build_service()
    await service.handle_message("hi", message_for(author_name="Bob"))
    await service.handle_message("and this?", message_for(reply_context="> earlier message"))

    messages = reasoning.calls[1]["messages"]
    assert messages[0].role == MessageRole.system
    assert [(m.role, m.content) for m in messages[1:]] == [
        (MessageRole.user, "[Bob]: hi"),
        (MessageRole.assistant, "All done."),
        (MessageRole.user, "[Alice]: > earlier message\n\nand this?"),
    ]


@pytest.mark.asyncio
async def test_confident_routing_switches_mode_before_tools_are_offered(
    build_service, reasoning, classifier, message_for
) -> None:
    service = build_service()
    await service.handle_message("hey", message_for())

    classifier.route_to("planning", 0.9)
    result = await service.handle_message("I have an idea for a coffee subscription", message_for())

    assert result.state == ConversationState.planning
    offered = set(reasoning.calls[-1]["tools"])
    assert {"create_project", "web_search", "market_research"} <= offered
    assert "delete_server" not in offered
    assert "## Current Mode: planning" in reasoning.calls[-1]["messages"][0].content
    assert classifier.intent_calls[-1][0] == "I have an idea for a coffee subscription"


@pytest.mark.asyncio
async def test_routing_at_threshold_does_not_switch(build_service, reasoning, classifier, message_for) -> None:
    service = build_service()
    classifier.route_to("planning", 0.70)
    result = await service.handle_message("maybe an idea", message_for())

    assert result.state == ConversationState.chat
    assert set(reasoning.calls[0]["tools"]) == CHAT_TOOLS


@pytest.mark.asyncio
async def test_tool_results_feed_the_next_reasoning_call(build_service, reasoning, completions, message_for) -> None:
    tool_calls, reply = completions
    reasoning.script(tool_calls(("list_projects", {})), reply("You have no projects yet."))
    service = build_service()

    result = await service.handle_message("what projects do we have?", message_for())

    assert result.reply == "You have no projects yet."
    assert result.tools_used == ["list_projects"]
    assert result.iterations == 2
    second = reasoning.calls[1]["messages"]
    assert second[-2].role == MessageRole.assistant
    assert second[-2].tool_calls[0].name == "list_projects"
    assert second[-1].role == MessageRole.tool
    assert second[-1].tool_call_id == "call-0"
    assert '"count":0' in second[-1].content

    # Tool traffic stays inside the turn.
    history = await service.conversations.get_messages("chan-1")
    assert [m.role for m in history] == [MessageRole.user, MessageRole.assistant]


@pytest.mark.asyncio
async def test_unreachable_tool_is_fed_back_as_failure(
    build_service, reasoning, completions, fake_backends, message_for
) -> None:
    tool_calls, reply = completions
    reasoning.script(tool_calls(("delete_server", {"server_id": "X"})), reply("I can't do that here."))
    service = build_service()

    result = await service.handle_message("delete the server", message_for())

    assert result.tools_used == []
    assert result.outcome == TurnOutcome.completed
    assert fake_backends.chat.calls == []
    tool_message = reasoning.calls[1]["messages"][-1]
    assert "tool not available in chat mode: delete_server" in tool_message.content


@pytest.mark.asyncio
async def test_unknown_tool_name_is_fed_back_as_failure(build_service, reasoning, completions, message_for) -> None:
    tool_calls, reply = completions
    reasoning.script(tool_calls(("launch_rocket", {})), reply("ok"))
    service = build_service()

    result = await service.handle_message("go", message_for())
    assert result.tools_used == []
    assert "unknown tool: launch_rocket" in reasoning.calls[1]["messages"][-1].content


@pytest.mark.asyncio
async def test_reasoning_failure_returns_apology_without_persisting_reply(
    build_service, reasoning, message_for
) -> None:
    reasoning.script(RuntimeError("provider down"))
    service = build_service()

    result = await service.handle_message("hello", message_for())

    assert result.reply == SERVICE_ERROR_REPLY
    assert result.outcome == TurnOutcome.service_error
    assert result.iterations == 0
    history = await service.conversations.get_messages("chan-1")
    assert [m.role for m in history] == [MessageRole.user]


@pytest.mark.asyncio
async def test_iteration_cap_returns_fallback(build_service, reasoning, completions, message_for) -> None:
    tool_calls, _ = completions
    reasoning.script(*[tool_calls(("get_overview", {})) for _ in range(3)])
    service = build_service(PolicyConfig(loop_policy=LoopPolicy(max_iterations=3)))

    result = await service.handle_message("loop forever", message_for())

    assert result.reply == ITERATION_CAP_REPLY
    assert result.outcome == TurnOutcome.iteration_cap
    assert result.iterations == 3
    assert len(reasoning.calls) == 3
    assert result.tools_used == ["get_overview"]


@pytest.mark.asyncio
async def test_default_cap_is_fifteen_reasoning_calls(build_service, reasoning, completions, message_for) -> None:
    tool_calls, _ = completions
    reasoning.script(*[tool_calls(("get_overview", {})) for _ in range(20)])
    service = build_service()

    result = await service.handle_message("loop forever", message_for())

    assert result.outcome == TurnOutcome.iteration_cap
    assert result.iterations == 15
    assert len(reasoning.calls) == 15


@pytest.mark.asyncio
async def test_creating_moves_to_managing_after_two_creation_tools(
    build_service, reasoning, completions, fake_backends, message_for
) -> None:
    tool_calls, reply = completions
    service = build_service()
    project = await service.projects.create_project(name="Brewly")
    await service.projects.set_standing_approval(project.id, ResourceCategory.domain, approved_by="u-1")
    await service.projects.set_standing_approval(project.id, ResourceCategory.repository, approved_by="u-1")
    await service.conversations.set_state("chan-1", ConversationState.creating, project_id=project.id)

    reasoning.script(
        tool_calls(("register_domain", {"domain": "brewly.com"}), ("create_repository", {"name": "brewly"})),
        reply("Domain and repository are ready."),
    )
    result = await service.handle_message("set everything up", message_for())

    assert result.outcome == TurnOutcome.completed
    assert result.tools_used == ["register_domain", "create_repository"]
    assert result.state == ConversationState.managing
    assert await service.conversations.get_state("chan-1") == ConversationState.managing
    assert fake_backends.domains.ops() == ["register_domain"]
    assert fake_backends.repositories.ops() == ["create_repository"]
    resources = (await service.projects.get_project(project.id)).resources
    assert resources.domain.name == "brewly.com"
    assert resources.repository.name == "brewly"


@pytest.mark.asyncio
async def test_approval_request_ends_turn_and_skips_rest_of_batch(
    build_service, reasoning, completions, fake_backends, message_for
) -> None:
    tool_calls, _ = completions
    service = build_service()
    project = await service.projects.create_project(name="Brewly")
    await service.conversations.set_state("chan-1", ConversationState.creating, project_id=project.id)

    reasoning.script(
        tool_calls(("register_domain", {"domain": "brewly.com"}), ("create_server", {"name": "Brewly HQ"})),
    )
    result = await service.handle_message("register it", message_for())

    assert result.outcome == TurnOutcome.approval_required
    assert result.iterations == 15
    assert "**brewly.com**" in result.reply
    assert result.tools_used == ["register_domain"]
    assert result.state == ConversationState.creating
    assert len(reasoning.calls) == 1
    assert fake_backends.domains.calls == []
    assert fake_backends.chat.calls == []

    pending = await service.conversations.get_pending_invocation("chan-1")
    assert pending.tool_name.value == "register_domain"
    assert pending.tool_args == {"domain": "brewly.com"}
    assert pending.requested_by == "u-1"


@pytest.mark.asyncio
async def test_malformed_call_does_not_stop_the_rest_of_the_batch(
    build_service, reasoning, completions, fake_backends, message_for
) -> None:
    tool_calls, reply = completions
    service = build_service()
    await service.conversations.set_state("chan-1", ConversationState.researching)

    reasoning.script(
        tool_calls(("web_search", "{bad"), ("web_search", {"query": "coffee subscriptions"})),
        reply("Here is what I found."),
    )
    result = await service.handle_message("look up coffee subscriptions", message_for())

    assert result.outcome == TurnOutcome.completed
    assert result.reply == "Here is what I found."
    assert result.tools_used == ["web_search"]
    assert result.iterations == 2
    assert fake_backends.research.ops() == ["web_search"]

    tool_messages = [m for m in reasoning.calls[1]["messages"] if m.role == MessageRole.tool]
    assert len(tool_messages) == 2
    assert "malformed arguments" in tool_messages[0].content
    assert '"success":true' in tool_messages[1].content


@pytest.mark.asyncio
async def test_tool_awaiting_approval_counts_toward_auto_transition(
    build_service, reasoning, completions, fake_backends, message_for
) -> None:
    tool_calls, _ = completions
    service = build_service()
    project = await service.projects.create_project(name="Brewly")
    await service.projects.set_standing_approval(project.id, ResourceCategory.repository, approved_by="u-1")
    await service.conversations.set_state("chan-1", ConversationState.creating, project_id=project.id)

    reasoning.script(
        tool_calls(("create_repository", {"name": "brewly"}), ("register_domain", {"domain": "brewly.com"})),
    )
    result = await service.handle_message("set it all up", message_for())

    assert result.outcome == TurnOutcome.approval_required
    assert result.tools_used == ["create_repository", "register_domain"]
    assert result.state == ConversationState.managing
    assert fake_backends.repositories.ops() == ["create_repository"]
    assert fake_backends.domains.calls == []
    pending = await service.conversations.get_pending_invocation("chan-1")
    assert pending.tool_name.value == "register_domain"
