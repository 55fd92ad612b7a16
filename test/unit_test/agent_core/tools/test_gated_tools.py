from __future__ import annotations

import json

import pytest

from venture_ai.agent_core.context.project_store import ProjectStore
from venture_ai.agent_core.policy.global_policy import GlobalPolicy
from venture_ai.agent_core.policy.models import PolicyConfig
from venture_ai.agent_core.schemas.domain import ConversationState, PendingInvocation, ResourceCategory, ToolName
from venture_ai.agent_core.tools.backends import ToolBackends
from venture_ai.agent_core.tools.deps import ToolDeps
from venture_ai.agent_core.tools.executor import ToolExecutor
from venture_ai.agent_core.tools.project import NO_PROJECT


@pytest.mark.asyncio
async def test_register_domain_asks_without_standing_approval(
    executor: ToolExecutor, message_for, project_store: ProjectStore, fake_backends
) -> None:
    project = await project_store.create_project(name="Brewly")
    call = await executor.execute_call(
        "register_domain",
        json.dumps({"domain": "brewly.com", "years": 2}),
        state=ConversationState.creating,
        message=message_for(),
        project_id=project.id,
    )

    assert call.dispatched
    assert call.result.needs_approval
    assert not call.result.success
    assert "**brewly.com** for 2 year(s)" in call.result.approval_prompt
    assert fake_backends.domains.calls == []


@pytest.mark.asyncio
async def test_register_domain_runs_and_links_with_standing_approval(
    executor: ToolExecutor, message_for, project_store: ProjectStore, fake_backends
) -> None:
    project = await project_store.create_project(name="Brewly")
    await project_store.set_standing_approval(project.id, ResourceCategory.domain, approved_by="u-1")

    call = await executor.execute_call(
        "register_domain",
        json.dumps({"domain": "brewly.com"}),
        state=ConversationState.creating,
        message=message_for(),
        project_id=project.id,
    )

    assert call.result.success
    assert call.result.data["message"] == "Successfully registered brewly.com!"
    # project_id is consumed by the tool, not forwarded to the registrar.
    assert fake_backends.domains.calls == [("register_domain", {"domain": "brewly.com", "years": 1})]
    domain = (await project_store.get_project(project.id)).resources.domain
    assert domain.name == "brewly.com"
    assert domain.expires_at is not None


@pytest.mark.asyncio
async def test_standing_approval_is_per_category(
    executor: ToolExecutor, message_for, project_store: ProjectStore, fake_backends
) -> None:
    project = await project_store.create_project(name="Brewly")
    await project_store.set_standing_approval(project.id, ResourceCategory.domain, approved_by="u-1")

    call = await executor.execute_call(
        "create_repository",
        json.dumps({"name": "brewly"}),
        state=ConversationState.creating,
        message=message_for(),
        project_id=project.id,
    )
    assert call.result.needs_approval
    assert "private repository called **brewly**" in call.result.approval_prompt
    assert fake_backends.repositories.calls == []


@pytest.mark.asyncio
async def test_create_server_links_returned_server(
    executor: ToolExecutor, message_for, project_store: ProjectStore
) -> None:
    project = await project_store.create_project(name="Brewly")
    await project_store.set_standing_approval(project.id, ResourceCategory.chat_server, approved_by="u-1")

    call = await executor.execute_call(
        "create_server", json.dumps({"name": "Brewly HQ"}), state=ConversationState.creating, message=message_for(), project_id=project.id
    )

    assert call.result.success
    server = (await project_store.get_project(project.id)).resources.chat_server
    assert server.server_id == "srv-1"
    assert server.invite_url == "https://chat.example/invite/srv-1"
    assert (await project_store.find_by_chat_server("srv-1")).id == project.id


@pytest.mark.asyncio
async def test_provisioning_without_project_fails(executor: ToolExecutor, message_for, fake_backends) -> None:
    call = await executor.execute_call(
        "register_domain", json.dumps({"domain": "brewly.com"}), state=ConversationState.creating, message=message_for(), project_id=None
    )
    assert call.result.error == NO_PROJECT
    assert not call.result.needs_approval
    assert fake_backends.domains.calls == []


@pytest.mark.asyncio
async def test_destructive_tool_ignores_standing_approvals(
    executor: ToolExecutor, message_for, project_store: ProjectStore, fake_backends
) -> None:
    project = await project_store.create_project(name="Brewly")
    await project_store.set_standing_approval(project.id, ResourceCategory.chat_server, approved_by="u-1")

    call = await executor.execute_call(
        "delete_server", json.dumps({"id": "X"}), state=ConversationState.cleanup, message=message_for(), project_id=project.id
    )
    assert call.result.needs_approval
    assert "chat server **X**" in call.result.approval_prompt
    assert fake_backends.chat.calls == []


@pytest.mark.asyncio
async def test_approved_destructive_call_runs_once(executor: ToolExecutor, message_for, fake_backends) -> None:
    pending = PendingInvocation(tool_name=ToolName.delete_repository, tool_args={"owner": "acme", "name": "old"}, approval_prompt="?")
    call = await executor.execute_approved(pending, message=message_for(), project_id=None)

    assert call.result.success
    assert call.result.data["message"] == "Deleted repository acme/old"
    assert fake_backends.repositories.calls == [("delete_repository", {"owner": "acme", "name": "old"})]


@pytest.mark.asyncio
async def test_missing_backend_is_a_failed_result(tool_deps: ToolDeps, catalog, message_for) -> None:
    deps = ToolDeps(projects=tool_deps.projects, conversations=tool_deps.conversations, backends=ToolBackends())
    executor = ToolExecutor(catalog=catalog, policy=GlobalPolicy(PolicyConfig()), deps=deps)

    call = await executor.execute_call(
        "search_domains", json.dumps({"keyword": "brewly"}), state=ConversationState.planning, message=message_for(), project_id=None
    )
    assert call.dispatched
    assert call.result.error == "domains backend not configured"

    payments = await executor.execute_call(
        "list_payment_accounts", None, state=ConversationState.chat, message=message_for(), project_id=None
    )
    assert payments.result.error == "payments backend not configured"


@pytest.mark.asyncio
async def test_done_message_does_not_touch_backend_data(executor: ToolExecutor, message_for, fake_backends) -> None:
    returned = {"deleted": True}

    async def delete_repository(*, owner: str, name: str):
        return returned

    fake_backends.repositories.delete_repository = delete_repository
    pending = PendingInvocation(tool_name=ToolName.delete_repository, tool_args={"owner": "acme", "name": "old"}, approval_prompt="?")
    call = await executor.execute_approved(pending, message=message_for(), project_id=None)

    assert call.result.data == {"deleted": True, "message": "Deleted repository acme/old"}
    assert returned == {"deleted": True}
