from __future__ import annotations

"""Chat platform tools (``backends.chat``)."""

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, Field

from ..schemas.domain import ChatServerResource, ResourceCategory, ToolName
from .backends import DelegatingTool
from .base import NoArgs, ToolArgs, ToolContext
from .gated import DestructiveTool, ProvisioningTool


class CreateServerArgs(ToolArgs):
    name: str = Field(min_length=1, max_length=100, description="Server name")
    project_id: Optional[str] = Field(default=None, description="Project to link the server to")


class ServerRef(ToolArgs):
    server_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("server_id", "id"),
        description="Chat server ID",
    )


class SetupChannelsArgs(ServerRef):
    channels: List[str] = Field(
        default_factory=lambda: ["announcements", "general", "development", "support"],
        description="Text channels to create",
    )


class InviteUsersArgs(ServerRef):
    user_ids: List[str] = Field(min_length=1, description="Users to invite")


async def _link_server(ctx: ToolContext, project_id: str, data: Dict[str, Any], args: Any) -> None:
    server_id = str(data.get("server_id") or data.get("id") or "")
    await ctx.deps.projects.link_chat_server(
        project_id,
        ChatServerResource(server_id=server_id, name=str(data.get("name") or args.name), invite_url=data.get("invite_url")),
    )


def chat_tools() -> List[DelegatingTool]:
    group = "chat"
    return [
        ProvisioningTool(
            ToolName.create_server,
            "Create a new chat server for a project. REQUIRES HUMAN APPROVAL unless chat servers are approved for the project.",
            CreateServerArgs,
            group,
            category=ResourceCategory.chat_server,
            prompt=lambda a: f"I'd like to create a new chat server called **{a.name}**. Do you approve?",
            done=lambda a: f"Created chat server {a.name}",
            link=_link_server,
        ),
        DelegatingTool(ToolName.setup_channels, "Create the standard channels on a chat server", SetupChannelsArgs, group),
        DelegatingTool(ToolName.invite_users, "Invite users to a chat server", InviteUsersArgs, group),
        DelegatingTool(ToolName.list_servers, "List chat servers the bot is a member of", NoArgs, group),
        DestructiveTool(
            ToolName.delete_server,
            "Permanently delete a chat server. REQUIRES HUMAN APPROVAL every time.",
            ServerRef,
            group,
            prompt=lambda a: f"**DANGER**: I'm about to permanently delete chat server **{a.server_id}**. Do you approve?",
            done=lambda a: f"Deleted chat server {a.server_id}",
        ),
    ]
