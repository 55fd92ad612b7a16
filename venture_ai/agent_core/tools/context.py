from __future__ import annotations

"""Context tools: orientation across projects, history search and chat-server lookup."""

from typing import List, Optional

from pydantic import Field

from ..schemas.domain import ProjectStatus, ToolName, ToolResult
from .base import FunctionTool, NoArgs, ToolArgs, ToolContext, fail, ok
from .project import project_summary


class SearchHistoryArgs(ToolArgs):
    query: str = Field(min_length=1, description="Search term or topic to find in past conversations")
    limit: int = Field(default=10, ge=1, le=50, description="Maximum number of matches")


class ServerInfoArgs(ToolArgs):
    server_id: Optional[str] = Field(default=None, description="Chat server ID (defaults to the current server)")


async def get_overview(ctx: ToolContext, args: NoArgs) -> ToolResult:
    projects = [p for p in await ctx.deps.projects.list_projects() if p.status != ProjectStatus.deleted]
    by_status = {}
    for p in projects:
        by_status[p.status.value] = by_status.get(p.status.value, 0) + 1
    current = None
    if ctx.project_id:
        project = await ctx.deps.projects.get_project(ctx.project_id)
        current = project_summary(project) if project is not None else None
    return ok(
        {
            "total_projects": len(projects),
            "by_status": by_status,
            "current_project": current,
            "projects": [project_summary(p) for p in projects],
        }
    )


async def search_history(ctx: ToolContext, args: SearchHistoryArgs) -> ToolResult:
    matches = await ctx.deps.conversations.search_history(args.query, limit=args.limit)
    return ok(
        {
            "query": args.query,
            "count": len(matches),
            "results": [
                {
                    "conversation": m.context_key,
                    "role": m.message.role.value,
                    "author": m.message.author_name,
                    "content": m.message.content[:300],
                    "timestamp": m.message.timestamp.isoformat(),
                }
                for m in matches
            ],
        }
    )


async def get_server_info(ctx: ToolContext, args: ServerInfoArgs) -> ToolResult:
    server_id = args.server_id or ctx.server_id
    if not server_id:
        return fail("no chat server in this context")
    project = await ctx.deps.projects.find_by_chat_server(server_id)
    return ok(
        {
            "server_id": server_id,
            "project": project_summary(project) if project is not None else None,
            "message": (
                f"This server belongs to project {project.name}"
                if project is not None
                else "This server is not linked to any project"
            ),
        }
    )


def context_tools() -> List[FunctionTool]:
    return [
        FunctionTool(
            ToolName.get_overview,
            "Get an overview of all projects and their resources. Use this to orient yourself or answer "
            "questions like 'what projects do we have'.",
            NoArgs,
            get_overview,
        ),
        FunctionTool(
            ToolName.search_history,
            "Search conversation history for past discussions about a topic, to recall previous decisions.",
            SearchHistoryArgs,
            search_history,
        ),
        FunctionTool(
            ToolName.get_server_info,
            "Get information about the current chat server and the project it belongs to.",
            ServerInfoArgs,
            get_server_info,
        ),
    ]
