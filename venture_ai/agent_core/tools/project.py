from __future__ import annotations

"""Project lifecycle tools.

These tools work purely against the project store: they track an idea from
planning notes and research through linked resources to cleanup. The
project is taken from the ``project_id`` argument, falling back to the
project linked to the conversation.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import Field

from ..approval.standing import require_turn_approval
from ..schemas.domain import (
    ChatServerResource,
    DomainResource,
    Project,
    ProjectStatus,
    RepositoryResource,
    ToolName,
    ToolResult,
)
from .backends import resolve_backend_call
from .base import FunctionTool, ToolArgs, ToolContext, fail, ok

logger = logging.getLogger(__name__)

NO_PROJECT = "no project linked to this conversation; pass project_id or create a project first"


class ProjectRef(ToolArgs):
    project_id: Optional[str] = Field(default=None, description="Project ID (defaults to the conversation's project)")


class CreateProjectArgs(ToolArgs):
    name: str = Field(min_length=1, description="Project name")
    description: Optional[str] = Field(default=None, description="Brief project description")


class ListProjectsArgs(ToolArgs):
    status: Optional[ProjectStatus] = Field(default=None, description="Filter by project status")


class AddIdeaArgs(ProjectRef):
    idea: str = Field(min_length=1, description="The idea or note to add")


class AddResearchArgs(ProjectRef):
    topic: str = Field(min_length=1, description="What was researched")
    summary: str = Field(min_length=1, description="Research findings")
    sources: List[str] = Field(default_factory=list, description="Source URLs")


class BusinessPlanArgs(ProjectRef):
    plan: str = Field(min_length=1, description="The full business plan text")


class SetStatusArgs(ProjectRef):
    status: ProjectStatus = Field(description="New status")


class LinkDomainArgs(ProjectRef):
    domain: str = Field(min_length=1, description="Domain name, e.g. example.com")


class LinkRepositoryArgs(ProjectRef):
    owner: str = Field(min_length=1, description="Repository owner or organisation")
    name: str = Field(min_length=1, description="Repository name")
    url: Optional[str] = Field(default=None, description="Repository URL")


class LinkChatServerArgs(ProjectRef):
    server_id: str = Field(min_length=1, description="Chat server ID")
    name: str = Field(min_length=1, description="Chat server name")
    invite_url: Optional[str] = Field(default=None, description="Invite link")


def resolve_project_id(ctx: ToolContext, args: Any) -> Optional[str]:
    return getattr(args, "project_id", None) or ctx.project_id


def project_summary(project: Project) -> Dict[str, Any]:
    """Compact, JSON-friendly view of a project used by tools and prompts."""
    res = project.resources
    return {
        "id": project.id,
        "name": project.name,
        "description": project.description,
        "status": project.status.value,
        "created_by": project.created_by,
        "updated_at": project.updated_at.isoformat(),
        "resources": {
            "domain": res.domain.name if res.domain else None,
            "repository": f"{res.repository.owner}/{res.repository.name}" if res.repository else None,
            "chat_server": res.chat_server.name if res.chat_server else None,
        },
        "planning": {
            "ideas": len(project.planning.ideas),
            "research": len(project.planning.research),
            "has_business_plan": bool(project.planning.business_plan),
            "approvals": {
                category.value: bool(approval.approved)
                for category, approval in project.planning.approvals.items()
            },
        },
    }


async def _load(ctx: ToolContext, args: Any) -> tuple[Optional[Project], Optional[ToolResult]]:
    project_id = resolve_project_id(ctx, args)
    if not project_id:
        return None, fail(NO_PROJECT)
    project = await ctx.deps.projects.get_project(project_id)
    if project is None:
        return None, fail(f"Project {project_id} not found")
    return project, None


async def create_project(ctx: ToolContext, args: CreateProjectArgs) -> ToolResult:
    project = await ctx.deps.projects.create_project(
        name=args.name,
        description=args.description,
        created_by=ctx.author_id,
        thread_id=ctx.context_key,
    )
    await ctx.deps.conversations.set_project_id(ctx.context_key, project.id)
    return ok(
        {
            "id": project.id,
            "name": project.name,
            "status": project.status.value,
            "message": f"Created project: {project.name} ({project.id})",
        }
    )


async def get_project(ctx: ToolContext, args: ProjectRef) -> ToolResult:
    project, err = await _load(ctx, args)
    if err is not None:
        return err
    return ok(project_summary(project))


async def list_projects(ctx: ToolContext, args: ListProjectsArgs) -> ToolResult:
    projects = await ctx.deps.projects.list_projects(status=args.status)
    return ok(
        {
            "count": len(projects),
            "filter": args.status.value if args.status else "all",
            "projects": [
                {
                    "id": p.id,
                    "name": p.name,
                    "status": p.status.value,
                    "has_resources": not p.resources.is_empty(),
                    "updated_at": p.updated_at.isoformat(),
                }
                for p in projects
            ],
        }
    )


async def add_project_idea(ctx: ToolContext, args: AddIdeaArgs) -> ToolResult:
    project, err = await _load(ctx, args)
    if err is not None:
        return err
    project = await ctx.deps.projects.add_idea(project.id, args.idea, author=ctx.author_name)
    count = len(project.planning.ideas)
    return ok({"project_id": project.id, "idea_count": count, "message": f"Added idea to project ({count} total)"})


async def add_project_research(ctx: ToolContext, args: AddResearchArgs) -> ToolResult:
    project, err = await _load(ctx, args)
    if err is not None:
        return err
    project = await ctx.deps.projects.add_research(
        project.id, topic=args.topic, summary=args.summary, sources=args.sources
    )
    count = len(project.planning.research)
    return ok(
        {"project_id": project.id, "research_count": count, "message": f"Added research to project ({count} entries)"}
    )


async def set_business_plan(ctx: ToolContext, args: BusinessPlanArgs) -> ToolResult:
    project, err = await _load(ctx, args)
    if err is not None:
        return err
    await ctx.deps.projects.set_business_plan(project.id, args.plan)
    return ok({"project_id": project.id, "message": "Business plan updated"})


async def set_project_status(ctx: ToolContext, args: SetStatusArgs) -> ToolResult:
    project, err = await _load(ctx, args)
    if err is not None:
        return err
    old_status = project.status
    await ctx.deps.projects.set_status(project.id, args.status)
    return ok(
        {
            "project_id": project.id,
            "old_status": old_status.value,
            "new_status": args.status.value,
            "message": f"Project status changed to {args.status.value}",
        }
    )


async def get_project_status(ctx: ToolContext, args: ProjectRef) -> ToolResult:
    project, err = await _load(ctx, args)
    if err is not None:
        return err
    resources: Dict[str, Any] = {}
    res = project.resources
    if res.domain is not None:
        resources["domain"] = {
            "name": res.domain.name,
            "expires_at": res.domain.expires_at.isoformat() if res.domain.expires_at else None,
        }
    if res.repository is not None:
        resources["repository"] = {"repo": f"{res.repository.owner}/{res.repository.name}", "url": res.repository.url}
    if res.chat_server is not None:
        resources["chat_server"] = {"server_id": res.chat_server.server_id, "name": res.chat_server.name}
    return ok(
        {
            "project_id": project.id,
            "name": project.name,
            "status": project.status.value,
            "resources": resources,
            "planning": {
                "ideas": len(project.planning.ideas),
                "research": len(project.planning.research),
                "has_business_plan": bool(project.planning.business_plan),
            },
        }
    )


async def link_domain(ctx: ToolContext, args: LinkDomainArgs) -> ToolResult:
    project, err = await _load(ctx, args)
    if err is not None:
        return err
    await ctx.deps.projects.link_domain(project.id, DomainResource(name=args.domain))
    return ok({"project_id": project.id, "message": f"Linked domain {args.domain} to {project.name}"})


async def link_repository(ctx: ToolContext, args: LinkRepositoryArgs) -> ToolResult:
    project, err = await _load(ctx, args)
    if err is not None:
        return err
    await ctx.deps.projects.link_repository(
        project.id, RepositoryResource(owner=args.owner, name=args.name, url=args.url)
    )
    return ok({"project_id": project.id, "message": f"Linked repository {args.owner}/{args.name} to {project.name}"})


async def link_chat_server(ctx: ToolContext, args: LinkChatServerArgs) -> ToolResult:
    project, err = await _load(ctx, args)
    if err is not None:
        return err
    await ctx.deps.projects.link_chat_server(
        project.id, ChatServerResource(server_id=args.server_id, name=args.name, invite_url=args.invite_url)
    )
    return ok({"project_id": project.id, "message": f"Linked chat server {args.name} to {project.name}"})


def _cleanup_prompt(project: Project, resources: List[str]) -> str:
    lines = "\n".join(f"- {r}" for r in resources)
    return (
        f"**Project Cleanup: {project.name}**\n\n"
        f"The following resources will be affected:\n{lines}\n\n"
        "Note:\n"
        "- Domains cannot be deleted but will not be renewed\n"
        "- Repositories will be permanently deleted\n"
        "- Chat servers will be permanently deleted\n\n"
        "Do you want to proceed with cleanup?"
    )


async def cleanup_project(ctx: ToolContext, args: ProjectRef) -> ToolResult:
    project, err = await _load(ctx, args)
    if err is not None:
        return err

    res = project.resources
    if res.is_empty():
        await ctx.deps.projects.set_status(project.id, ProjectStatus.deleted)
        return ok({"project_id": project.id, "message": "Project has no external resources. Marked as deleted."})

    affected: List[str] = []
    if res.domain is not None:
        affected.append(f"Domain: {res.domain.name}")
    if res.repository is not None:
        affected.append(f"Repository: {res.repository.owner}/{res.repository.name}")
    if res.chat_server is not None:
        affected.append(f"Chat server: {res.chat_server.name}")

    gated = require_turn_approval(ctx, _cleanup_prompt(project, affected))
    if gated is not None:
        return gated

    backends = getattr(ctx.deps, "backends", None)
    outcome: Dict[str, str] = {}
    if res.domain is not None:
        outcome["domain"] = "left to expire"
    if res.repository is not None:
        fn = resolve_backend_call(backends, "repositories", ToolName.delete_repository.value)
        if fn is None:
            outcome["repository"] = "repositories backend not configured"
        else:
            try:
                await fn(owner=res.repository.owner, name=res.repository.name)
                outcome["repository"] = "deleted"
            except Exception as exc:
                logger.warning("Cleanup of repository %s/%s failed: %s", res.repository.owner, res.repository.name, exc)
                outcome["repository"] = f"failed: {exc}"
    if res.chat_server is not None:
        fn = resolve_backend_call(backends, "chat", ToolName.delete_server.value)
        if fn is None:
            outcome["chat_server"] = "chat backend not configured"
        else:
            try:
                await fn(server_id=res.chat_server.server_id)
                outcome["chat_server"] = "deleted"
            except Exception as exc:
                logger.warning("Cleanup of chat server %s failed: %s", res.chat_server.server_id, exc)
                outcome["chat_server"] = f"failed: {exc}"

    await ctx.deps.projects.set_status(project.id, ProjectStatus.deleted)
    return ok({"project_id": project.id, "resources": outcome, "message": f"Cleaned up project {project.name}"})


def project_tools() -> List[FunctionTool]:
    return [
        FunctionTool(ToolName.create_project, "Create a new project to track a business idea", CreateProjectArgs, create_project),
        FunctionTool(ToolName.get_project, "Get details about a specific project", ProjectRef, get_project),
        FunctionTool(ToolName.list_projects, "List all projects, optionally filtered by status", ListProjectsArgs, list_projects),
        FunctionTool(ToolName.add_project_idea, "Add an idea or note to a project", AddIdeaArgs, add_project_idea),
        FunctionTool(ToolName.add_project_research, "Add research findings to a project", AddResearchArgs, add_project_research),
        FunctionTool(ToolName.set_business_plan, "Set or update the business plan for a project", BusinessPlanArgs, set_business_plan),
        FunctionTool(ToolName.set_project_status, "Update a project status", SetStatusArgs, set_project_status),
        FunctionTool(ToolName.get_project_status, "Get a summary of project health and resource status", ProjectRef, get_project_status),
        FunctionTool(ToolName.link_domain, "Link an existing domain to a project", LinkDomainArgs, link_domain),
        FunctionTool(ToolName.link_repository, "Link an existing repository to a project", LinkRepositoryArgs, link_repository),
        FunctionTool(ToolName.link_chat_server, "Link an existing chat server to a project", LinkChatServerArgs, link_chat_server),
        FunctionTool(
            ToolName.cleanup_project,
            "Clean up all resources associated with a project. REQUIRES HUMAN APPROVAL when resources exist.",
            ProjectRef,
            cleanup_project,
            destructive=True,
        ),
    ]
