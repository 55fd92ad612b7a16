from __future__ import annotations

"""Code-hosting tools (``backends.repositories``)."""

from typing import Any, Dict, List, Optional

from pydantic import Field

from ..schemas.domain import RepositoryResource, ResourceCategory, ToolName
from .backends import DelegatingTool
from .base import ToolArgs, ToolContext
from .gated import DestructiveTool, ProvisioningTool


class ListRepositoriesArgs(ToolArgs):
    org: Optional[str] = Field(default=None, description="Organisation to list (defaults to the configured one)")


class RepoRef(ToolArgs):
    owner: str = Field(min_length=1, description="Repository owner or organisation")
    name: str = Field(min_length=1, description="Repository name")


class CreateRepositoryArgs(ToolArgs):
    name: str = Field(min_length=1, description="Repository name")
    description: Optional[str] = Field(default=None, description="Repository description")
    private: bool = Field(default=True, description="Create a private repository")
    project_id: Optional[str] = Field(default=None, description="Project to link the repository to")


class TemplateRepositoryArgs(CreateRepositoryArgs):
    template: str = Field(min_length=1, description="Template repository as owner/name")


class ForkRepositoryArgs(RepoRef):
    new_name: Optional[str] = Field(default=None, description="Name for the fork")
    project_id: Optional[str] = Field(default=None, description="Project to link the fork to")


class CreateFileArgs(RepoRef):
    path: str = Field(min_length=1, description="File path inside the repository")
    content: str = Field(description="File content")
    message: str = Field(default="Add file", description="Commit message")


class UpdateRepositoryArgs(RepoRef):
    description: Optional[str] = None
    homepage: Optional[str] = None
    private: Optional[bool] = None


async def _link_repository(ctx: ToolContext, project_id: str, data: Dict[str, Any], args: Any) -> None:
    name = str(data.get("name") or getattr(args, "new_name", None) or args.name)
    owner = str(data.get("owner") or "")
    await ctx.deps.projects.link_repository(
        project_id, RepositoryResource(owner=owner, name=name, url=data.get("url"))
    )


def _visibility(args: Any) -> str:
    return "private" if args.private else "public"


def repository_tools() -> List[DelegatingTool]:
    group = "repositories"
    category = ResourceCategory.repository
    return [
        DelegatingTool(ToolName.list_repositories, "List repositories of the organisation", ListRepositoriesArgs, group),
        DelegatingTool(ToolName.get_repository, "Get details about a repository", RepoRef, group),
        ProvisioningTool(
            ToolName.create_repository,
            "Create a new repository for a project. REQUIRES HUMAN APPROVAL unless repositories are approved for the project.",
            CreateRepositoryArgs,
            group,
            category=category,
            prompt=lambda a: f"I'd like to create a new {_visibility(a)} repository called **{a.name}**. Do you approve?",
            done=lambda a: f"Created repository {a.name}",
            link=_link_repository,
        ),
        ProvisioningTool(
            ToolName.create_repository_from_template,
            "Create a new repository for a project from a template repository. REQUIRES HUMAN APPROVAL unless "
            "repositories are approved for the project.",
            TemplateRepositoryArgs,
            group,
            category=category,
            prompt=lambda a: (
                f"I'd like to create a new {_visibility(a)} repository called **{a.name}** "
                f"from the template **{a.template}**. Do you approve?"
            ),
            done=lambda a: f"Created repository {a.name} from {a.template}",
            link=_link_repository,
        ),
        ProvisioningTool(
            ToolName.fork_repository,
            "Fork an existing repository for a project. REQUIRES HUMAN APPROVAL unless repositories are approved "
            "for the project.",
            ForkRepositoryArgs,
            group,
            category=category,
            prompt=lambda a: (
                f"I'd like to fork **{a.owner}/{a.name}**" + (f" as **{a.new_name}**" if a.new_name else "") + ". Do you approve?"
            ),
            done=lambda a: f"Forked {a.owner}/{a.name}",
            link=_link_repository,
        ),
        DelegatingTool(ToolName.create_file, "Create or update a file in a repository", CreateFileArgs, group),
        DelegatingTool(ToolName.update_repository, "Update repository settings", UpdateRepositoryArgs, group),
        DestructiveTool(
            ToolName.delete_repository,
            "Permanently delete a repository. REQUIRES HUMAN APPROVAL every time.",
            RepoRef,
            group,
            prompt=lambda a: f"**DANGER**: I'm about to permanently delete **{a.owner}/{a.name}**. This cannot be undone! Do you approve?",
            done=lambda a: f"Deleted repository {a.owner}/{a.name}",
        ),
    ]
