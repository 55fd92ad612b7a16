from __future__ import annotations

"""Project store.

Write-through cache over a ``ProjectRepository`` with the project operations
the tools need: planning notes, lifecycle status, resource links and
standing approvals per resource category.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..repos.interfaces import ProjectRepository
from ..schemas.domain import (
    ChatServerResource,
    DomainResource,
    Project,
    ProjectIdea,
    ProjectStatus,
    RepositoryResource,
    ResearchNote,
    ResourceCategory,
    StandingApproval,
)

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProjectNotFoundError(LookupError):
    def __init__(self, project_id: str) -> None:
        self.project_id = project_id
        super().__init__(f"project not found: {project_id}")


class ProjectStore:
    def __init__(self, repo: ProjectRepository) -> None:
        self._repo = repo
        self._cache: Dict[str, Project] = {}

    async def create_project(
        self,
        *,
        name: str,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
        thread_id: Optional[str] = None,
    ) -> Project:
        project = Project(name=name, description=description, created_by=created_by, thread_id=thread_id)
        await self._save(project)
        logger.info("Created project %s (%s)", project.name, project.id)
        return project

    async def get_project(self, project_id: str) -> Optional[Project]:
        cached = self._cache.get(project_id)
        if cached is not None:
            return cached
        project = await self._repo.get(project_id)
        if project is not None:
            self._cache[project.id] = project
        return project

    async def require_project(self, project_id: str) -> Project:
        project = await self.get_project(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    async def find_by_thread(self, thread_id: str) -> Optional[Project]:
        return await self._repo.find_by_thread(thread_id)

    async def find_by_chat_server(self, server_id: str) -> Optional[Project]:
        return await self._repo.find_by_chat_server(server_id)

    async def list_projects(self, *, status: Optional[ProjectStatus] = None) -> List[Project]:
        return await self._repo.list(status=status)

    async def update_project(self, project: Project) -> Project:
        project.updated_at = _utc_now()
        await self._save(project)
        return project

    async def add_idea(self, project_id: str, text: str, *, author: Optional[str] = None) -> Project:
        project = await self.require_project(project_id)
        project.planning.ideas.append(ProjectIdea(text=text, author=author))
        return await self.update_project(project)

    async def add_research(
        self, project_id: str, *, topic: str, summary: str, sources: Optional[List[str]] = None
    ) -> Project:
        project = await self.require_project(project_id)
        project.planning.research.append(ResearchNote(topic=topic, summary=summary, sources=list(sources or [])))
        return await self.update_project(project)

    async def set_business_plan(self, project_id: str, plan: str) -> Project:
        project = await self.require_project(project_id)
        project.planning.business_plan = plan
        return await self.update_project(project)

    async def set_status(self, project_id: str, status: ProjectStatus) -> Project:
        project = await self.require_project(project_id)
        project.status = status
        return await self.update_project(project)

    async def link_domain(self, project_id: str, domain: DomainResource) -> Project:
        project = await self.require_project(project_id)
        project.resources.domain = domain
        return await self.update_project(project)

    async def link_repository(self, project_id: str, repository: RepositoryResource) -> Project:
        project = await self.require_project(project_id)
        project.resources.repository = repository
        return await self.update_project(project)

    async def link_chat_server(self, project_id: str, server: ChatServerResource) -> Project:
        project = await self.require_project(project_id)
        project.resources.chat_server = server
        return await self.update_project(project)

    async def has_standing_approval(self, project_id: str, category: ResourceCategory) -> bool:
        project = await self.get_project(project_id)
        if project is None:
            return False
        approval = project.planning.approvals.get(category)
        return approval is not None and approval.approved

    async def set_standing_approval(
        self, project_id: str, category: ResourceCategory, *, approved_by: Optional[str]
    ) -> Project:
        """Record a standing approval; it is never revoked automatically."""
        project = await self.require_project(project_id)
        project.planning.approvals[category] = StandingApproval(
            approved=True, approved_by=approved_by, approved_at=_utc_now()
        )
        logger.info("Standing approval for %s granted on project %s by %s", category.value, project_id, approved_by)
        return await self.update_project(project)

    async def _save(self, project: Project) -> None:
        await self._repo.save(project)
        self._cache[project.id] = project
