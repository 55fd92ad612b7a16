"""
Project API Endpoints.

Read-only access to the projects the agent manages.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException

from venture_ai.agent_core.schemas.domain import Project, ProjectStatus
from venture_ai.server.services.deps import ProjectStoreDep

router = APIRouter()


@router.get(
    "/",
    response_model=List[Project],
    summary="List Projects",
    description="List projects, newest first, optionally filtered by status.",
)
async def list_projects(projects: ProjectStoreDep, status: Optional[ProjectStatus] = None) -> List[Project]:
    return await projects.list_projects(status=status)


@router.get(
    "/{project_id}",
    response_model=Project,
    summary="Get Project",
    description="Retrieve a single project by id.",
    responses={404: {"description": "Project not found"}},
)
async def get_project(project_id: str, projects: ProjectStoreDep) -> Project:
    project = await projects.get_project(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail=f"Project {project_id} not found")
    return project
