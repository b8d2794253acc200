"""
Project routes for the Arbor API.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.exceptions import ERROR_RESPONSES
from app.models import Project
from app.schemas import (
    DeleteResult,
    ProjectCreate,
    ProjectRead,
    ProjectUpdate,
    ProjectWithTasks,
    ProjectWithTaskTree,
)
from app.services import projects as project_service

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("", response_model=list[ProjectRead])
async def list_projects(
    session: AsyncSession = Depends(get_session),
) -> list[Project]:
    """List all projects."""
    return await project_service.list_projects(session)


@router.get("/{project_id}", response_model=ProjectWithTasks)
async def get_project(
    project_id: int,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Get a project with its tasks as a flat list."""
    return await project_service.get_project_with_tasks(session, project_id)


@router.post("", response_model=ProjectWithTasks, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_in: ProjectCreate,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Create a new project."""
    return await project_service.create_project(session, project_in)


@router.put(
    "/{project_id}",
    response_model=ProjectWithTaskTree,
    response_model_exclude_unset=True,
)
async def update_project(
    project_id: int,
    project_in: ProjectUpdate,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """
    Update a project.

    Responds with the project and its tasks nested as
    tasks -> subtasks -> actionItems -> subactionItems.
    """
    return await project_service.update_project(session, project_id, project_in)


@router.delete("/{project_id}", response_model=DeleteResult)
async def delete_project(
    project_id: int,
    session: AsyncSession = Depends(get_session),
) -> DeleteResult:
    """Delete a project and all its tasks."""
    await project_service.delete_project(session, project_id)
    return DeleteResult(success=True)
