"""
Project aggregate: a project together with its task hierarchy.
"""

from typing import Any

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.database import atomic
from app.exceptions import InvalidRequestError, NotFoundError
from app.logging_config import get_logger
from app.models import Project, Task
from app.schemas import ProjectCreate, ProjectUpdate
from app.services.hierarchy import build_tree, decode_stored_fields
from app.utils import to_storage_timestamp, utcnow

logger = get_logger(__name__)

DATE_FIELDS = ("start_date", "end_date")


async def _project_tasks(session: AsyncSession, project_id: int) -> list[dict[str, Any]]:
    result = await session.execute(
        select(Task).where(Task.project_id == project_id).order_by(Task.id)
    )
    return [decode_stored_fields(task.model_dump()) for task in result.scalars().all()]


async def create_project(session: AsyncSession, project_in: ProjectCreate) -> dict[str, Any]:
    """Create a project. New projects have no tasks yet."""
    values = project_in.model_dump()
    for field in DATE_FIELDS:
        values[field] = to_storage_timestamp(values[field])

    async with atomic(session, "create project"):
        project = Project(**values)
        session.add(project)
        await session.flush()
        await session.refresh(project)

    logger.info(f"Created project: id={project.id} name='{project.name}' ws={project.ws_id}")

    return {**project.model_dump(), "tasks": []}


async def list_projects(session: AsyncSession) -> list[Project]:
    result = await session.execute(select(Project).order_by(Project.id))
    projects = list(result.scalars().all())

    logger.debug(f"Listed {len(projects)} projects")

    return projects


async def get_project_with_tasks(session: AsyncSession, project_id: int) -> dict[str, Any]:
    """Project with its tasks as a flat list."""
    project = await session.get(Project, project_id)
    if not project:
        raise NotFoundError("Project", project_id)

    tasks = await _project_tasks(session, project_id)
    return {**project.model_dump(), "tasks": tasks}


async def update_project(
    session: AsyncSession,
    project_id: int,
    project_in: ProjectUpdate,
) -> dict[str, Any]:
    """
    Apply a partial update to a project.

    Unlike get_project_with_tasks, the response nests the tasks into
    their hierarchy.
    """
    update_data = project_in.model_dump(exclude_unset=True)
    if not update_data:
        raise InvalidRequestError("No valid fields to update")

    for field in DATE_FIELDS:
        if field in update_data:
            update_data[field] = to_storage_timestamp(update_data[field])

    async with atomic(session, "update project"):
        project = await session.get(Project, project_id)
        if not project:
            raise NotFoundError("Project", project_id)

        logger.info(f"Updating project {project_id}: {update_data}")

        for field, value in update_data.items():
            setattr(project, field, value)

        project.modified_at = utcnow()
        await session.flush()
        await session.refresh(project)

    tasks = await _project_tasks(session, project_id)
    return {**project.model_dump(), "tasks": build_tree(tasks)}


async def delete_project(session: AsyncSession, project_id: int) -> None:
    """Delete a project and all of its tasks, or nothing at all."""
    async with atomic(session, "delete project"):
        tasks_result = await session.execute(delete(Task).where(Task.project_id == project_id))
        project_result = await session.execute(delete(Project).where(Project.id == project_id))

        if project_result.rowcount == 0:
            raise NotFoundError("Project", project_id)

    logger.info(f"Deleted project {project_id} with {tasks_result.rowcount} tasks")
