"""
Task routes for the Arbor API.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.exceptions import ERROR_RESPONSES
from app.schemas import TaskCreate, TaskDeleteResult, TaskRead, TaskUpdate
from app.services import task_lifecycle

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("", response_model=list[TaskRead])
async def list_tasks(
    session: AsyncSession = Depends(get_session),
) -> list[dict]:
    """List tasks of every project."""
    return await task_lifecycle.list_tasks(session)


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_in: TaskCreate,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """
    Create a task, subtask, action item or sub-action item.

    Anything below level 1 needs a parentID pointing at a task one level up.
    """
    return await task_lifecycle.create_task(session, task_in)


@router.get("/project/{project_id}", response_model=list[TaskRead])
async def list_project_tasks(
    project_id: int,
    session: AsyncSession = Depends(get_session),
) -> list[dict]:
    """List the tasks of one project as a flat list."""
    return await task_lifecycle.list_project_tasks(session, project_id)


@router.put("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: int,
    task_in: TaskUpdate,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Update the editable fields of a task."""
    return await task_lifecycle.update_task(session, task_id, task_in)


@router.delete("/{task_id}", response_model=TaskDeleteResult)
async def delete_task(
    task_id: int,
    session: AsyncSession = Depends(get_session),
) -> TaskDeleteResult:
    """Delete a task and everything below it."""
    deleted_count = await task_lifecycle.delete_task(session, task_id)
    return TaskDeleteResult(deleted_count=deleted_count)
