"""
Task lifecycle: create, update and delete tasks in the hierarchy.

Every mutation runs as a single transaction (see app.database.atomic),
so the insert-then-patch on create and the subtree delete are never
observable half-done.
"""

import json
from typing import Any, Iterable

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.database import atomic
from app.exceptions import InvalidParentError, InvalidRequestError, NotFoundError
from app.logging_config import get_logger
from app.models import Project, Task
from app.schemas import TaskCreate, TaskUpdate
from app.services.hierarchy import (
    compute_ancestor_pointers,
    decode_stored_fields,
    encode_stored_fields,
    level_field,
)
from app.utils import to_storage_timestamp, utcnow

logger = get_logger(__name__)


async def create_task(session: AsyncSession, task_in: TaskCreate) -> dict[str, Any]:
    """
    Create a task at any level of the hierarchy.

    The row is inserted first and then patched so that the ancestor
    pointer for its own level holds its generated id.

    Raises:
        NotFoundError: the project does not exist
        InvalidParentError: level > 1 and the parent is missing, in another
            project, or not exactly one level above
        InvalidRequestError: a level-1 task was given a parent
    """
    if task_in.task_level == 1 and task_in.parent_id:
        raise InvalidRequestError("Top-level tasks cannot have a parent")

    async with atomic(session, "create task"):
        project = await session.get(Project, task_in.project_id)
        if not project:
            raise NotFoundError("Project", task_in.project_id)

        parent = None
        if task_in.task_level > 1:
            parent = await session.get(Task, task_in.parent_id) if task_in.parent_id else None
            if parent is None:
                raise InvalidParentError(task_in.parent_id)
            if parent.project_id != task_in.project_id:
                raise InvalidParentError(task_in.parent_id, "Parent task belongs to another project")
            if parent.task_level != task_in.task_level - 1:
                raise InvalidParentError(
                    task_in.parent_id,
                    f"A level {task_in.task_level} task needs a level {task_in.task_level - 1} parent",
                )

        pointers = compute_ancestor_pointers(
            parent.model_dump() if parent else None,
            task_in.task_level,
        )

        values = encode_stored_fields(task_in.model_dump())
        values["due_date"] = to_storage_timestamp(values["due_date"])
        values.update(pointers)

        task = Task(**values)
        session.add(task)
        await session.flush()

        setattr(task, level_field(task.task_level), task.id)
        await session.flush()
        await session.refresh(task)

    logger.info(
        f"Created task: id={task.id} level={task.task_level} "
        f"parent={task.parent_id} project={task.project_id}"
    )

    return decode_stored_fields(task.model_dump())


async def update_task(
    session: AsyncSession,
    task_id: int,
    task_in: TaskUpdate,
) -> dict[str, Any]:
    """
    Apply a partial update to a task.

    When est_hours changes on a task below level 1, est_prev_hours is set
    to a one-element list holding the previous estimate. Earlier history
    is not kept.
    """
    async with atomic(session, "update task"):
        task = await session.get(Task, task_id)
        if not task:
            raise NotFoundError("Task", task_id)

        update_data = task_in.model_dump(exclude_unset=True)
        if not update_data:
            raise InvalidRequestError("No valid fields to update")

        logger.info(f"Updating task {task_id}: {update_data}")

        if "est_hours" in update_data and task.task_level > 1:
            task.est_prev_hours = json.dumps([task.est_hours])

        if "due_date" in update_data:
            update_data["due_date"] = to_storage_timestamp(update_data["due_date"])

        for field, value in update_data.items():
            setattr(task, field, value)

        task.modified_at = utcnow()
        await session.flush()
        await session.refresh(task)

    return decode_stored_fields(task.model_dump())


def collect_subtree_ids(
    root_id: int,
    pointer_field: str,
    rows: Iterable[dict[str, Any]],
) -> set[int]:
    """
    Ids of root_id and every task whose pointer_field leads back to it.

    Fixed-point closure: keep adding rows whose pointer is already in the
    set until a full pass adds nothing. The candidate rows are finite and
    the set only grows, so this terminates.
    """
    rows = list(rows)
    subtree = {root_id}

    while True:
        added = {
            row["id"]
            for row in rows
            if row[pointer_field] in subtree and row["id"] not in subtree
        }
        if not added:
            return subtree
        subtree |= added


async def delete_task(session: AsyncSession, task_id: int) -> int:
    """
    Delete a task together with all of its descendants.

    Returns:
        Number of rows deleted (the task itself included)
    """
    async with atomic(session, "delete task"):
        task = await session.get(Task, task_id)
        if not task:
            raise NotFoundError("Task", task_id)

        pointer_field = level_field(task.task_level)
        pointer_column = getattr(Task, pointer_field)

        result = await session.execute(
            select(Task.id, pointer_column).where(Task.project_id == task.project_id)
        )
        candidates = [{"id": row[0], pointer_field: row[1]} for row in result.all()]

        subtree_ids = collect_subtree_ids(task.id, pointer_field, candidates)

        logger.info(
            f"Deleting task {task_id} (level {task.task_level}) "
            f"with {len(subtree_ids) - 1} descendants"
        )

        await session.execute(delete(Task).where(Task.id.in_(sorted(subtree_ids))))

    return len(subtree_ids)


async def list_tasks(session: AsyncSession) -> list[dict[str, Any]]:
    """All tasks across projects, decoded."""
    result = await session.execute(select(Task).order_by(Task.id))
    tasks = [decode_stored_fields(task.model_dump()) for task in result.scalars().all()]

    logger.debug(f"Listed {len(tasks)} tasks")

    return tasks


async def list_project_tasks(session: AsyncSession, project_id: int) -> list[dict[str, Any]]:
    """Flat, decoded task list of one project."""
    project = await session.get(Project, project_id)
    if not project:
        raise NotFoundError("Project", project_id)

    result = await session.execute(
        select(Task).where(Task.project_id == project_id).order_by(Task.id)
    )
    tasks = [decode_stored_fields(task.model_dump()) for task in result.scalars().all()]

    logger.debug(f"Listed {len(tasks)} tasks for project={project_id}")

    return tasks
