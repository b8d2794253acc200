#!/usr/bin/env python3
"""
Seed script to generate a project with a random four-level task hierarchy.

Every task goes through the task lifecycle service, so the ancestor
pointers are filled in exactly as they are for API-created tasks.

Usage:
    python -m scripts.seed [--tasks 20] [--clear]

Options:
    --tasks N    Number of level-1 tasks to generate (default: 20)
    --clear      Clear existing data before seeding
    --project    Name of the project to create
"""

import argparse
import asyncio
import random
import time
from datetime import datetime, timedelta

from sqlalchemy import delete, func
from sqlmodel import select

from app.database import async_session_maker, init_db
from app.models import Project, Task
from app.schemas import ProjectCreate, TaskCreate
from app.services.hierarchy import MAX_TASK_LEVEL
from app.services.projects import create_project
from app.services.task_lifecycle import create_task

USER_ID = 1
WS_ID = 1
STATUSES = ["todo", "in_progress", "done"]
PRIORITIES = ["low", "medium", "high"]


async def clear_data():
    """Clear all existing data."""
    print("Clearing existing data...")
    async with async_session_maker() as session:
        await session.execute(delete(Task))
        await session.execute(delete(Project))
        await session.commit()
    print("Data cleared.")


async def seed_children(session, project_id: int, parent: dict, counter: list[int]) -> None:
    """Create 0-3 children under parent, recursing down to level 4."""
    level = parent["task_level"] + 1
    if level > MAX_TASK_LEVEL:
        return

    for i in range(random.randint(0, 3)):
        child = await create_task(session, TaskCreate(
            ws_id=WS_ID,
            user_id=USER_ID,
            project_id=project_id,
            name=f"{parent['name']}.{i + 1}",
            task_level=level,
            parent_id=parent["id"],
            status=random.choice(STATUSES),
            priority=random.choice(PRIORITIES),
            est_hours=random.randint(1, 16),
        ))
        counter[0] += 1
        if level < MAX_TASK_LEVEL:
            await seed_children(session, project_id, child, counter)


async def seed_project(name: str, num_tasks: int) -> tuple[int, int]:
    """Create the project and its hierarchy. Returns (project id, task count)."""
    counter = [0]
    start = datetime(2025, 1, 1, 9, 0, 0)

    async with async_session_maker() as session:
        project = await create_project(session, ProjectCreate(
            user_id=USER_ID,
            ws_id=WS_ID,
            name=name,
            description="Generated by the seed script",
            start_date=start,
            end_date=start + timedelta(days=90),
        ))

        for i in range(num_tasks):
            task = await create_task(session, TaskCreate(
                ws_id=WS_ID,
                user_id=USER_ID,
                project_id=project["id"],
                name=f"Task {i + 1}",
                due_date=start + timedelta(days=random.randint(7, 90)),
                est_hours=random.randint(4, 40),
            ))
            counter[0] += 1
            await seed_children(session, project["id"], task, counter)

    return project["id"], counter[0]


async def get_stats(project_id: int):
    """Print task counts per level."""
    async with async_session_maker() as session:
        result = await session.execute(
            select(Task.task_level, func.count())
            .where(Task.project_id == project_id)
            .group_by(Task.task_level)
            .order_by(Task.task_level)
        )

        print(f"\n=== Hierarchy Statistics ===")
        for level, count in result.all():
            print(f"Level {level}: {count}")


async def main():
    parser = argparse.ArgumentParser(description="Seed the database with a task hierarchy")
    parser.add_argument("--tasks", type=int, default=20, help="Number of level-1 tasks to create")
    parser.add_argument("--clear", action="store_true", help="Clear existing data first")
    parser.add_argument("--project", type=str, default="Seeded Project", help="Project name")

    args = parser.parse_args()

    print(f"=== Arbor Seed Script ===")

    await init_db()

    if args.clear:
        await clear_data()

    start_time = time.time()
    project_id, total = await seed_project(args.project, args.tasks)
    print(f"Created {total} tasks in {time.time() - start_time:.2f}s")

    await get_stats(project_id)

    print(f"\n=== Seeding Complete ===")
    print(f"Project ID: {project_id}")


if __name__ == "__main__":
    asyncio.run(main())
