from app.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectRead,
    ProjectWithTasks,
    ProjectWithTaskTree,
    DeleteResult,
)
from app.schemas.task import TaskCreate, TaskUpdate, TaskRead, TaskTreeNode, TaskDeleteResult

__all__ = [
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectRead",
    "ProjectWithTasks",
    "ProjectWithTaskTree",
    "DeleteResult",
    "TaskCreate",
    "TaskUpdate",
    "TaskRead",
    "TaskTreeNode",
    "TaskDeleteResult",
]
