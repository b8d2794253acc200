from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship

from app.utils import utcnow

if TYPE_CHECKING:
    from app.models.project import Project


class Task(SQLModel, table=True):
    """
    One node of a project's task hierarchy, flattened into a single row.

    Key fields:
    - task_level: 1 = task, 2 = subtask, 3 = action item, 4 = sub-action item
    - parent_id: id of the task one level up (0 for level-1 tasks)
    - level1_id..level4_id: ancestor pointers. The field for the row's own
      level holds its own id, lower levels hold the inherited ancestor ids,
      higher levels are 0.
    - est_prev_hours / info: JSON text, decoded on read
    """

    __tablename__ = "tasks"

    id: int | None = Field(default=None, primary_key=True)
    ws_id: int = Field(index=True)
    user_id: int
    name: str
    description: str | None = Field(default=None)
    task_level: int = Field(default=1, ge=1, le=4)
    status: str = Field(default="todo")
    parent_id: int = Field(default=0, index=True)

    # Ancestor pointers
    level1_id: int = Field(default=0, index=True)
    level2_id: int = Field(default=0, index=True)
    level3_id: int = Field(default=0, index=True)
    level4_id: int = Field(default=0, index=True)

    # 0 = unassigned
    assignee1_id: int = Field(default=0)
    assignee2_id: int = Field(default=0)
    assignee3_id: int = Field(default=0)

    est_hours: float = Field(default=0)
    est_prev_hours: str = Field(default="[]")
    act_hours: float = Field(default=0)
    is_exceeded: bool = Field(default=False)
    priority: str = Field(default="low")
    due_date: datetime | None = Field(default=None, sa_type=DateTime(timezone=False))
    comments: str = Field(default="")
    task_type: str = Field(default="task")
    info: str = Field(default="{}")
    expanded: bool = Field(default=False)

    # Foreign keys
    project_id: int = Field(foreign_key="projects.id", index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=False))
    modified_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=False))

    # Relationships
    project: "Project" = Relationship(back_populates="tasks")
