from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


class TaskCreate(BaseModel):
    """Schema for creating a new task at any level of the hierarchy."""
    ws_id: int = Field(alias="wsID")
    user_id: int = Field(alias="userID")
    project_id: int = Field(alias="projectID")
    name: str = Field(min_length=1)
    description: str | None = None
    task_level: int = Field(default=1, ge=1, le=4, alias="taskLevel")
    status: str = "todo"
    parent_id: int = Field(default=0, ge=0, alias="parentID")
    assignee1_id: int = Field(default=0, alias="assignee1ID")
    assignee2_id: int = Field(default=0, alias="assignee2ID")
    assignee3_id: int = Field(default=0, alias="assignee3ID")
    est_hours: float = Field(default=0, alias="estHours")
    est_prev_hours: list[float] = Field(default_factory=list, alias="estPrevHours")
    act_hours: float = Field(default=0, alias="actHours")
    is_exceeded: bool = Field(default=False, alias="isExceeded")
    info: dict[str, Any] = Field(default_factory=dict)
    task_type: str = Field(default="task", alias="taskType")
    priority: str = "low"
    due_date: datetime | None = Field(default=None, alias="dueDate")
    comments: str = ""

    model_config = {"populate_by_name": True}


class TaskUpdate(BaseModel):
    """
    Partial update of a task.

    Only these fields can be changed after creation; anything else in the
    request body is ignored. Fields that are not sent stay untouched.
    """
    name: str | None = None
    description: str | None = None
    status: str | None = None
    assignee1_id: int | None = Field(default=None, alias="assignee1ID")
    assignee2_id: int | None = Field(default=None, alias="assignee2ID")
    assignee3_id: int | None = Field(default=None, alias="assignee3ID")
    est_hours: float | None = Field(default=None, alias="estHours")
    act_hours: float | None = Field(default=None, alias="actHours")
    priority: str | None = None
    due_date: datetime | None = Field(default=None, alias="dueDate")
    comments: str | None = None
    task_type: str | None = Field(default=None, alias="taskType")
    expanded: bool | None = None

    model_config = {"populate_by_name": True}

    @field_validator(
        "name", "status", "assignee1_id", "assignee2_id", "assignee3_id",
        "est_hours", "act_hours", "priority", "comments", "task_type", "expanded",
    )
    @classmethod
    def reject_null(cls, v):
        """Only description and dueDate may be cleared with null."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class TaskRead(BaseModel):
    """Schema for reading a task with its JSON fields decoded."""
    id: int
    ws_id: int = Field(alias="wsID")
    user_id: int = Field(alias="userID")
    project_id: int = Field(alias="projectID")
    name: str
    description: str | None = None
    task_level: int = Field(alias="taskLevel")
    status: str
    parent_id: int = Field(alias="parentID")
    level1_id: int = Field(alias="level1ID")
    level2_id: int = Field(alias="level2ID")
    level3_id: int = Field(alias="level3ID")
    level4_id: int = Field(alias="level4ID")
    assignee1_id: int = Field(alias="assignee1ID")
    assignee2_id: int = Field(alias="assignee2ID")
    assignee3_id: int = Field(alias="assignee3ID")
    est_hours: float = Field(alias="estHours")
    est_prev_hours: list[float] = Field(alias="estPrevHours")
    act_hours: float = Field(alias="actHours")
    is_exceeded: bool = Field(alias="isExceeded")
    priority: str
    due_date: datetime | None = Field(default=None, alias="dueDate")
    comments: str
    task_type: str = Field(alias="taskType")
    info: dict[str, Any]
    expanded: bool
    created_at: datetime = Field(alias="createdAt")
    modified_at: datetime = Field(alias="modifiedAt")

    model_config = {"from_attributes": True, "populate_by_name": True}


class TaskTreeNode(TaskRead):
    """A task with its children; which field is set depends on the level."""
    subtasks: Optional[list["TaskTreeNode"]] = None
    action_items: Optional[list["TaskTreeNode"]] = Field(default=None, alias="actionItems")
    subaction_items: Optional[list["TaskTreeNode"]] = Field(default=None, alias="subactionItems")


TaskTreeNode.model_rebuild()


class TaskDeleteResult(BaseModel):
    success: bool = True
    deleted_count: int = Field(alias="deletedCount")

    model_config = {"populate_by_name": True}
