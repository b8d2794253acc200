from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from app.schemas.task import TaskRead, TaskTreeNode


class ProjectCreate(BaseModel):
    """Schema for creating a new project."""
    user_id: int = Field(alias="userID", gt=0)
    ws_id: int = Field(alias="wsID", gt=0)
    name: str = Field(min_length=1)
    description: str | None = None
    start_date: datetime = Field(alias="startDate")
    end_date: datetime = Field(alias="endDate")
    est_hours: float = Field(default=0, alias="estHours")
    act_hours: float = Field(default=0, alias="actHours")

    model_config = {"populate_by_name": True}


class ProjectUpdate(BaseModel):
    """Schema for updating a project. Only fields that are sent are applied."""
    user_id: int | None = Field(default=None, alias="userID")
    ws_id: int | None = Field(default=None, alias="wsID")
    name: str | None = None
    description: str | None = None
    start_date: datetime | None = Field(default=None, alias="startDate")
    end_date: datetime | None = Field(default=None, alias="endDate")
    est_hours: float | None = Field(default=None, alias="estHours")
    act_hours: float | None = Field(default=None, alias="actHours")

    model_config = {"populate_by_name": True}

    @field_validator(
        "user_id", "ws_id", "name", "start_date", "end_date", "est_hours", "act_hours",
    )
    @classmethod
    def reject_null(cls, v):
        """Only description may be cleared with null."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class ProjectRead(BaseModel):
    """Schema for reading a project."""
    id: int
    user_id: int = Field(alias="userID")
    ws_id: int = Field(alias="wsID")
    name: str
    description: str | None
    start_date: datetime = Field(alias="startDate")
    end_date: datetime = Field(alias="endDate")
    est_hours: float = Field(alias="estHours")
    act_hours: float = Field(alias="actHours")
    created_at: datetime = Field(alias="createdAt")
    modified_at: datetime = Field(alias="modifiedAt")

    model_config = {"from_attributes": True, "populate_by_name": True}


class ProjectWithTasks(ProjectRead):
    """Project with its tasks as a flat list."""
    tasks: list[TaskRead] = []


class ProjectWithTaskTree(ProjectRead):
    """Project with its tasks nested by level."""
    tasks: list[TaskTreeNode] = []


class DeleteResult(BaseModel):
    success: bool = True
