from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship

from app.utils import utcnow

if TYPE_CHECKING:
    from app.models.task import Task


class Project(SQLModel, table=True):
    """Project model - owns a four-level task hierarchy."""

    __tablename__ = "projects"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    ws_id: int = Field(index=True)
    name: str = Field(index=True)
    description: str | None = Field(default=None)
    start_date: datetime = Field(sa_type=DateTime(timezone=False))
    end_date: datetime = Field(sa_type=DateTime(timezone=False))
    est_hours: float = Field(default=0)
    act_hours: float = Field(default=0)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=False))
    modified_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=False))

    # Relationships
    tasks: list["Task"] = Relationship(back_populates="project")
