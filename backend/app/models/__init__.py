from app.models.project import Project
from app.models.task import Task

__all__ = ["Project", "Task"]
