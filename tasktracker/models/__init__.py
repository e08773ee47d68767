# Importing every table model here registers them all on SQLModel.metadata
from .user import User, UserRole
from .session import UserSession
from .task_status import TaskStatus
from .task import Task, TaskPriority

__all__ = ["User", "UserRole", "UserSession", "TaskStatus", "Task", "TaskPriority"]
