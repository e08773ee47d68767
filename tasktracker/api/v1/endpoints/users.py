from fastapi import APIRouter, Depends

from tasktracker.api.deps import (
    IdPath,
    get_current_admin,
    get_task_filters,
    get_task_repository,
    get_user_directory,
    get_user_filters,
)
from tasktracker.core.errors import NotFoundError
from tasktracker.models.user import User
from tasktracker.schemas.common import Page
from tasktracker.schemas.task import TaskFilters, TaskRead
from tasktracker.schemas.user import (
    UserFilters,
    UserRead,
    UserUpdate,
    UserWithTaskCount,
    to_user_read,
)
from tasktracker.services.tasks import TaskRepository
from tasktracker.services.users import UserDirectory

# Every route here is admin-only
router = APIRouter()


@router.get("", response_model=Page[UserWithTaskCount])
def list_users(
    filters: UserFilters = Depends(get_user_filters),
    admin: User = Depends(get_current_admin),
    users: UserDirectory = Depends(get_user_directory),
):
    return users.list_users(filters)


@router.get("/{user_id}/tasks", response_model=Page[TaskRead])
def list_user_tasks(
    user_id: IdPath,
    filters: TaskFilters = Depends(get_task_filters),
    admin: User = Depends(get_current_admin),
    users: UserDirectory = Depends(get_user_directory),
    tasks: TaskRepository = Depends(get_task_repository),
):
    if users.get_user(user_id) is None:
        raise NotFoundError("User not found")
    scoped = filters.model_copy(update={"assigned_to_user_id": user_id})
    return tasks.list_tasks(scoped, admin)


@router.patch("/{user_id}", response_model=UserRead)
def update_user(
    user_id: IdPath,
    user_update: UserUpdate,
    admin: User = Depends(get_current_admin),
    users: UserDirectory = Depends(get_user_directory),
):
    return to_user_read(users.update_user(user_id, user_update))
