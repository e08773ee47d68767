from fastapi import APIRouter, Depends, Response, status

from tasktracker.api.deps import IdPath, get_current_user, get_task_filters, get_task_repository
from tasktracker.models.user import User
from tasktracker.schemas.common import Page
from tasktracker.schemas.task import TaskCreate, TaskFilters, TaskRead, TaskUpdate
from tasktracker.services.tasks import TaskRepository

router = APIRouter()


@router.get("", response_model=Page[TaskRead])
def list_tasks(
    filters: TaskFilters = Depends(get_task_filters),
    current_user: User = Depends(get_current_user),
    tasks: TaskRepository = Depends(get_task_repository),
):
    return tasks.list_tasks(filters, current_user)


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(
    task_create: TaskCreate,
    current_user: User = Depends(get_current_user),
    tasks: TaskRepository = Depends(get_task_repository),
):
    return tasks.create_task(task_create, current_user)


@router.get("/{task_id}", response_model=TaskRead)
def get_task(
    task_id: IdPath,
    current_user: User = Depends(get_current_user),
    tasks: TaskRepository = Depends(get_task_repository),
):
    return tasks.get_task_for(task_id, current_user)


@router.patch("/{task_id}", response_model=TaskRead)
def update_task(
    task_id: IdPath,
    task_update: TaskUpdate,
    current_user: User = Depends(get_current_user),
    tasks: TaskRepository = Depends(get_task_repository),
):
    return tasks.update_task(task_id, task_update, current_user)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: IdPath,
    current_user: User = Depends(get_current_user),
    tasks: TaskRepository = Depends(get_task_repository),
):
    tasks.delete_task(task_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
