"""
Task repository and query engine.

Every read and write is scoped by the access-control policy: non-admins only
ever see or touch the tasks assigned to them. Mutations re-read the stored
task and check access against its current assignee, never a value taken from
the request body.
"""

from typing import Optional

from sqlalchemy import case, or_
from sqlalchemy.orm import aliased
from sqlmodel import Session, col, func, select

from ..core.clock import utcnow
from ..core.errors import BadRequestError, NotFoundError, PermissionDeniedError
from ..core.logger import setup_logger
from ..core.permissions import can_access_task, can_assign, is_admin
from ..models.task import PRIORITY_RANK, Task
from ..models.task_status import TaskStatus
from ..models.user import User
from ..schemas.common import Page
from ..schemas.task import SortOrder, TaskCreate, TaskFilters, TaskRead, TaskSortField, TaskUpdate
from .base import escape_like
from .statuses import StatusRegistry

logger = setup_logger("tasks")

Assignee = aliased(User, name="assignee")
Creator = aliased(User, name="creator")

SORT_COLUMNS = {
    TaskSortField.created_at: Task.created_at,
    TaskSortField.due_date: Task.due_date,
    TaskSortField.title: Task.title,
    TaskSortField.priority: case(PRIORITY_RANK, value=Task.priority),
}


def _row_to_task_read(row) -> TaskRead:
    task, status_name, assignee_name, creator_name = row
    return TaskRead(
        id=task.id,
        title=task.title,
        description=task.description,
        priority=task.priority,
        due_date=task.due_date,
        status_id=task.status_id,
        status_name=status_name,
        assigned_to_user_id=task.assigned_to_user_id,
        assigned_to_user_name=assignee_name,
        created_by_user_id=task.created_by_user_id,
        created_by_user_name=creator_name,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


class TaskRepository:
    def __init__(self, session: Session):
        self.session = session
        self.statuses = StatusRegistry(session)

    # --- queries ---

    def _detail_query(self):
        return (
            select(Task, TaskStatus.name, Assignee.full_name, Creator.full_name)
            .join(TaskStatus, TaskStatus.id == Task.status_id)
            .join(Assignee, Assignee.id == Task.assigned_to_user_id)
            .join(Creator, Creator.id == Task.created_by_user_id)
        )

    def _filter_conditions(self, filters: TaskFilters, principal: User) -> list:
        conditions = []

        # Non-admins are pinned to their own tasks whatever assignee filter they send
        if not is_admin(principal):
            conditions.append(Task.assigned_to_user_id == principal.id)
        elif filters.assigned_to_user_id:
            conditions.append(Task.assigned_to_user_id == filters.assigned_to_user_id)

        if filters.status_id:
            conditions.append(Task.status_id == filters.status_id)

        if filters.priority:
            conditions.append(Task.priority == filters.priority)

        if filters.search:
            pattern = f"%{escape_like(filters.search)}%"
            conditions.append(
                or_(
                    col(Task.title).ilike(pattern, escape="\\"),
                    col(Task.description).ilike(pattern, escape="\\"),
                )
            )

        return conditions

    def _ordering(self, filters: TaskFilters) -> list:
        column = SORT_COLUMNS[filters.sort_by]
        if filters.order == SortOrder.asc:
            return [column.asc(), col(Task.id).asc()]
        return [column.desc(), col(Task.id).desc()]

    def list_tasks(self, filters: TaskFilters, principal: User) -> Page[TaskRead]:
        conditions = self._filter_conditions(filters, principal)
        offset = (filters.page - 1) * filters.limit

        statement = (
            self._detail_query()
            .where(*conditions)
            .order_by(*self._ordering(filters))
            .offset(offset)
            .limit(filters.limit)
        )
        rows = self.session.exec(statement).all()
        total = self.session.exec(select(func.count(Task.id)).where(*conditions)).one()

        return Page[TaskRead](
            items=[_row_to_task_read(row) for row in rows],
            total=total,
            page=filters.page,
            limit=filters.limit,
        )

    def get_task(self, task_id: int) -> Optional[TaskRead]:
        row = self.session.exec(self._detail_query().where(Task.id == task_id)).first()
        return _row_to_task_read(row) if row else None

    def _get_record(self, task_id: int) -> Task:
        task = self.session.get(Task, task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def get_task_for(self, task_id: int, principal: User) -> TaskRead:
        task = self._get_record(task_id)
        if not can_access_task(principal, task):
            raise PermissionDeniedError("You do not have access to this task")
        return self.get_task(task_id)

    # --- validation helpers ---

    def _ensure_status_exists(self, status_id: int) -> None:
        if self.statuses.get_status(status_id) is None:
            raise BadRequestError("statusId does not exist")

    def _ensure_assignable(self, principal: User, assignee_id: int) -> None:
        if not can_assign(principal, assignee_id):
            raise PermissionDeniedError(
                "You can only assign tasks to yourself as a non-admin user"
            )
        assignee = self.session.get(User, assignee_id)
        if assignee is None or not assignee.is_active:
            raise BadRequestError("Assigned user is invalid or inactive")

    # --- mutations ---

    def create_task(self, data: TaskCreate, principal: User) -> TaskRead:
        status_id = data.status_id or self.statuses.default_status_id()
        if status_id is None:
            raise BadRequestError("No task statuses exist; create a status first")

        assignee_id = data.assigned_to_user_id or principal.id
        self._ensure_assignable(principal, assignee_id)
        self._ensure_status_exists(status_id)

        task = Task(
            title=data.title,
            description=data.description,
            priority=data.priority,
            due_date=data.due_date,
            status_id=status_id,
            assigned_to_user_id=assignee_id,
            created_by_user_id=principal.id,
        )
        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)
        logger.info(f"User {principal.id} created task {task.id} for user {assignee_id}")
        return self.get_task(task.id)

    def update_task(self, task_id: int, patch: TaskUpdate, principal: User) -> TaskRead:
        task = self._get_record(task_id)
        if not can_access_task(principal, task):
            raise PermissionDeniedError("You do not have permission to update this task")

        changes = patch.changes()
        if not changes:
            raise BadRequestError("No valid fields provided for update")

        if "status_id" in changes:
            self._ensure_status_exists(changes["status_id"])
        if "assigned_to_user_id" in changes:
            self._ensure_assignable(principal, changes["assigned_to_user_id"])

        for key, value in changes.items():
            setattr(task, key, value)
        task.updated_at = utcnow()

        self.session.add(task)
        self.session.commit()
        return self.get_task(task_id)

    def delete_task(self, task_id: int, principal: User) -> None:
        task = self._get_record(task_id)
        if not can_access_task(principal, task):
            raise PermissionDeniedError("You do not have permission to delete this task")

        self.session.delete(task)
        self.session.commit()
        logger.info(f"User {principal.id} deleted task {task_id}")

