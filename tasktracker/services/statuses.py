from typing import Iterable, List, Optional

from sqlmodel import Session, func, select

from ..core.clock import utcnow
from ..core.errors import ConflictError, NotFoundError
from ..core.logger import setup_logger
from ..models.task import Task
from ..models.task_status import TaskStatus, normalize_status_name
from .base import commit_or_conflict

logger = setup_logger("statuses")

DUPLICATE_NAME_MESSAGE = "Status name already exists"
IN_USE_MESSAGE = "Status is assigned to tasks and cannot be deleted"


class StatusRegistry:
    """CRUD over the admin-managed set of task statuses."""

    def __init__(self, session: Session):
        self.session = session

    def list_statuses(self) -> List[TaskStatus]:
        return self.session.exec(select(TaskStatus).order_by(TaskStatus.id)).all()

    def get_status(self, status_id: int) -> Optional[TaskStatus]:
        return self.session.get(TaskStatus, status_id)

    def find_status_by_name(self, name: str) -> Optional[TaskStatus]:
        statement = select(TaskStatus).where(
            TaskStatus.normalized_name == normalize_status_name(name)
        )
        return self.session.exec(statement).first()

    def default_status_id(self) -> Optional[int]:
        return self.session.exec(
            select(TaskStatus.id).order_by(TaskStatus.id).limit(1)
        ).first()

    def count_tasks_using(self, status_id: int) -> int:
        return self.session.exec(
            select(func.count(Task.id)).where(Task.status_id == status_id)
        ).one()

    def create_status(self, name: str) -> TaskStatus:
        if self.find_status_by_name(name):
            raise ConflictError(DUPLICATE_NAME_MESSAGE)

        status = TaskStatus(name=name, normalized_name=normalize_status_name(name))
        self.session.add(status)
        # The unique index on normalized_name catches concurrent creations
        commit_or_conflict(self.session, DUPLICATE_NAME_MESSAGE)
        self.session.refresh(status)
        logger.info(f"Created task status {status.id} '{status.name}'")
        return status

    def rename_status(self, status_id: int, name: str) -> TaskStatus:
        status = self.get_status(status_id)
        if status is None:
            raise NotFoundError("Status not found")

        duplicate = self.find_status_by_name(name)
        if duplicate and duplicate.id != status_id:
            raise ConflictError(DUPLICATE_NAME_MESSAGE)

        status.name = name
        status.normalized_name = normalize_status_name(name)
        status.updated_at = utcnow()
        self.session.add(status)
        commit_or_conflict(self.session, DUPLICATE_NAME_MESSAGE)
        self.session.refresh(status)
        return status

    def delete_status(self, status_id: int) -> None:
        status = self.get_status(status_id)
        if status is None:
            raise NotFoundError("Status not found")

        if self.count_tasks_using(status_id) > 0:
            raise ConflictError(IN_USE_MESSAGE)

        self.session.delete(status)
        # tasks.status_id is ON DELETE RESTRICT, so a task created meanwhile still blocks this
        commit_or_conflict(self.session, IN_USE_MESSAGE)
        logger.info(f"Deleted task status {status_id}")

    def ensure_default_statuses(self, names: Iterable[str]) -> List[TaskStatus]:
        """Seed ``names`` when the registry is empty; leave existing sets untouched."""
        if self.default_status_id() is not None:
            return []
        created = [self.create_status(name) for name in names]
        if created:
            logger.info(f"Seeded default task statuses: {[s.name for s in created]}")
        return created
