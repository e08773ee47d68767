"""
Access control policy.

Pure decision functions: no store access, no side effects. Role checks compare
``UserRole`` members, so an unknown role can never pass as an admin.
"""

from typing import Optional

from ..models.task import Task
from ..models.user import User, UserRole


def is_admin(principal: User) -> bool:
    return principal.role == UserRole.admin


def can_access_task(principal: User, task: Task) -> bool:
    if is_admin(principal):
        return True
    return task.assigned_to_user_id == principal.id


def can_assign(principal: User, target_user_id: int) -> bool:
    if is_admin(principal):
        return True
    return target_user_id == principal.id


def is_active_admin(user: User) -> bool:
    return user.role == UserRole.admin and user.is_active


def would_remove_active_admin(
    target: User,
    role: Optional[UserRole] = None,
    is_active: Optional[bool] = None,
) -> bool:
    """True when applying ``role``/``is_active`` takes ``target`` out of the active-admin set."""
    if not is_active_admin(target):
        return False
    demoted = role is not None and role != UserRole.admin
    deactivated = is_active is not None and not is_active
    return demoted or deactivated
