from typing import List

from fastapi import APIRouter, Depends, Response, status

from tasktracker.api.deps import IdPath, get_current_admin, get_current_user, get_status_registry
from tasktracker.models.user import User
from tasktracker.schemas.status import StatusPayload, StatusRead
from tasktracker.services.statuses import StatusRegistry

router = APIRouter()


@router.get("", response_model=List[StatusRead])
def list_statuses(
    current_user: User = Depends(get_current_user),
    statuses: StatusRegistry = Depends(get_status_registry),
):
    return statuses.list_statuses()


@router.post("", response_model=StatusRead, status_code=status.HTTP_201_CREATED)
def create_status(
    payload: StatusPayload,
    admin: User = Depends(get_current_admin),
    statuses: StatusRegistry = Depends(get_status_registry),
):
    return statuses.create_status(payload.name)


@router.patch("/{status_id}", response_model=StatusRead)
def rename_status(
    status_id: IdPath,
    payload: StatusPayload,
    admin: User = Depends(get_current_admin),
    statuses: StatusRegistry = Depends(get_status_registry),
):
    return statuses.rename_status(status_id, payload.name)


@router.delete("/{status_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_status(
    status_id: IdPath,
    admin: User = Depends(get_current_admin),
    statuses: StatusRegistry = Depends(get_status_registry),
):
    statuses.delete_status(status_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
