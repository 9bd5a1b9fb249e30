"""Project endpoints."""

import uuid
from typing import List

from fastapi import APIRouter, Depends, Response, status

from models.user import User
from routers.dependencies import get_project_service
from schemas.project import (
    ProjectCreateRequest,
    ProjectResponse,
    ProjectTransferRequest,
    ProjectUpdateRequest,
)
from services.auth import get_current_user
from services.project_service import ProjectService

router = APIRouter()


@router.get("/projects", response_model=List[ProjectResponse])
def list_projects(
    current_user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """List the projects owned by the authenticated user."""
    return service.list_for_owner(current_user.id)


@router.post("/projects", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    payload: ProjectCreateRequest,
    current_user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    return service.create(
        user_id=current_user.id,
        title=payload.title,
        description=payload.description,
    )


@router.get("/projects/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    return service.get(project_id)


@router.patch("/projects/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: uuid.UUID,
    payload: ProjectUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """
    Update a project's title and/or description.

    Only the owner may update. Omitted fields are left unchanged.
    """
    return service.update(
        user_id=current_user.id,
        project_id=project_id,
        title=payload.title,
        description=payload.description,
    )


@router.delete("/projects/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    service.delete(user_id=current_user.id, project_id=project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/projects/{project_id}/transfer", response_model=ProjectResponse)
def transfer_project(
    project_id: uuid.UUID,
    payload: ProjectTransferRequest,
    current_user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """
    Hand a project over to another user.

    Raises: 403 if the caller is not the owner, 422 if the new owner does not exist
    """
    return service.transfer_ownership(
        user_id=current_user.id,
        project_id=project_id,
        new_owner_id=payload.new_owner_id,
    )
