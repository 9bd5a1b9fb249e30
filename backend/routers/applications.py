"""Application endpoints, including creation straight from an uploaded APK."""

import uuid
from typing import List

from fastapi import APIRouter, Depends, Request, Response, status

from models.user import User
from rate_limit import limiter, rate_limited_user
from routers.dependencies import get_application_service, run_cancellable
from schemas.application import (
    ApplicationCreateRequest,
    ApplicationFromArtifactRequest,
    ApplicationResponse,
    ApplicationUpdateRequest,
)
from services.application_service import ApplicationService
from services.auth import get_current_user

router = APIRouter()


@router.get("/projects/{project_id}/applications", response_model=List[ApplicationResponse])
def list_applications(
    project_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    return service.list_by_project(project_id)


@router.post(
    "/projects/{project_id}/applications",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_application(
    project_id: uuid.UUID,
    payload: ApplicationCreateRequest,
    current_user: User = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    """
    Register an application under a project the caller owns.

    Raises: 403 if not the project owner, 409 if the package name is taken
    """
    return service.create(
        user_id=current_user.id,
        project_id=project_id,
        title=payload.title,
        package_name=payload.package_name,
        description=payload.description,
    )


@router.post(
    "/applications/from-artifact",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("10/minute")
async def create_application_from_artifact(
    request: Request,
    payload: ApplicationFromArtifactRequest,
    current_user: User = Depends(rate_limited_user),
    service: ApplicationService = Depends(get_application_service),
):
    """
    Create an application, its first production release and the artifact
    from one uploaded APK.

    The package name and version come from the APK manifest. Nothing is
    written unless every record can be written.

    Rate limit: 10 requests per minute per user.
    """
    return await run_cancellable(
        request,
        lambda cancel_event: service.create_from_artifact(
            user_id=current_user.id,
            project_id=payload.project_id,
            title=payload.title,
            artifact_url=payload.artifact_url,
            description=payload.description,
            cancel_event=cancel_event,
        ),
    )


@router.get("/applications/{application_id}", response_model=ApplicationResponse)
def get_application(
    application_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    return service.get(application_id)


@router.patch("/applications/{application_id}", response_model=ApplicationResponse)
def update_application(
    application_id: uuid.UUID,
    payload: ApplicationUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    """Update title and/or description. The package name cannot change."""
    return service.update(
        user_id=current_user.id,
        application_id=application_id,
        title=payload.title,
        description=payload.description,
    )


@router.delete("/applications/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_application(
    application_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
):
    service.delete(user_id=current_user.id, application_id=application_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
