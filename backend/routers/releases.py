"""Release endpoints: manual creation, APK ingestion, promotion."""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, Response, status

from models.release import ReleaseEnvironment
from models.user import User
from rate_limit import limiter, rate_limited_user
from routers.dependencies import get_release_service, run_cancellable
from schemas.release import (
    ReleaseCreateRequest,
    ReleasePromoteRequest,
    ReleaseResponse,
    ReleaseUpdateRequest,
    ReleaseWithArtifactRequest,
)
from services.auth import get_current_user
from services.release_service import ReleaseService

router = APIRouter()


@router.get("/applications/{application_id}/releases", response_model=List[ReleaseResponse])
def list_releases(
    application_id: uuid.UUID,
    environment: Optional[ReleaseEnvironment] = None,
    current_user: User = Depends(get_current_user),
    service: ReleaseService = Depends(get_release_service),
):
    """List releases newest first, optionally restricted to one environment."""
    return service.list_by_application(application_id, environment)


@router.post(
    "/applications/{application_id}/releases",
    response_model=ReleaseResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_release(
    application_id: uuid.UUID,
    payload: ReleaseCreateRequest,
    current_user: User = Depends(get_current_user),
    service: ReleaseService = Depends(get_release_service),
):
    return service.create(
        user_id=current_user.id,
        application_id=application_id,
        title=payload.title,
        version_code=payload.version_code,
        version_name=payload.version_name,
        environment=payload.environment,
        release_note=payload.release_note,
    )


@router.post(
    "/applications/{application_id}/releases/with-artifact",
    response_model=ReleaseResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("10/minute")
async def create_release_with_artifact(
    request: Request,
    application_id: uuid.UUID,
    payload: ReleaseWithArtifactRequest,
    current_user: User = Depends(rate_limited_user),
    service: ReleaseService = Depends(get_release_service),
):
    """
    Create a release from an APK already uploaded to our storage.

    Version code and name are read from the APK manifest; its package name
    must match the application's.

    Raises:
      - 403 if the caller does not own the application's project
      - 409 if that version already exists in the environment
      - 422 if the URL is external, the APK is invalid or the package differs

    Rate limit: 10 requests per minute per user.
    """
    return await run_cancellable(
        request,
        lambda cancel_event: service.create_with_artifact_url(
            user_id=current_user.id,
            application_id=application_id,
            artifact_url=payload.artifact_url,
            release_note=payload.release_note,
            environment=payload.environment,
            cancel_event=cancel_event,
        ),
    )


@router.get("/applications/{application_id}/releases/latest", response_model=ReleaseResponse)
def get_latest_release(
    application_id: uuid.UUID,
    environment: ReleaseEnvironment,
    current_user: User = Depends(get_current_user),
    service: ReleaseService = Depends(get_release_service),
):
    """Highest version code in the environment; 404 when there is none."""
    return service.get_latest(application_id, environment)


@router.get("/releases/{release_id}", response_model=ReleaseResponse)
def get_release(
    release_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: ReleaseService = Depends(get_release_service),
):
    return service.get(release_id)


@router.patch("/releases/{release_id}", response_model=ReleaseResponse)
def update_release(
    release_id: uuid.UUID,
    payload: ReleaseUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: ReleaseService = Depends(get_release_service),
):
    return service.update(
        user_id=current_user.id,
        release_id=release_id,
        title=payload.title,
        release_note=payload.release_note,
    )


@router.post("/releases/{release_id}/promote", response_model=ReleaseResponse)
def promote_release(
    release_id: uuid.UUID,
    payload: ReleasePromoteRequest,
    current_user: User = Depends(get_current_user),
    service: ReleaseService = Depends(get_release_service),
):
    """Move a release to another environment."""
    return service.promote(
        user_id=current_user.id,
        release_id=release_id,
        environment=payload.environment,
    )


@router.delete("/releases/{release_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_release(
    release_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: ReleaseService = Depends(get_release_service),
):
    service.delete(user_id=current_user.id, release_id=release_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
