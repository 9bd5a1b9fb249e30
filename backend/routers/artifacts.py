"""Artifact endpoints: upload URLs, registration, inspection and deletion."""

import uuid
from typing import List

from fastapi import APIRouter, Depends, Request, Response, status

from models.user import User
from rate_limit import limiter, rate_limited_user
from routers.dependencies import get_artifact_service, run_cancellable
from schemas.artifact import (
    ApplicationMetadataResponse,
    ArtifactCreateRequest,
    ArtifactMetadataRequest,
    ArtifactResponse,
    UploadURLRequest,
    UploadURLResponse,
)
from services.artifact_service import ArtifactService
from services.auth import get_current_user

router = APIRouter()


@router.post("/artifacts/upload-url", response_model=UploadURLResponse)
def get_artifact_upload_url(
    payload: UploadURLRequest,
    current_user: User = Depends(get_current_user),
    service: ArtifactService = Depends(get_artifact_service),
):
    """
    Presign an upload for a release the caller owns.

    Returns the URL to PUT the file to and the file_url to pass back when
    creating the artifact or release.
    """
    return service.get_upload_url(
        user_id=current_user.id,
        release_id=payload.release_id,
        filename=payload.filename,
    )


@router.post("/artifacts", response_model=ArtifactResponse, status_code=status.HTTP_201_CREATED)
def create_artifact(
    payload: ArtifactCreateRequest,
    current_user: User = Depends(get_current_user),
    service: ArtifactService = Depends(get_artifact_service),
):
    return service.create_artifact(
        user_id=current_user.id,
        release_id=payload.release_id,
        file_url=payload.file_url,
        sha256=payload.sha256,
        file_size=payload.file_size,
        file_type=payload.file_type,
        abi=payload.abi,
    )


@router.post("/artifacts/metadata", response_model=ApplicationMetadataResponse)
@limiter.limit("30/minute")
async def extract_artifact_metadata(
    request: Request,
    payload: ArtifactMetadataRequest,
    current_user: User = Depends(rate_limited_user),
    service: ArtifactService = Depends(get_artifact_service),
):
    """
    Read package and version information from an uploaded APK.

    Nothing is persisted; clients use this to validate an upload before
    creating a release from it.

    Rate limit: 30 requests per minute per user.
    """
    return await run_cancellable(
        request,
        lambda cancel_event: service.extract_metadata(payload.artifact_url, cancel_event),
    )


@router.get("/releases/{release_id}/artifacts", response_model=List[ArtifactResponse])
def list_artifacts(
    release_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    service: ArtifactService = Depends(get_artifact_service),
):
    return service.list_by_release(release_id)


@router.delete("/artifacts/{artifact_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_artifact(
    artifact_id: uuid.UUID,
    purge: bool = False,
    current_user: User = Depends(get_current_user),
    service: ArtifactService = Depends(get_artifact_service),
):
    """
    Delete an artifact.

    By default the record is soft deleted. With ?purge=true the row and the
    stored file are removed for good.
    """
    service.delete(user_id=current_user.id, artifact_id=artifact_id, purge=purge)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
