"""Artifact uploads, manual registration and metadata inspection."""

import logging
import os
import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional

from config import UPLOAD_URL_EXPIRE_MINUTES
from errors import InternalError
from models import Artifact
from repositories.unit_of_work import TransactionManager
from services.artifact_ingestion import ApplicationMetadata, ArtifactIngestionPipeline
from services.ownership import load_owned_artifact, load_owned_release
from storage.base import Storage, StorageError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadURL:
    upload_url: str
    file_url: str
    path: str


def signed_upload(storage: Storage, storage_path: str) -> UploadURL:
    """Presign a PUT for storage_path (expires after UPLOAD_URL_EXPIRE_MINUTES)."""
    try:
        upload_url = storage.generate_upload_url(
            storage_path, timedelta(minutes=UPLOAD_URL_EXPIRE_MINUTES)
        )
    except StorageError as exc:
        logger.error("Failed to generate upload URL", extra={"path": storage_path, "error": str(exc)})
        raise InternalError("failed to generate upload URL") from exc
    return UploadURL(
        upload_url=upload_url,
        file_url=storage.get_public_url(storage_path),
        path=storage_path,
    )


def timestamped_name(filename: str) -> str:
    # Only the base name is kept so clients cannot pick arbitrary keys
    return f"{int(time.time())}_{os.path.basename(filename)}"


class ArtifactService:
    """Handles artifact operations for an authenticated user."""

    def __init__(self, tx: TransactionManager, storage: Storage):
        self.tx = tx
        self.storage = storage
        self.pipeline = ArtifactIngestionPipeline(tx, storage)

    def get_upload_url(self, *, user_id, release_id, filename: str) -> UploadURL:
        with self.tx.repositories() as uow:
            release, application = load_owned_release(uow, release_id, user_id)

        storage_path = f"apps/{application.id}/releases/{release.id}/{timestamped_name(filename)}"
        return signed_upload(self.storage, storage_path)

    def create_artifact(
        self,
        *,
        user_id,
        release_id,
        file_url: str,
        sha256: str,
        file_size: int,
        file_type: str,
        abi: Optional[str] = None,
    ) -> Artifact:
        """Register an artifact whose fingerprint the client computed itself."""
        with self.tx.repositories() as uow:
            load_owned_release(uow, release_id, user_id)
            return uow.artifacts.create(
                release_id=release_id,
                file_url=file_url,
                sha256=sha256.lower(),
                file_size=file_size,
                file_type=file_type,
                abi=abi,
            )

    def list_by_release(self, release_id) -> List[Artifact]:
        with self.tx.repositories() as uow:
            uow.releases.get_by_id(release_id)
            return uow.artifacts.list_by_release(release_id)

    def delete(self, *, user_id, artifact_id, purge: bool = False) -> None:
        """
        Soft delete an artifact.

        With purge=True the row is physically removed and the stored object
        deleted as well; this is the administrative cleanup path.
        """
        with self.tx.repositories() as uow:
            artifact, _release = load_owned_artifact(uow, artifact_id, user_id)
            if not purge:
                uow.artifacts.soft_delete(artifact_id)
                return
            uow.artifacts.hard_delete(artifact_id)

        storage_path, is_ours = self.storage.extract_storage_path(artifact.file_url)
        if not is_ours:
            return
        try:
            self.storage.delete(storage_path)
        except StorageError as exc:
            logger.error("Failed to delete stored artifact", extra={"path": storage_path, "error": str(exc)})
            raise InternalError("failed to delete stored artifact") from exc

    def extract_metadata(
        self, artifact_url: str, cancel_event: Optional[threading.Event] = None
    ) -> ApplicationMetadata:
        return self.pipeline.extract_metadata_from_url(artifact_url, cancel_event)
