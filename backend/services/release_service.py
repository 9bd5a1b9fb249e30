"""Release management: manual creation, APK ingestion, promotion."""

import threading
from typing import List, Optional

from models import ApplicationRelease, ReleaseEnvironment
from repositories.unit_of_work import TransactionManager
from services.artifact_ingestion import ArtifactIngestionPipeline
from services.ownership import load_owned_application, load_owned_release
from storage.base import Storage


class ReleaseService:
    """Handles release operations for an authenticated user."""

    def __init__(self, tx: TransactionManager, storage: Storage):
        self.tx = tx
        self.pipeline = ArtifactIngestionPipeline(tx, storage)

    def create(
        self,
        *,
        user_id,
        application_id,
        title: str,
        version_code: int,
        version_name: str,
        environment: ReleaseEnvironment,
        release_note: str = "",
    ) -> ApplicationRelease:
        with self.tx.repositories() as uow:
            load_owned_application(uow, application_id, user_id)
            # Duplicate versions are rejected by the unique constraint
            return uow.releases.create(
                application_id=application_id,
                title=title,
                version_code=version_code,
                version_name=version_name,
                environment=environment,
                release_note=release_note,
            )

    def create_with_artifact_url(
        self,
        *,
        user_id,
        application_id,
        artifact_url: str,
        release_note: str = "",
        environment: ReleaseEnvironment = ReleaseEnvironment.DEVELOPMENT,
        cancel_event: Optional[threading.Event] = None,
    ) -> ApplicationRelease:
        """Create a release whose version fields come from the uploaded APK."""
        return self.pipeline.create_release_with_artifact_url(
            user_id=user_id,
            application_id=application_id,
            artifact_url=artifact_url,
            release_note=release_note,
            environment=environment,
            cancel_event=cancel_event,
        )

    def update(
        self,
        *,
        user_id,
        release_id,
        title: Optional[str] = None,
        release_note: Optional[str] = None,
    ) -> ApplicationRelease:
        with self.tx.repositories() as uow:
            load_owned_release(uow, release_id, user_id)
            return uow.releases.update(release_id, title=title, release_note=release_note)

    def promote(self, *, user_id, release_id, environment: ReleaseEnvironment) -> ApplicationRelease:
        # No transition rules: any environment can be set from any other.
        with self.tx.repositories() as uow:
            load_owned_release(uow, release_id, user_id)
            return uow.releases.promote(release_id, environment)

    def delete(self, *, user_id, release_id) -> None:
        with self.tx.repositories() as uow:
            load_owned_release(uow, release_id, user_id)
            uow.releases.soft_delete(release_id)

    def get(self, release_id) -> ApplicationRelease:
        with self.tx.repositories() as uow:
            return uow.releases.get_by_id(release_id)

    def list_by_application(
        self, application_id, environment: Optional[ReleaseEnvironment] = None
    ) -> List[ApplicationRelease]:
        with self.tx.repositories() as uow:
            uow.applications.get_by_id(application_id)
            if environment is not None:
                return uow.releases.list_by_environment(application_id, environment)
            return uow.releases.list_by_application(application_id)

    def get_latest(self, application_id, environment: ReleaseEnvironment) -> ApplicationRelease:
        with self.tx.repositories() as uow:
            uow.applications.get_by_id(application_id)
            return uow.releases.get_latest_by_environment(application_id, environment)
