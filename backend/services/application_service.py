"""Application management, including creation straight from an APK."""

import threading
from typing import List, Optional

from errors import PackageNameExistsError
from models import Application
from repositories.unit_of_work import TransactionManager
from services.artifact_ingestion import ArtifactIngestionPipeline
from services.ownership import load_owned_application, load_owned_project
from storage.base import Storage


class ApplicationService:
    """Handles application operations for an authenticated user."""

    def __init__(self, tx: TransactionManager, storage: Storage):
        self.tx = tx
        self.pipeline = ArtifactIngestionPipeline(tx, storage)

    def create(
        self,
        *,
        user_id,
        project_id,
        title: str,
        package_name: str,
        description: str = "",
    ) -> Application:
        with self.tx.repositories() as uow:
            load_owned_project(uow, project_id, user_id)
            if uow.applications.package_name_exists(package_name):
                raise PackageNameExistsError(f"package name {package_name} is already registered")
            return uow.applications.create(
                project_id=project_id,
                title=title,
                package_name=package_name,
                description=description,
            )

    def create_from_artifact(
        self,
        *,
        user_id,
        project_id,
        title: str,
        artifact_url: str,
        description: str = "",
        cancel_event: Optional[threading.Event] = None,
    ) -> Application:
        """Create the application, its first release and artifact from one APK."""
        return self.pipeline.create_application_from_artifact(
            user_id=user_id,
            project_id=project_id,
            title=title,
            artifact_url=artifact_url,
            description=description,
            cancel_event=cancel_event,
        )

    def get(self, application_id) -> Application:
        with self.tx.repositories() as uow:
            return uow.applications.get_by_id(application_id)

    def list_by_project(self, project_id) -> List[Application]:
        with self.tx.repositories() as uow:
            uow.projects.get_by_id(project_id)
            return uow.applications.list_by_project(project_id)

    def update(
        self,
        *,
        user_id,
        application_id,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Application:
        with self.tx.repositories() as uow:
            load_owned_application(uow, application_id, user_id)
            return uow.applications.update(application_id, title=title, description=description)

    def delete(self, *, user_id, application_id) -> None:
        with self.tx.repositories() as uow:
            load_owned_application(uow, application_id, user_id)
            uow.applications.soft_delete(application_id)
