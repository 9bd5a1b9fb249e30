from typing import List, Optional

from errors import ApplicationNotFoundError, PackageNameExistsError
from models.application import Application
from repositories.base import BaseRepository


class ApplicationRepository(BaseRepository[Application]):
    model = Application
    not_found_error = ApplicationNotFoundError
    conflict_error = PackageNameExistsError

    def create(
        self,
        *,
        project_id,
        title: str,
        package_name: str,
        description: str = "",
    ) -> Application:
        return self._add(
            Application(
                project_id=project_id,
                title=title,
                package_name=package_name,
                description=description,
            )
        )

    def list_by_project(self, project_id) -> List[Application]:
        return self._run(
            lambda: self._query()
            .filter(Application.project_id == project_id)
            .order_by(Application.created_at.desc())
            .all()
        )

    def package_name_exists(self, package_name: str) -> bool:
        # The unique constraint covers soft-deleted rows too, so this does.
        return self._run(
            lambda: self._query_including_deleted()
            .filter(Application.package_name == package_name)
            .first()
        ) is not None

    def update(
        self,
        application_id,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Application:
        # package_name is immutable after creation
        application = self.get_by_id(application_id)
        if title is not None:
            application.title = title
        if description is not None:
            application.description = description
        return self._touch(application)
