from typing import List, Optional

from errors import ReleaseExistsError, ReleaseNotFoundError
from models.release import ApplicationRelease, ReleaseEnvironment
from repositories.base import BaseRepository


class ReleaseRepository(BaseRepository[ApplicationRelease]):
    model = ApplicationRelease
    not_found_error = ReleaseNotFoundError
    conflict_error = ReleaseExistsError

    def create(
        self,
        *,
        application_id,
        title: str,
        version_code: int,
        version_name: str,
        environment: ReleaseEnvironment,
        release_note: str = "",
    ) -> ApplicationRelease:
        # Duplicate (application, version_code, environment) surfaces as
        # ReleaseExistsError from the unique constraint.
        return self._add(
            ApplicationRelease(
                application_id=application_id,
                title=title,
                version_code=version_code,
                version_name=version_name,
                environment=environment,
                release_note=release_note,
            )
        )

    def list_by_application(self, application_id) -> List[ApplicationRelease]:
        return self._run(
            lambda: self._query()
            .filter(ApplicationRelease.application_id == application_id)
            .order_by(ApplicationRelease.version_code.desc(), ApplicationRelease.created_at.desc())
            .all()
        )

    def list_by_environment(
        self, application_id, environment: ReleaseEnvironment
    ) -> List[ApplicationRelease]:
        return self._run(
            lambda: self._query()
            .filter(
                ApplicationRelease.application_id == application_id,
                ApplicationRelease.environment == environment,
            )
            .order_by(ApplicationRelease.version_code.desc(), ApplicationRelease.created_at.desc())
            .all()
        )

    def get_latest_by_environment(
        self, application_id, environment: ReleaseEnvironment
    ) -> ApplicationRelease:
        releases = self.list_by_environment(application_id, environment)
        if not releases:
            raise ReleaseNotFoundError()
        return releases[0]

    def version_exists(
        self, application_id, version_code: int, environment: ReleaseEnvironment
    ) -> bool:
        return self._run(
            lambda: self._query_including_deleted()
            .filter(
                ApplicationRelease.application_id == application_id,
                ApplicationRelease.version_code == version_code,
                ApplicationRelease.environment == environment,
            )
            .first()
        ) is not None

    def update(
        self,
        release_id,
        *,
        title: Optional[str] = None,
        release_note: Optional[str] = None,
    ) -> ApplicationRelease:
        release = self.get_by_id(release_id)
        if title is not None:
            release.title = title
        if release_note is not None:
            release.release_note = release_note
        return self._touch(release)

    def promote(self, release_id, environment: ReleaseEnvironment) -> ApplicationRelease:
        """Move a release to another environment. Any direction is allowed."""
        release = self.get_by_id(release_id)
        release.environment = environment
        return self._touch(release)
