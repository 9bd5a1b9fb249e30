"""Walks Artifact -> Release -> Application -> Project to authorize writes.

A missing link raises that entity's not-found error; an existing chain owned
by someone else raises NotProjectOwnerError.
"""

from typing import Tuple

from errors import NotProjectOwnerError
from models import Application, ApplicationRelease, Artifact, Project
from repositories.unit_of_work import UnitOfWork


def require_project_owner(project: Project, user_id) -> None:
    if project.owner_id != user_id:
        raise NotProjectOwnerError(
            f"access denied: user {user_id} is not the owner of project {project.id}"
        )


def load_owned_project(uow: UnitOfWork, project_id, user_id) -> Project:
    project = uow.projects.get_by_id(project_id)
    require_project_owner(project, user_id)
    return project


def load_owned_application(
    uow: UnitOfWork, application_id, user_id
) -> Tuple[Application, Project]:
    application = uow.applications.get_by_id(application_id)
    project = load_owned_project(uow, application.project_id, user_id)
    return application, project


def load_owned_release(
    uow: UnitOfWork, release_id, user_id
) -> Tuple[ApplicationRelease, Application]:
    release = uow.releases.get_by_id(release_id)
    application, _project = load_owned_application(uow, release.application_id, user_id)
    return release, application


def load_owned_artifact(
    uow: UnitOfWork, artifact_id, user_id
) -> Tuple[Artifact, ApplicationRelease]:
    artifact = uow.artifacts.get_by_id(artifact_id)
    release, _application = load_owned_release(uow, artifact.release_id, user_id)
    return artifact, release
