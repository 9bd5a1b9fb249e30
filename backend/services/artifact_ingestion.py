"""Turns an uploaded APK into persisted release and artifact records.

Every ingestion runs the same steps, in this order:

1. authorize against the ownership chain (cheap, short-lived session)
2. resolve the artifact URL to one of our storage paths
3. download, hash and parse the APK (no database connection held)
4. check the parsed package name (match or global uniqueness)
5. write every record in a single transaction

The scratch copy of the APK is removed on every exit path.
"""

import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import BinaryIO, Callable, Iterator, Optional, Tuple, TypeVar

from config import ARTIFACT_SCRATCH_DIR
from errors import (
    InternalError,
    PackageNameExistsError,
    RequestCancelledError,
    ValidationError,
)
from models import APK_MIME_TYPE, Application, ApplicationRelease, ReleaseEnvironment
from repositories.unit_of_work import TransactionManager, UnitOfWork
from services.apk_parser import PLATFORM, ApkManifestParser
from services.content_hasher import ContentHasher
from services.ownership import load_owned_application, load_owned_project
from storage.base import Storage, StorageError, StorageObjectNotFoundError


logger = logging.getLogger(__name__)

S = TypeVar("S")
R = TypeVar("R")

UNIVERSAL_ARCHITECTURE = "universal"
INITIAL_RELEASE_NOTE = "Initial release from creation"
# models.release title column width
MAX_RELEASE_TITLE_LENGTH = 256


@dataclass(frozen=True)
class ApplicationMetadata:
    package_name: str
    version_code: int
    version_name: str
    min_sdk_version: int
    target_sdk_version: int
    sha256: str
    file_size: int
    native_abis: Tuple[str, ...] = ()
    platform: str = PLATFORM
    architecture: str = UNIVERSAL_ARCHITECTURE


def release_title(label: str, metadata: ApplicationMetadata) -> str:
    """Title for an ingested release, e.g. "Release 1.2.0 (12)", clipped to the column width."""
    title = f"{label} {metadata.version_name} ({metadata.version_code})"
    return title[:MAX_RELEASE_TITLE_LENGTH]


class ArtifactIngestionPipeline:
    """Download, fingerprint, parse and persist uploaded application binaries."""

    def __init__(
        self,
        tx: TransactionManager,
        storage: Storage,
        *,
        parser: Optional[ApkManifestParser] = None,
        hasher: Optional[ContentHasher] = None,
        scratch_dir: Optional[str] = ARTIFACT_SCRATCH_DIR,
    ):
        self.tx = tx
        self.storage = storage
        self.parser = parser or ApkManifestParser()
        self.hasher = hasher or ContentHasher()
        self.scratch_dir = scratch_dir

    # -- public operations ---------------------------------------------------

    def extract_metadata_from_url(
        self,
        artifact_url: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> ApplicationMetadata:
        """Inspect an uploaded binary without persisting anything."""
        return self._inspect(self._resolve_storage_path(artifact_url), cancel_event)

    def create_release_with_artifact_url(
        self,
        *,
        user_id,
        application_id,
        artifact_url: str,
        release_note: str = "",
        environment: ReleaseEnvironment = ReleaseEnvironment.DEVELOPMENT,
        cancel_event: Optional[threading.Event] = None,
    ) -> ApplicationRelease:
        def authorize(uow: UnitOfWork) -> Application:
            application, _project = load_owned_application(uow, application_id, user_id)
            return application

        def verify(uow: UnitOfWork, application: Application, metadata: ApplicationMetadata) -> None:
            if metadata.package_name != application.package_name:
                raise ValidationError(
                    "artifact_url",
                    f"package name mismatch: expected {application.package_name}, "
                    f"got {metadata.package_name}",
                )

        def persist(
            uow: UnitOfWork, application: Application, metadata: ApplicationMetadata
        ) -> ApplicationRelease:
            return self._create_release_and_artifact(
                uow,
                application_id=application.id,
                artifact_url=artifact_url,
                metadata=metadata,
                title=release_title("Release", metadata),
                release_note=release_note,
                environment=environment,
            )

        return self._ingest(artifact_url, authorize, verify, persist, cancel_event)

    def create_application_from_artifact(
        self,
        *,
        user_id,
        project_id,
        title: str,
        artifact_url: str,
        description: str = "",
        cancel_event: Optional[threading.Event] = None,
    ) -> Application:
        def authorize(uow: UnitOfWork):
            return load_owned_project(uow, project_id, user_id)

        def verify(uow: UnitOfWork, _project, metadata: ApplicationMetadata) -> None:
            if uow.applications.package_name_exists(metadata.package_name):
                raise PackageNameExistsError(
                    f"package name {metadata.package_name} is already registered"
                )

        def persist(uow: UnitOfWork, project, metadata: ApplicationMetadata) -> Application:
            application = uow.applications.create(
                project_id=project.id,
                title=title,
                package_name=metadata.package_name,
                description=description,
            )
            self._create_release_and_artifact(
                uow,
                application_id=application.id,
                artifact_url=artifact_url,
                metadata=metadata,
                title=release_title("Initial Release", metadata),
                release_note=INITIAL_RELEASE_NOTE,
                environment=ReleaseEnvironment.PRODUCTION,
            )
            return application

        return self._ingest(artifact_url, authorize, verify, persist, cancel_event)

    # -- shared routine ------------------------------------------------------

    def _ingest(
        self,
        artifact_url: str,
        authorize: Callable[[UnitOfWork], S],
        verify: Callable[[UnitOfWork, S, ApplicationMetadata], None],
        persist: Callable[[UnitOfWork, S, ApplicationMetadata], R],
        cancel_event: Optional[threading.Event],
    ) -> R:
        with self.tx.repositories() as uow:
            subject = authorize(uow)

        storage_path = self._resolve_storage_path(artifact_url)
        metadata = self._inspect(storage_path, cancel_event)

        with self.tx.repositories() as uow:
            verify(uow, subject, metadata)

        if cancel_event is not None and cancel_event.is_set():
            raise RequestCancelledError()

        result = self.tx.run_in_transaction(lambda uow: persist(uow, subject, metadata))
        logger.info(
            "Artifact ingested",
            extra={
                "package_name": metadata.package_name,
                "version_code": metadata.version_code,
                "sha256": metadata.sha256,
            },
        )
        return result

    def _create_release_and_artifact(
        self,
        uow: UnitOfWork,
        *,
        application_id,
        artifact_url: str,
        metadata: ApplicationMetadata,
        title: str,
        release_note: str,
        environment: ReleaseEnvironment,
    ) -> ApplicationRelease:
        release = uow.releases.create(
            application_id=application_id,
            title=title,
            version_code=metadata.version_code,
            version_name=metadata.version_name,
            release_note=release_note,
            environment=environment,
        )
        uow.artifacts.create(
            release_id=release.id,
            file_url=artifact_url,
            sha256=metadata.sha256,
            file_size=metadata.file_size,
            file_type=APK_MIME_TYPE,
            abi=None,  # universal build
        )
        return release

    # -- storage and scratch handling ----------------------------------------

    def _resolve_storage_path(self, artifact_url: str) -> str:
        storage_path, is_ours = self.storage.extract_storage_path(artifact_url)
        if not is_ours:
            logger.warning(
                "Rejected non-internal artifact URL", extra={"artifact_url": artifact_url}
            )
            raise ValidationError("artifact_url", "only internal artifacts are supported")
        return storage_path

    @contextmanager
    def _open_download(self, storage_path: str) -> Iterator[BinaryIO]:
        try:
            stream = self.storage.download(storage_path)
        except StorageObjectNotFoundError as exc:
            raise ValidationError("artifact_url", "artifact not found in storage") from exc
        except StorageError as exc:
            logger.error(
                "Failed to download artifact",
                extra={"path": storage_path, "error": str(exc)},
            )
            raise InternalError("failed to download artifact") from exc
        try:
            yield stream
        finally:
            stream.close()

    def _inspect(
        self, storage_path: str, cancel_event: Optional[threading.Event]
    ) -> ApplicationMetadata:
        logger.debug("Downloading artifact for inspection", extra={"path": storage_path})
        try:
            with self._open_download(storage_path) as source, tempfile.TemporaryDirectory(
                prefix="artifact-", dir=self.scratch_dir
            ) as scratch_dir:
                scratch_path = os.path.join(scratch_dir, "artifact.apk")
                with open(scratch_path, "wb") as sink:
                    digest = self.hasher.copy_and_hash(source, sink, cancel_event)
                logger.debug(
                    "Artifact buffered",
                    extra={"path": storage_path, "size": digest.size, "sha256": digest.sha256},
                )
                manifest = self.parser.parse(scratch_path)
        except OSError as exc:
            logger.error(
                "Failed to buffer artifact",
                extra={"path": storage_path, "error": str(exc)},
            )
            raise InternalError("failed to buffer artifact") from exc

        return ApplicationMetadata(
            package_name=manifest.package_name,
            version_code=manifest.version_code,
            version_name=manifest.version_name,
            min_sdk_version=manifest.min_sdk_version,
            target_sdk_version=manifest.target_sdk_version,
            sha256=digest.sha256,
            file_size=digest.size,
            native_abis=manifest.native_abis,
            platform=manifest.platform,
        )
