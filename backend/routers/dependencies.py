"""Service factories and request helpers shared by the API routers."""

import asyncio
import logging
import threading
from typing import Callable, TypeVar

from fastapi import Depends, Request

from database import get_transaction_manager
from repositories.unit_of_work import TransactionManager
from services.application_service import ApplicationService
from services.artifact_service import ArtifactService
from services.file_service import FileService
from services.project_service import ProjectService
from services.release_service import ReleaseService
from storage import get_storage
from storage.base import Storage


logger = logging.getLogger(__name__)

T = TypeVar("T")

# How often a long-running request checks whether its client went away
DISCONNECT_POLL_SECONDS = 0.5


def get_project_service(
    tx: TransactionManager = Depends(get_transaction_manager),
) -> ProjectService:
    return ProjectService(tx)


def get_application_service(
    tx: TransactionManager = Depends(get_transaction_manager),
    storage: Storage = Depends(get_storage),
) -> ApplicationService:
    return ApplicationService(tx, storage)


def get_release_service(
    tx: TransactionManager = Depends(get_transaction_manager),
    storage: Storage = Depends(get_storage),
) -> ReleaseService:
    return ReleaseService(tx, storage)


def get_artifact_service(
    tx: TransactionManager = Depends(get_transaction_manager),
    storage: Storage = Depends(get_storage),
) -> ArtifactService:
    return ArtifactService(tx, storage)


def get_file_service(storage: Storage = Depends(get_storage)) -> FileService:
    return FileService(storage)


async def run_cancellable(request: Request, work: Callable[[threading.Event], T]) -> T:
    """
    Run blocking work in a worker thread, cancelling it if the client disconnects.

    The work receives a threading.Event that is set on disconnect; the
    ingestion pipeline checks it between chunks and raises
    RequestCancelledError. Work that has already reached its transaction
    finishes normally.
    """
    cancel_event = threading.Event()
    task = asyncio.ensure_future(asyncio.to_thread(work, cancel_event))

    while True:
        done, _pending = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
        if done:
            return task.result()
        if await request.is_disconnected():
            logger.info("Client disconnected, cancelling request", extra={"path": request.url.path})
            cancel_event.set()
            return await task
