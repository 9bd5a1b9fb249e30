"""Units of work and the transaction manager that hands them out.

Services never see a Session. They ask the TransactionManager for a
UnitOfWork, which only exposes repositories:

    with tx.transaction() as uow:
        release = uow.releases.create(...)
        uow.artifacts.create(release_id=release.id, ...)

Either every write in the block commits, or none of them does.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from database import is_sqlite_session
from errors import InternalError
from repositories.application import ApplicationRepository
from repositories.artifact import ArtifactRepository
from repositories.project import ProjectRepository
from repositories.release import ReleaseRepository
from repositories.user import UserRepository


logger = logging.getLogger(__name__)

T = TypeVar("T")

READ_COMMITTED = "READ COMMITTED"
SERIALIZABLE = "SERIALIZABLE"


class UnitOfWork:
    """The repositories bound to one session, in plain or transactional mode."""

    def __init__(self, db: Session, *, autocommit: bool):
        self.users = UserRepository(db, autocommit=autocommit)
        self.projects = ProjectRepository(db, autocommit=autocommit)
        self.applications = ApplicationRepository(db, autocommit=autocommit)
        self.releases = ReleaseRepository(db, autocommit=autocommit)
        self.artifacts = ArtifactRepository(db, autocommit=autocommit)


class TransactionManager:
    """Scopes sessions so no connection outlives the block that needed it."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def repositories(self) -> Iterator[UnitOfWork]:
        """Plain mode: each repository write commits by itself."""
        db = self._session_factory()
        try:
            yield UnitOfWork(db, autocommit=True)
        finally:
            db.close()

    @contextmanager
    def transaction(self, isolation_level: Optional[str] = None) -> Iterator[UnitOfWork]:
        """
        Transactional mode: commit when the block exits normally.

        Any exception, including KeyboardInterrupt and friends, rolls the
        transaction back and propagates unchanged.
        """
        db = self._session_factory()
        try:
            # SQLite transactions are already serializable and reject other levels
            if isolation_level and not is_sqlite_session(db):
                db.connection(execution_options={"isolation_level": isolation_level})
            yield UnitOfWork(db, autocommit=False)
            try:
                db.commit()
            except SQLAlchemyError as exc:
                logger.error("commit transaction failed", extra={"error": str(exc)})
                raise InternalError() from exc
        except BaseException:
            try:
                db.rollback()
            except SQLAlchemyError:
                logger.exception("rollback failed")
            raise
        finally:
            db.close()

    def run_in_transaction(
        self,
        work: Callable[[UnitOfWork], T],
        *,
        isolation_level: Optional[str] = None,
    ) -> T:
        with self.transaction(isolation_level) as uow:
            return work(uow)

    def run_serializable(self, work: Callable[[UnitOfWork], T]) -> T:
        """Strongest isolation, for read-then-write flows like ownership transfer."""
        return self.run_in_transaction(work, isolation_level=SERIALIZABLE)
