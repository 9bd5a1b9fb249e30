"""Shared repository plumbing: soft-delete filtering and error translation."""

import logging
from typing import Generic, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from errors import AlreadyExistsError, InternalError, NotFoundError
from models.base import utcnow


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

# psycopg2 reports unique violations with SQLSTATE 23505
_UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """Return True when the integrity error comes from a unique constraint."""
    if getattr(exc.orig, "pgcode", None) == _UNIQUE_VIOLATION:
        return True
    return "UNIQUE constraint failed" in str(exc.orig)


class BaseRepository(Generic[ModelT]):
    """CRUD over one model.

    In plain mode (autocommit=True) every write commits on its own. Inside a
    unit of work (autocommit=False) writes are only flushed, and the owning
    transaction decides whether they become visible. Method shapes are the
    same in both modes.
    """

    model: Type[ModelT]
    not_found_error: Type[NotFoundError] = NotFoundError
    conflict_error: Type[AlreadyExistsError] = AlreadyExistsError

    def __init__(self, db: Session, *, autocommit: bool = True):
        self.db = db
        self.autocommit = autocommit

    # -- reads ---------------------------------------------------------------

    def _query(self) -> Query:
        """Every read goes through here so deleted rows never leak out."""
        return self.db.query(self.model).filter(self.model.deleted_at.is_(None))

    def _query_including_deleted(self) -> Query:
        return self.db.query(self.model)

    def find_by_id(self, entity_id) -> Optional[ModelT]:
        return self._run(lambda: self._query().filter(self.model.id == entity_id).first())

    def get_by_id(self, entity_id) -> ModelT:
        entity = self.find_by_id(entity_id)
        if entity is None:
            raise self.not_found_error()
        return entity

    # -- writes --------------------------------------------------------------

    def _add(self, entity: ModelT) -> ModelT:
        self.db.add(entity)
        self._persist()
        return entity

    def _touch(self, entity: ModelT) -> ModelT:
        entity.updated_at = utcnow()
        self._persist()
        return entity

    def soft_delete(self, entity_id) -> None:
        entity = self.get_by_id(entity_id)
        entity.deleted_at = utcnow()
        self._touch(entity)

    def hard_delete(self, entity_id) -> None:
        """Physically remove a row, deleted or not. Administrative cleanup only."""
        entity = self._run(
            lambda: self._query_including_deleted().filter(self.model.id == entity_id).first()
        )
        if entity is None:
            raise self.not_found_error()
        self.db.delete(entity)
        self._persist()

    def _persist(self) -> None:
        try:
            self.db.flush()
            if self.autocommit:
                self.db.commit()
        except IntegrityError as exc:
            if self.autocommit:
                self.db.rollback()
            raise self._translate_integrity_error(exc) from exc
        except SQLAlchemyError as exc:
            if self.autocommit:
                self.db.rollback()
            logger.error(
                "database error",
                extra={"model": self.model.__name__, "error": str(exc)},
            )
            raise InternalError() from exc

    def _translate_integrity_error(self, exc: IntegrityError) -> Exception:
        if is_unique_violation(exc):
            return self.conflict_error()
        logger.error(
            "integrity error",
            extra={"model": self.model.__name__, "error": str(exc.orig)},
        )
        return InternalError()

    def _run(self, read):
        try:
            return read()
        except SQLAlchemyError as exc:
            logger.error(
                "database error",
                extra={"model": self.model.__name__, "error": str(exc)},
            )
            raise InternalError() from exc
