"""Project management: CRUD and ownership transfer."""

from typing import List, Optional

from errors import UserNotFoundError, ValidationError
from models import Project
from repositories.unit_of_work import TransactionManager, UnitOfWork
from services.ownership import load_owned_project


class ProjectService:
    """Handles project operations for an authenticated user."""

    def __init__(self, tx: TransactionManager):
        self.tx = tx

    def create(self, *, user_id, title: str, description: str = "") -> Project:
        with self.tx.repositories() as uow:
            return uow.projects.create(owner_id=user_id, title=title, description=description)

    def get(self, project_id) -> Project:
        with self.tx.repositories() as uow:
            return uow.projects.get_by_id(project_id)

    def list_for_owner(self, user_id) -> List[Project]:
        with self.tx.repositories() as uow:
            return uow.projects.list_by_owner(user_id)

    def update(
        self,
        *,
        user_id,
        project_id,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Project:
        with self.tx.repositories() as uow:
            load_owned_project(uow, project_id, user_id)
            return uow.projects.update(project_id, title=title, description=description)

    def delete(self, *, user_id, project_id) -> None:
        with self.tx.repositories() as uow:
            load_owned_project(uow, project_id, user_id)
            uow.projects.soft_delete(project_id)

    def transfer_ownership(self, *, user_id, project_id, new_owner_id) -> Project:
        """
        Hand the project to another user.

        Reads the project and the new owner, then writes, so it runs under
        SERIALIZABLE isolation.
        """

        def transfer(uow: UnitOfWork) -> Project:
            load_owned_project(uow, project_id, user_id)
            try:
                uow.users.get_by_id(new_owner_id)
            except UserNotFoundError:
                raise ValidationError("new_owner_id", "new owner does not exist")
            return uow.projects.transfer_ownership(project_id, new_owner_id)

        return self.tx.run_serializable(transfer)
