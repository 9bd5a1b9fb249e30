from typing import List, Optional

from errors import ProjectNotFoundError
from models.project import Project
from repositories.base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    model = Project
    not_found_error = ProjectNotFoundError

    def create(self, *, owner_id, title: str, description: str = "") -> Project:
        return self._add(Project(owner_id=owner_id, title=title, description=description))

    def list_by_owner(self, owner_id) -> List[Project]:
        return self._run(
            lambda: self._query()
            .filter(Project.owner_id == owner_id)
            .order_by(Project.created_at.desc())
            .all()
        )

    def update(
        self,
        project_id,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Project:
        project = self.get_by_id(project_id)
        if title is not None:
            project.title = title
        if description is not None:
            project.description = description
        return self._touch(project)

    def transfer_ownership(self, project_id, new_owner_id) -> Project:
        project = self.get_by_id(project_id)
        project.owner_id = new_owner_id
        return self._touch(project)
