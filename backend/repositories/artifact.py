from typing import List, Optional

from errors import ArtifactExistsError, ArtifactNotFoundError
from models.artifact import Artifact
from repositories.base import BaseRepository


class ArtifactRepository(BaseRepository[Artifact]):
    model = Artifact
    not_found_error = ArtifactNotFoundError
    conflict_error = ArtifactExistsError

    def create(
        self,
        *,
        release_id,
        file_url: str,
        sha256: str,
        file_size: int,
        file_type: str,
        abi: Optional[str] = None,
    ) -> Artifact:
        return self._add(
            Artifact(
                release_id=release_id,
                file_url=file_url,
                sha256=sha256,
                file_size=file_size,
                file_type=file_type,
                abi=abi,
            )
        )

    def list_by_release(self, release_id) -> List[Artifact]:
        return self._run(
            lambda: self._query()
            .filter(Artifact.release_id == release_id)
            .order_by(Artifact.created_at.asc())
            .all()
        )
