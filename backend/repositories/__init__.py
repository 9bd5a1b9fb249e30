from repositories.application import ApplicationRepository
from repositories.artifact import ArtifactRepository
from repositories.project import ProjectRepository
from repositories.release import ReleaseRepository
from repositories.unit_of_work import TransactionManager, UnitOfWork
from repositories.user import UserRepository

__all__ = [
    "ApplicationRepository",
    "ArtifactRepository",
    "ProjectRepository",
    "ReleaseRepository",
    "TransactionManager",
    "UnitOfWork",
    "UserRepository",
]
