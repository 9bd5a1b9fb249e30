from models.application import Application
from models.artifact import APK_MIME_TYPE, Artifact
from models.project import Project
from models.release import ApplicationRelease, ReleaseEnvironment
from models.user import User

__all__ = [
    "APK_MIME_TYPE",
    "Application",
    "ApplicationRelease",
    "Artifact",
    "Project",
    "ReleaseEnvironment",
    "User",
]
