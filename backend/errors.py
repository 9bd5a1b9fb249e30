"""Domain errors raised by repositories and services.

Services raise these; the HTTP layer turns them into responses through
`HTTP_STATUS_BY_CODE`. Every error carries a machine-readable `ErrorCode`
so clients can branch on it without parsing messages.
"""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
    APPLICATION_NOT_FOUND = "APPLICATION_NOT_FOUND"
    RELEASE_NOT_FOUND = "RELEASE_NOT_FOUND"
    ARTIFACT_NOT_FOUND = "ARTIFACT_NOT_FOUND"

    ALREADY_EXISTS = "ALREADY_EXISTS"
    EMAIL_EXISTS = "EMAIL_EXISTS"
    USERNAME_EXISTS = "USERNAME_EXISTS"
    PACKAGE_NAME_EXISTS = "PACKAGE_NAME_EXISTS"
    RELEASE_EXISTS = "RELEASE_EXISTS"
    ARTIFACT_EXISTS = "ARTIFACT_EXISTS"

    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_PROJECT_OWNER = "NOT_PROJECT_OWNER"

    VALIDATION_ERROR = "VALIDATION_ERROR"
    REQUEST_CANCELLED = "REQUEST_CANCELLED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppError(Exception):
    """Base class for every error the service layer is allowed to raise."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    default_message = "an unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------

class NotFoundError(AppError):
    code = ErrorCode.NOT_FOUND
    default_message = "resource not found"


class UserNotFoundError(NotFoundError):
    code = ErrorCode.USER_NOT_FOUND
    default_message = "user not found"


class ProjectNotFoundError(NotFoundError):
    code = ErrorCode.PROJECT_NOT_FOUND
    default_message = "project not found"


class ApplicationNotFoundError(NotFoundError):
    code = ErrorCode.APPLICATION_NOT_FOUND
    default_message = "application not found"


class ReleaseNotFoundError(NotFoundError):
    code = ErrorCode.RELEASE_NOT_FOUND
    default_message = "release not found"


class ArtifactNotFoundError(NotFoundError):
    code = ErrorCode.ARTIFACT_NOT_FOUND
    default_message = "artifact not found"


# ---------------------------------------------------------------------------
# Conflicts
# ---------------------------------------------------------------------------

class AlreadyExistsError(AppError):
    code = ErrorCode.ALREADY_EXISTS
    default_message = "resource already exists"


class EmailExistsError(AlreadyExistsError):
    code = ErrorCode.EMAIL_EXISTS
    default_message = "email already registered"


class UsernameExistsError(AlreadyExistsError):
    code = ErrorCode.USERNAME_EXISTS
    default_message = "username already taken"


class PackageNameExistsError(AlreadyExistsError):
    code = ErrorCode.PACKAGE_NAME_EXISTS
    default_message = "package name already exists"


class ReleaseExistsError(AlreadyExistsError):
    code = ErrorCode.RELEASE_EXISTS
    default_message = "a release with this version code already exists in this environment"


class ArtifactExistsError(AlreadyExistsError):
    code = ErrorCode.ARTIFACT_EXISTS
    default_message = "an artifact for this ABI already exists on this release"


# ---------------------------------------------------------------------------
# Access
# ---------------------------------------------------------------------------

class UnauthorizedError(AppError):
    code = ErrorCode.UNAUTHORIZED
    default_message = "authentication required"


class ForbiddenError(AppError):
    code = ErrorCode.FORBIDDEN
    default_message = "access denied"


class NotProjectOwnerError(AppError):
    """The caller is authenticated but does not own the project."""

    code = ErrorCode.NOT_PROJECT_OWNER
    default_message = "only the project owner can perform this action"


# ---------------------------------------------------------------------------
# Input, cancellation and faults
# ---------------------------------------------------------------------------

class ValidationError(AppError):
    """Caller-supplied input was rejected; `field` names the offending input."""

    code = ErrorCode.VALIDATION_ERROR
    default_message = "invalid input"

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class RequestCancelledError(AppError):
    code = ErrorCode.REQUEST_CANCELLED
    default_message = "request was cancelled"


class InternalError(AppError):
    code = ErrorCode.INTERNAL_ERROR


HTTP_STATUS_BY_CODE = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.USER_NOT_FOUND: 404,
    ErrorCode.PROJECT_NOT_FOUND: 404,
    ErrorCode.APPLICATION_NOT_FOUND: 404,
    ErrorCode.RELEASE_NOT_FOUND: 404,
    ErrorCode.ARTIFACT_NOT_FOUND: 404,
    ErrorCode.ALREADY_EXISTS: 409,
    ErrorCode.EMAIL_EXISTS: 409,
    ErrorCode.USERNAME_EXISTS: 409,
    ErrorCode.PACKAGE_NAME_EXISTS: 409,
    ErrorCode.RELEASE_EXISTS: 409,
    ErrorCode.ARTIFACT_EXISTS: 409,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_PROJECT_OWNER: 403,
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.REQUEST_CANCELLED: 499,
    ErrorCode.INTERNAL_ERROR: 500,
}


def status_for(error: AppError) -> int:
    return HTTP_STATUS_BY_CODE[error.code]
