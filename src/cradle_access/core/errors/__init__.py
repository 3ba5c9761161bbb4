"""Error handling module with RFC 7807 Problem Details."""

from cradle_access.core.errors.exceptions import (
    AccessDeniedError,
    AppException,
    ConflictError,
    DuplicateSlugError,
    ForbiddenError,
    InvalidRelationshipTypeError,
    LastAdminProtectedError,
    NotFoundError,
    PermissionInUseError,
    SystemPermissionProtectedError,
    UnauthorizedError,
    UnknownPermissionError,
    ValidationError,
)
from cradle_access.core.errors.handlers import (
    FieldError,
    ProblemDetail,
    register_exception_handlers,
)


__all__ = [
    "AccessDeniedError",
    # Exceptions
    "AppException",
    "ConflictError",
    "DuplicateSlugError",
    # Handlers
    "FieldError",
    "ForbiddenError",
    "InvalidRelationshipTypeError",
    "LastAdminProtectedError",
    "NotFoundError",
    "PermissionInUseError",
    "ProblemDetail",
    "SystemPermissionProtectedError",
    "UnauthorizedError",
    "UnknownPermissionError",
    "ValidationError",
    "register_exception_handlers",
]
