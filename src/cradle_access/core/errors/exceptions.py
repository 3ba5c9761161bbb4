"""Domain exceptions for the application.

These exceptions represent business-logic errors and are automatically
converted to RFC 7807 Problem Details responses by the exception handlers.

Data-integrity errors (duplicate slugs, unknown permissions, invalid
relationship types, protected or referenced permissions) are raised only
by mutation operations. Read-only authorization checks never raise them.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application errors.

    All domain exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Raised when a requested resource is not found.

    Example:
        raise NotFoundError("User not found", details={"user_id": str(user_id)})
    """

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(AppException):
    """Raised when there's a conflict with existing data.

    Example:
        raise ConflictError("Role already exists", details={"slug": slug})
    """

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class ValidationError(AppException):
    """Raised when request data fails validation.

    Example:
        raise ValidationError(
            "Invalid input data",
            errors=[{"field": "relationship_type", "message": "Unknown type"}]
        )
    """

    message = "Validation error"
    error_code = "validation_error"
    status_code = 422

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = errors
        super().__init__(message=message, details=details, **kwargs)


class UnauthorizedError(AppException):
    """Raised when authentication is required but not provided or invalid.

    Example:
        raise UnauthorizedError("Invalid access token")
    """

    message = "Authentication required"
    error_code = "unauthorized"
    status_code = 401


class ForbiddenError(AppException):
    """Raised when user lacks permission to access a resource.

    Example:
        raise ForbiddenError(
            "Insufficient permissions",
            details={"required_permission": "user.delete"}
        )
    """

    message = "Access forbidden"
    error_code = "forbidden"
    status_code = 403


# ============================================================
# Authorization Decisions
# ============================================================


class AccessDeniedError(ForbiddenError):
    """Raised when an authorization decision is Deny.

    The error_code carries the deny reason (``missing_permission`` or
    ``not_owner_or_permission``).
    """

    message = "You do not have permission to perform this action"
    error_code = "missing_permission"


class LastAdminProtectedError(ConflictError):
    """Raised when removing the last administrator is attempted."""

    message = "Cannot remove the last administrator"
    error_code = "last_admin_protected"


# ============================================================
# Permission Data Integrity
# ============================================================


class DuplicateSlugError(ConflictError):
    """Raised when a permission or role slug is already taken."""

    message = "Slug already exists"
    error_code = "duplicate_slug"

    def __init__(self, slug: str, kind: str = "permission", **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        details.update({"slug": slug, "kind": kind})
        super().__init__(
            message=f"A {kind} with slug '{slug}' already exists",
            details=details,
            **kwargs,
        )


class UnknownPermissionError(NotFoundError):
    """Raised when a permission slug cannot be resolved in the registry."""

    message = "Unknown permission"
    error_code = "unknown_permission"

    def __init__(self, slug: str, **kwargs: Any) -> None:
        super().__init__(
            message=f"Unknown permission '{slug}'",
            resource="permission",
            resource_id=slug,
            **kwargs,
        )


class InvalidRelationshipTypeError(ValidationError):
    """Raised when a device relationship type is outside the fixed set."""

    message = "Invalid relationship type"
    error_code = "invalid_relationship_type"

    def __init__(self, value: str, allowed: list[str], **kwargs: Any) -> None:
        super().__init__(
            message=f"Invalid relationship type '{value}'",
            errors=[
                {
                    "field": "relationship_type",
                    "message": f"Must be one of: {', '.join(allowed)}",
                }
            ],
            **kwargs,
        )


class SystemPermissionProtectedError(ConflictError):
    """Raised when deleting a system-flagged permission."""

    message = "System permissions cannot be deleted"
    error_code = "system_permission_protected"


class PermissionInUseError(ConflictError):
    """Raised when deleting a permission still granted to a role or user."""

    message = "Permission is still in use"
    error_code = "permission_in_use"
