"""
Service error hierarchy.

Services raise ServiceError subclasses; routers convert them to
HTTPException with a structured ``{"error", "message"}`` body.
"""

from fastapi import HTTPException


class ServiceError(Exception):
    """Base exception for service-layer errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(ServiceError):
    """Raised when a tenant document does not exist (or is outside the caller's school)."""

    def __init__(self, resource: str, resource_id: str | None = None):
        message = f"{resource} {resource_id} not found" if resource_id else f"{resource} not found"
        super().__init__(
            message=message,
            error_code=f"{resource.upper().replace(' ', '_')}_NOT_FOUND",
            status_code=404,
        )


class ForbiddenError(ServiceError):
    """Raised when the caller's role or tenant does not allow the operation."""

    def __init__(self, message: str = "You do not have permission to perform this action."):
        super().__init__(
            message=message,
            error_code="PERMISSION_DENIED",
            status_code=403,
        )


class ValidationFailedError(ServiceError):
    """Raised for business-rule validation failures that Pydantic cannot express."""

    def __init__(self, message: str, error_code: str = "VALIDATION_FAILED"):
        super().__init__(message=message, error_code=error_code, status_code=422)


def to_http_exception(e: ServiceError) -> HTTPException:
    """Convert a service error to an HTTPException."""
    return HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    )
