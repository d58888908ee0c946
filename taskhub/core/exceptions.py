"""
Error taxonomy for Task Hub.

Services raise these; the HTTP layer maps them to status codes in
exception_handlers. Every error carries a human-readable message, a
machine-readable error code and optional details.
"""
from typing import Any, Dict, Optional


class TaskServiceError(Exception):
    """Base exception for all Task Hub errors."""

    status_code: int = 500
    default_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class AuthenticationError(TaskServiceError):
    """No credential, or the credential failed verification."""

    status_code = 401
    default_code = "AUTHENTICATION_ERROR"

    def __init__(self, message: str = "Access denied", reason: Optional[str] = None):
        super().__init__(message, details={"reason": reason} if reason else None)


class AuthorizationError(TaskServiceError):
    """Valid identity without the rights for the requested operation."""

    status_code = 403
    default_code = "AUTHORIZATION_ERROR"

    def __init__(
        self,
        message: str = "Permission denied",
        resource: Optional[str] = None,
        action: Optional[str] = None,
    ):
        details = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, details=details)


class ValidationError(TaskServiceError):
    """Malformed input."""

    status_code = 400
    default_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)


class NotFoundError(TaskServiceError):
    """The referenced resource does not exist."""

    status_code = 404
    default_code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            f"{resource} not found",
            details={"resource": resource.lower(), "id": resource_id},
        )


class InternalError(TaskServiceError):
    """Store or infrastructure failure."""

    status_code = 500
    default_code = "INTERNAL_ERROR"
