"""
Back-Office Backend: Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for each failure category of the API.
Why:   Services raise typed errors; global handlers (registered in main.py)
       turn them into structured JSON responses with the right status code.
       The UI layer is the only place that decides how a failure is shown.
How:   Each exception carries a user-safe message and an optional context
       dict (logged and, for client errors, returned as `details`).

Exception Hierarchy:
    BackofficeError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── AuthenticationError      → 401 Unauthorized (no/invalid session)
    ├── AuthorizationError       → 403 Forbidden (missing role)
    ├── NotFoundError            → 404 Not Found (unknown or out-of-scope id)
    ├── ConflictError            → 409 Conflict (overlapping appointment)
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── CascadeDeletionError     → 500 (a user-deletion step failed)
    └── DatabaseError            → 500 Internal Server Error

Every failure is scoped to the request that raised it: the request's
transaction is rolled back and no other state is touched.
"""

from typing import Any, Dict, Optional


class BackofficeError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BackofficeError):
    """
    Raised when client input breaks a business rule.

    When:    Malformed interval (end <= start), unknown status or role,
             self-deletion attempt, negative amount.
    HTTP:    400 Bad Request

    Schema-level problems (wrong types, missing JSON fields) are still
    reported by FastAPI as 422; this class covers rules Pydantic can't see.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(BackofficeError):
    """
    Raised when the request carries no verifiable session.

    HTTP:    401 Unauthorized, with `WWW-Authenticate: Bearer`
    """

    def __init__(
        self,
        message: str = "Not authenticated",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(BackofficeError):
    """
    Raised when the caller is authenticated but lacks the required role.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Insufficient permissions",
        required_role: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if required_role:
            ctx["required_role"] = required_role
        super().__init__(message=message, context=ctx)
        self.required_role = required_role


class NotFoundError(BackofficeError):
    """
    Raised when a requested resource does not exist.

    What:    Unknown id, or an id owned by someone outside the caller's scope.
    HTTP:    404 Not Found

    Out-of-scope records are reported exactly like missing ones so that
    ids belonging to other tenants can't be probed.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(BackofficeError):
    """
    Raised when a candidate appointment overlaps an existing one.

    HTTP:    409 Conflict
    Context: `conflicting_ids`, the appointments the candidate collides with
             (empty when the database constraint caught a concurrent write).
    """

    def __init__(
        self,
        message: str = "The selected time slot is not available",
        conflicting_ids: Optional[list] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["conflicting_ids"] = [str(i) for i in (conflicting_ids or [])]
        super().__init__(message=message, context=ctx)


class CascadeDeletionError(BackofficeError):
    """
    Raised when one step of the cascading user deletion fails.

    HTTP:    500 Internal Server Error
    Context: `step`, the table/record kind whose deletion failed.

    The surrounding transaction is rolled back, so the target user is left
    exactly as it was before the request.
    """

    def __init__(
        self,
        step: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["step"] = step
        super().__init__(message=f"Failed to delete user {step}", context=ctx)
        self.step = step


class DatabaseError(BackofficeError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error
    The client always gets a generic message; details are logged server-side.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(BackofficeError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
