"""
DevCamper API — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions, each carrying the HTTP status it maps to.
How:   Services raise these; the handlers registered in main.py render every
       one of them as `{"success": false, "error": <message>}` with
       `status_code`. Routes never catch them.

Exception Hierarchy:
    DevCamperError (base)              → 500
    ├── BadRequestError                → 400
    │   └── DuplicateFieldError        → 400
    ├── UnauthorizedError              → 401
    │   └── OwnershipError             → 401 (Access Policy denial)
    ├── ForbiddenError                 → 403 (role gate)
    ├── NotFoundError                  → 404
    ├── RateLimitExceededError         → 429
    ├── FileStorageError               → 500
    ├── MailDeliveryError              → 500
    ├── DatabaseError                  → 500
    └── GeocodingError                 → 503

Ownership denials are reported as 401 rather than 403. Clients already
depend on that status, so it is kept; the role gate uses 403.
"""

from typing import Any, Dict, Optional


class DevCamperError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:      User-facing error description (safe to return in API response)
        status_code:  HTTP status the error handler responds with
        context:      Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "Server Error",
        context: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.context = context or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class BadRequestError(DevCamperError):
    """
    Raised when client input is invalid or breaks a business rule.

    When: body validation, duplicate bootcamp ownership, missing or invalid
    upload, unknown reset token, uncoercible filter values.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Bad request",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DuplicateFieldError(BadRequestError):
    """Unique constraint violated (e.g. a second user with the same email)."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Duplicate field value entered", context=context)


class UnauthorizedError(DevCamperError):
    """Authentication missing, invalid, or expired; or bad credentials."""

    status_code = 401

    def __init__(
        self,
        message: str = "Not authorized to access this route",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class OwnershipError(UnauthorizedError):
    """
    Raised by the Access Policy when the acting user neither owns the
    resource nor is an admin. The message names the acting user id.
    """

    def __init__(
        self,
        user_id: Any,
        action: str,
        resource: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx.update({"user_id": str(user_id), "action": action, "resource": resource})
        super().__init__(
            message=f"User {user_id} is not authorized to {action} {resource}",
            context=ctx,
        )
        self.user_id = user_id


class ForbiddenError(DevCamperError):
    """Raised by the role gate when the user's role is not allowed on a route."""

    status_code = 403

    def __init__(self, role: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["role"] = role
        super().__init__(
            message=f"User role {role} is not authorized to access this route",
            context=ctx,
        )
        self.role = role


class NotFoundError(DevCamperError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into
    this exception before any authorization check runs.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"{resource} not found"
            if resource_id is not None:
                message = f"{resource} not found with id of {resource_id}"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class RateLimitExceededError(DevCamperError):
    """Client exceeded the per-IP request window. Rendered with Retry-After."""

    status_code = 429

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Too many requests. Please wait {retry_after} seconds before retrying."
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class FileStorageError(DevCamperError):
    """
    Raised when writing an uploaded file fails (disk full, permission denied).

    The client only sees the generic message; the OS error stays in context.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Problem with file upload",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MailDeliveryError(DevCamperError):
    """SMTP delivery failed."""

    status_code = 500

    def __init__(
        self,
        message: str = "Email could not be sent",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(DevCamperError):
    """
    Raised when a store operation fails unexpectedly.

    Details (SQL, constraint names) are logged server-side only.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Server Error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class GeocodingError(DevCamperError):
    """
    The geocoding provider could not be reached or answered with an error.

    No retry is attempted; 503 tells the client to try again later.
    """

    status_code = 503

    def __init__(
        self,
        message: str = "Geocoding service is temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
