"""
School API Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for every failure the API can report.
How:   Each exception class carries a client-safe message, an optional context
       dict, an HTTP status code and a machine-readable error code.
       Global exception handlers (registered in main.py) turn them into
       structured JSON error responses.
Who:   Raised by services and the auth gate; caught by global handlers.

Exception Hierarchy:
    SchoolAPIError (base)
    ├── ValidationError              → 400 Bad Request
    │   ├── MissingFieldsError       → 400 (required field absent/empty)
    │   └── DuplicateRecordError     → 400 (unique email already taken)
    │       └── DuplicateUserError   → 400 (registration with a known email)
    ├── NotFoundError                → 404 Not Found
    │   └── UserNotFoundError        → 404 (login for an unknown email)
    ├── InvalidCredentialsError      → 401 Unauthorized (wrong password)
    ├── NoTokenError                 → 401 Unauthorized (no Authorization header)
    ├── InvalidTokenError            → 403 Forbidden (bad/expired token)
    ├── StorageError                 → 500 Internal Server Error (opaque)
    └── ConfigurationError           → raised at startup, never per request
"""

from typing import Any, Dict, Iterable, Optional


class SchoolAPIError(Exception):
    """
    Base exception for all School API errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SchoolAPIError):
    """
    Raised when client input fails a business rule.

    FastAPI's own schema validation would answer 422; the API reports all
    input problems as 400 so clients only handle one status for bad input.
    """

    status_code = 400
    error_code = "validation_error"

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


class MissingFieldsError(ValidationError):
    """Raised when one or more required fields are absent or empty."""

    error_code = "missing_fields"

    def __init__(self, fields: Iterable[str], message: Optional[str] = None):
        self.fields = list(fields)
        super().__init__(
            message=message or "All fields are required",
            context={"missing": self.fields},
        )


class DuplicateRecordError(ValidationError):
    """Raised when a record with the same unique email already exists."""

    error_code = "duplicate_record"

    def __init__(self, resource: str = "record", message: Optional[str] = None):
        super().__init__(
            message=message or f"A {resource} with this email already exists",
            field="email",
            context={"resource": resource},
        )


class DuplicateUserError(DuplicateRecordError):
    """
    Raised by registration when the email is already registered.

    Covers both the application pre-check and the storage-level UNIQUE
    constraint firing for a concurrent registration.
    """

    error_code = "duplicate_user"

    def __init__(self):
        super().__init__(resource="user", message="User already exists")


class NotFoundError(SchoolAPIError):
    """Raised when a requested resource does not exist."""

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        message: Optional[str] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class UserNotFoundError(NotFoundError):
    """Raised by login when no user has the given email."""

    error_code = "user_not_found"

    def __init__(self):
        super().__init__(resource="user", message="User not found")


class InvalidCredentialsError(SchoolAPIError):
    """Raised by login when the password does not match the stored hash."""

    status_code = 401
    error_code = "invalid_credentials"

    def __init__(self):
        super().__init__(message="Invalid credentials")


class NoTokenError(SchoolAPIError):
    """
    Raised by the auth gate when the request carries no Authorization header.

    HTTP 401: the client has not presented any credential yet.
    """

    status_code = 401
    error_code = "no_token"

    def __init__(self):
        super().__init__(message="Access Denied. No token provided.")


class InvalidTokenError(SchoolAPIError):
    """
    Raised by the auth gate when a presented token is unusable.

    HTTP 403: a credential was presented but it is malformed, tampered with,
    expired, or (store trust model) names a user that no longer exists.
    The reason goes into context for logs only.
    """

    status_code = 403
    error_code = "invalid_token"

    def __init__(self, reason: str = "invalid"):
        super().__init__(
            message="Access Denied. Invalid token.",
            context={"reason": reason},
        )
        self.reason = reason


class StorageError(SchoolAPIError):
    """
    Raised when a database operation fails unexpectedly.

    The message returned to the client is always generic. The underlying
    error type and operation are kept in context and logged server-side.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An internal error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(SchoolAPIError):
    """Raised during startup when settings are unusable."""

    def __init__(self, message: str = "Invalid configuration"):
        super().__init__(message=message)
