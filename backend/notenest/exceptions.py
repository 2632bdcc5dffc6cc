"""
NoteNest Backend - Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for every failure a request can end in.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers (registered in main.py) translate them into JSON
       error responses with the matching HTTP status code.
Who:   Raised by services and the access guard; caught by global handlers.

Exception Hierarchy:
    NoteNestError (base)                 → 500
    ├── ValidationError                  → 400 Bad Request
    │   ├── DuplicateEmailError
    │   ├── DuplicateUsernameError
    │   ├── InvalidCredentialsError
    │   ├── NotAnImageError
    │   ├── NoFileError
    │   └── FileTooLargeError            → 413 Payload Too Large
    ├── AuthError
    │   ├── MissingTokenError            → 401 Unauthorized
    │   └── InvalidTokenError            → 403 Forbidden
    ├── NotFoundError                    → 404 Not Found
    ├── FileStorageError                 → 500
    ├── DatabaseError                    → 500
    └── InternalError                    → 500

Every failure is terminal for its request: nothing in the service layer
retries.
"""

from typing import Any, Dict, Optional


class NoteNestError(Exception):
    """
    Base exception for all NoteNest application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for 4xx errors)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


# ── 400: client-correctable input ─────────────────────────────────────────


class ValidationError(NoteNestError):
    """
    Raised when client input fails a business rule.

    HTTP: 400 Bad Request (schema-level failures from FastAPI are mapped to
    400 as well, see main.register_exception_handlers).
    """

    status_code = 400

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


class DuplicateEmailError(ValidationError):
    def __init__(self):
        super().__init__(message="Email already exists", field="email")


class DuplicateUsernameError(ValidationError):
    def __init__(self):
        super().__init__(message="Username already exists", field="username")


class InvalidCredentialsError(ValidationError):
    """
    Raised for both an unknown email and a wrong password.

    The two cases share one message so a caller cannot probe which emails
    are registered.
    """

    def __init__(self):
        super().__init__(message="Invalid email or password")


class NotAnImageError(ValidationError):
    def __init__(self, mimetype: Optional[str] = None):
        super().__init__(
            message="Not an image! Please upload only images.",
            field="image",
            context={"mimetype": mimetype},
        )


class NoFileError(ValidationError):
    def __init__(self):
        super().__init__(message="No image uploaded", field="image")


class FileTooLargeError(ValidationError):
    """Upload exceeded MAX_UPLOAD_SIZE. HTTP: 413 Payload Too Large."""

    status_code = 413

    def __init__(self, max_size: int, actual_size: Optional[int] = None):
        max_mb = max_size / (1024 * 1024)
        ctx: Dict[str, Any] = {"max_size_bytes": max_size}
        if actual_size is not None:
            ctx["actual_size_bytes"] = actual_size
        super().__init__(
            message=f"File too large. Maximum upload size is {max_mb:g}MB.",
            field="image",
            context=ctx,
        )
        self.max_size = max_size


# ── 401/403: access denial ────────────────────────────────────────────────


class AuthError(NoteNestError):
    """
    Base for bearer-token denials.

    The two subclasses are distinct failure kinds: a request with no token at
    all (401) versus a token that fails verification (403).
    """

    status_code = 401

    def __init__(
        self,
        message: str = "Access denied",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MissingTokenError(AuthError):
    status_code = 401

    def __init__(self):
        super().__init__(message="Access denied")


class InvalidTokenError(AuthError):
    status_code = 403

    def __init__(self, reason: Optional[str] = None):
        # reason is for logs only; clients always see the same message
        super().__init__(message="Invalid token", context={"reason": reason} if reason else None)


# ── 404 ───────────────────────────────────────────────────────────────────


class NotFoundError(NoteNestError):
    """
    Raised when a resource does not exist OR belongs to another user.

    Both cases produce the same message so a caller cannot tell whether an id
    exists for somebody else.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


# ── 500 ───────────────────────────────────────────────────────────────────


class FileStorageError(NoteNestError):
    """
    Raised when a file system operation fails (disk full, permission denied).

    Context holds the path and OS error for logs; clients get the message only.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(NoteNestError):
    """
    Raised when a database operation fails unexpectedly.

    The client-facing message is always generic; the original error type is
    kept in context for the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InternalError(NoteNestError):
    """Raised for server-side misconfiguration, e.g. a missing JWT_SECRET."""

    def __init__(
        self,
        message: str = "An internal error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
