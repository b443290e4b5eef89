"""
Meal Planner Backend - Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for client and upstream failures.
How:   Each exception carries a user-facing `message` and a `context` dict.
       Global handlers (registered in main.py) turn them into the
       `{"success": false, "message": ...}` envelope with the right status.
Who:   Raised by services and routes; caught by the global handlers.

Exception Hierarchy:
    MealPlannerError (base)
    ├── ClientInputError            → 400 Bad Request
    ├── PayloadTooLargeError        → 413 Payload Too Large
    └── UpstreamServiceError        → 500 Internal Server Error
        ├── GenerationServiceError  → text-generation call failed
        ├── DocumentStoreError      → document store call failed
        └── BlobStorageError        → blob store call failed

The `message` is always safe to return to the client. The `context` is
logged server-side only.
"""

from typing import Any, Dict, Optional


class MealPlannerError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (returned in the API response)
        context:  Debug info (logged, never returned)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred.",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ClientInputError(MealPlannerError):
    """
    Raised when the client omitted a required field or sent an unusable value.

    HTTP: 400 Bad Request. No external call is made once this is raised.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Invalid request.",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class PayloadTooLargeError(MealPlannerError):
    """
    Raised when an uploaded file exceeds the configured size cap.

    Requests that declare an oversized Content-Length are rejected earlier by
    BodySizeLimitMiddleware; this covers bodies sent without one.
    """

    status_code = 413

    def __init__(
        self,
        max_size: int,
        actual_size: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        max_mb = max_size / (1024 * 1024)
        ctx = context or {}
        ctx["max_size"] = max_size
        if actual_size is not None:
            ctx["actual_size"] = actual_size
        super().__init__(
            message=f"File exceeds the maximum upload size of {max_mb:.0f}MB.",
            context=ctx,
        )
        self.max_size = max_size


class UpstreamServiceError(MealPlannerError):
    """
    Raised when an external collaborator (Gemini, document store, blob store)
    fails. HTTP 500 with a generic per-operation message; the raw error is
    logged where it was caught.
    """

    status_code = 500


class GenerationServiceError(UpstreamServiceError):
    """The text-generation call raised or returned no usable text."""

    def __init__(
        self,
        message: str = "Failed to generate meal plan.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DocumentStoreError(UpstreamServiceError):
    """
    A document store read or write failed.

    The message returned to the client is always generic; SQL, table names,
    and driver errors stay in the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class BlobStorageError(UpstreamServiceError):
    """Could not write, list, or delete a blob."""

    def __init__(
        self,
        message: str = "File storage operation failed.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
