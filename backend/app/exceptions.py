"""
Backoffice API: Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the three recoverable error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by the resource services and the database gateway.
When:  During request processing.

Exception Hierarchy:
    BackofficeError (base)
    ├── ValidationError   → 400 Bad Request (missing required field, bad body)
    ├── NotFoundError     → 404 Not Found (zero rows returned or affected)
    └── StorageError      → 500 Internal Server Error (raw storage message)

Anything else escaping a route is an unhandled error: the request logging
middleware converts it into a generic 500 and logs it server-side only.
"""

from typing import Any, Dict, List, Optional


class BackofficeError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Error description returned in the API response
        context:  Additional debug info (logged; only validation details are returned)
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
    Raised when client input fails validation.

    When:    A required field is missing or falsy, or the body is not a JSON object.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "All fields are required",
            "details": {"missing_fields": ["salary"]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        missing_fields: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if missing_fields:
            ctx["missing_fields"] = list(missing_fields)
        super().__init__(message=message, context=ctx)
        self.missing_fields = list(missing_fields or [])


class NotFoundError(BackofficeError):
    """
    Raised when a requested record does not exist.

    When:    Select by key returned no rows, or update/delete affected none.
    HTTP:    404 Not Found
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


class StorageError(BackofficeError):
    """
    Raised when the database gateway fails to execute a statement.

    When:    Connection lost, constraint violation, unknown column, pool failure.
    HTTP:    500 Internal Server Error

    The message is the raw driver message and is returned to the client as is.
    Stack traces never are.
    """

    def __init__(
        self,
        message: str = "A storage error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
