"""
Postboard Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the error scenarios of the post API.
Why:   Custom exceptions let the global handlers in main.py pick the HTTP status
       and body shape, so route handlers never build error responses by hand.
How:   Each exception carries a short `error` label (returned to the client),
       a human-readable message, and an optional context dict.
Who:   Raised by services and middleware; caught by global handlers.

Exception Hierarchy:
    PostboardError (base)
    ├── ValidationError          → 400 Bad Request ("Missing fields")
    ├── ParseError               → 400 Bad Request ("Invalid JSON")
    ├── NotFoundError            → 404 Not Found ("Post not found")
    ├── PayloadTooLargeError     → 413 Payload Too Large
    └── InternalError            → 500 Internal Server Error (generic message)
"""

from typing import Any, Dict, List, Optional


class PostboardError(Exception):
    """
    Base exception for all Postboard application errors.

    Attributes:
        error:    Short label placed in the `error` key of the response body
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    error = "Internal server error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ):
        self.message = message
        self.context = context or {}
        if error:
            self.error = error
        super().__init__(self.message)


class ValidationError(PostboardError):
    """
    Raised when the client sent a body that can be corrected.

    HTTP: 400 Bad Request

    Example response:
        {
            "error": "Missing fields",
            "message": "title, content and date are required",
            "details": {"fields": ["title"]}
        }
    """

    error = "Missing fields"

    def __init__(
        self,
        message: str = "Validation failed",
        fields: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ):
        ctx = context or {}
        if fields:
            ctx["fields"] = list(fields)
        super().__init__(message=message, context=ctx, error=error)
        self.fields = list(fields or [])


class ParseError(PostboardError):
    """
    Raised when the request body is not valid JSON.

    HTTP: 400 Bad Request

    The raw body captured by RawBodyMiddleware is logged by the handler,
    never echoed back to the client.
    """

    error = "Invalid JSON"

    def __init__(
        self,
        message: str = "Request body could not be decoded",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(PostboardError):
    """
    Raised when a requested resource does not exist.

    When: DELETE /api/posts/{id} or POST /api/posts/{id}/read with an unknown id.
    HTTP: 404 Not Found

    UPDATE and DELETE report zero affected rows rather than raising, so the
    service layer converts that into this exception.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(
            message=message,
            context=ctx,
            error=f"{resource.capitalize()} not found",
        )


class PayloadTooLargeError(PostboardError):
    """
    Raised when a request body exceeds the configured size cap.

    HTTP: 413 Payload Too Large
    """

    error = "Payload too large"

    def __init__(
        self,
        limit: int,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["limit"] = limit
        super().__init__(
            message=f"Request body exceeds the {limit} byte limit",
            context=ctx,
        )
        self.limit = limit


class InternalError(PostboardError):
    """
    Raised when a storage operation fails unexpectedly.

    HTTP: 500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. The SQL error
        is logged server-side only.
    """

    error = "Internal server error"

    def __init__(
        self,
        message: str = "An internal error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
