"""
MoveMate Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions raised by services, the auth
       dependency and middleware.
How:   Each exception carries a client-safe message and an optional context
       dict. Global handlers registered in main.py map each type to an HTTP
       status code and a structured JSON body.

Exception Hierarchy:
    MoveMateError (base)
    ├── BadRequestError          → 400 (missing driver setup, already decided)
    ├── AuthenticationError      → 401 (missing / invalid bearer token)
    ├── ForbiddenError           → 403 (not a driver, filter outside own scope)
    ├── NotFoundError            → 404 (request not in the driver's pool)
    ├── RateLimitExceededError   → 429
    └── DatabaseError            → 500

None of these are retried inside the service; they end the current call.
"""

from typing import Any, Dict, Optional


class MoveMateError(Exception):
    """
    Base exception for all MoveMate application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, and returned as `details`
                  only by the handlers that choose to)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class BadRequestError(MoveMateError):
    """
    The call is well-formed but cannot be honoured in the current state.

    When:  The driver has no service categories or regions configured, or
           tries to decide an estimate that is already decided.
    HTTP:  400 Bad Request
    """

    def __init__(
        self,
        message: str = "The request could not be processed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationError(MoveMateError):
    """
    Raised by the bearer-token dependency.

    `code` distinguishes a missing header from a token that failed to verify,
    so clients know whether to log in or to refresh.
    HTTP:  401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Authentication is required",
        code: str = "authentication_required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.code = code


class ForbiddenError(MoveMateError):
    """
    The caller is authenticated but may not perform this operation.

    When:  The user is missing, soft-deleted, not a DRIVER, has no driver
           profile, or filtered by a moving type / region outside their
           own configuration.
    HTTP:  403 Forbidden
    """

    def __init__(
        self,
        message: str = "You do not have permission to access this resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(MoveMateError):
    """
    Raised when a requested resource does not exist for this caller.

    A moving request that exists but lies outside the driver's categories
    or regions is reported the same way as one that does not exist.
    HTTP:  404 Not Found
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


class DatabaseError(MoveMateError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the original
    error type is kept in `context` for the server log.
    HTTP:  500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(MoveMateError):
    """
    Raised when a client exceeds the decision endpoint rate limit.
    HTTP:  429 Too Many Requests (with Retry-After header)
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
