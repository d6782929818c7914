"""Custom exceptions for the IoT control API."""

from typing import Any, Optional


class IoTAPIException(Exception):
    """Base exception for errors that map to an HTTP response."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "internal_error",
        extra: Optional[dict[str, Any]] = None,
    ):
        """Initialize exception with message and status code.

        Args:
            message: Exception message
            status_code: HTTP status code
            error_code: Machine-readable error code
            extra: Additional fields merged into the JSON error body
        """
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.extra = extra or {}
        super().__init__(self.message)


class NotFoundError(IoTAPIException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found", error_code: str = "not_found"):
        """Initialize NotFoundError with 404 status code."""
        super().__init__(message, 404, error_code)


class UnauthorizedError(IoTAPIException):
    """Missing, invalid or expired credential."""

    def __init__(
        self,
        message: str = "Not authorized",
        error_code: str = "unauthorized",
        extra: Optional[dict[str, Any]] = None,
    ):
        """Initialize UnauthorizedError with 401 status code."""
        super().__init__(message, 401, error_code, extra)


class ForbiddenError(IoTAPIException):
    """Authenticated caller lacks the required role."""

    def __init__(
        self,
        message: str = "Forbidden",
        error_code: str = "forbidden",
        extra: Optional[dict[str, Any]] = None,
    ):
        """Initialize ForbiddenError with 403 status code."""
        super().__init__(message, 403, error_code, extra)


class ValidationError(IoTAPIException):
    """Validation error exception."""

    def __init__(self, message: str = "Validation failed"):
        """Initialize ValidationError with 422 status code."""
        super().__init__(message, 422, "validation_error")


class BadRequestError(IoTAPIException):
    """Request is well-formed but carries an unacceptable value."""

    def __init__(self, message: str = "Bad request"):
        super().__init__(message, 400, "bad_request")


class ConflictError(IoTAPIException):
    """Resource conflict exception."""

    def __init__(self, message: str = "Resource conflict"):
        """Initialize ConflictError with 409 status code."""
        super().__init__(message, 409, "conflict")


class ServiceUnavailableError(IoTAPIException):
    """A required collaborator is not configured."""

    def __init__(self, message: str = "Service unavailable"):
        super().__init__(message, 503, "service_unavailable")


class UpstreamError(IoTAPIException):
    """An upstream HTTP provider failed."""

    def __init__(self, message: str = "Upstream service error"):
        super().__init__(message, 502, "upstream_error")


class RoleConfigurationError(Exception):
    """A guard was declared with an unusable permitted-role argument.

    Raised while routes are being declared, never while serving a request.
    """
