"""Service error taxonomy mapped onto HTTP status codes by the app layer."""
from __future__ import annotations

from .domain.types import ErrorCode


class ServiceError(Exception):
    """Base error carrying the HTTP status and a client-facing message."""

    status_code = 500
    code = ErrorCode.INTERNAL_ERROR
    default_message = "Internal server error"

    def __init__(self, detail: str, message: str | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.message = message or self.default_message


class ValidationError(ServiceError):
    """Raised for malformed or missing request fields and invalid plot entries."""

    status_code = 400
    code = ErrorCode.VALIDATION_ERROR
    default_message = "Validation error"


class PlotDataEmptyError(ValidationError):
    """Raised when a plot request produced no series."""

    code = ErrorCode.EMPTY_PLOT_DATA
    default_message = "Failed to generate plot data"


class ForbiddenError(ServiceError):
    status_code = 403
    code = ErrorCode.FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(ServiceError):
    status_code = 404
    code = ErrorCode.NOT_FOUND
    default_message = "Not found"


class ConflictError(ServiceError):
    status_code = 409
    code = ErrorCode.DUPLICATE
    default_message = "Duplicate data error"


class FileTooLargeError(ServiceError):
    status_code = 413
    code = ErrorCode.FILE_TOO_LARGE
    default_message = "File too large"


class UnsupportedMediaError(ServiceError):
    status_code = 422
    code = ErrorCode.UNSUPPORTED_TYPE
    default_message = "Only CSV files are allowed"


class StorageReadError(ServiceError):
    """Raised when a stored CSV could not be read or parsed."""

    code = ErrorCode.READ_ERROR
    default_message = "Failed to read CSV file"


class UnauthorizedError(ServiceError):
    """Raised when a request carries no requester identity."""

    status_code = 401
    code = ErrorCode.UNAUTHORIZED
    default_message = "Not authorized"
