"""Custom exceptions for the application."""

from typing import Any, Dict, Optional


class BaseAPIException(Exception):
    """Base exception for all API exceptions."""

    error = "internal_error"

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class BadRequestError(BaseAPIException):
    """Raised when the request is malformed."""

    error = "bad_request"

    def __init__(self, message: str = "Bad request", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 400, details)


class UnauthorizedError(BaseAPIException):
    """Raised when authentication fails."""

    error = "unauthorized"

    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 401, details)


class NotFoundError(BaseAPIException):
    """Raised when a resource is not found."""

    error = "not_found"

    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 404, details)


class PayloadTooLargeError(BaseAPIException):
    """Raised when an upload exceeds the configured size ceiling."""

    error = "payload_too_large"

    def __init__(self, message: str = "File too large", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 413, details)


class UnsupportedMediaTypeError(BaseAPIException):
    """Raised when an upload is not of an accepted media type."""

    error = "invalid_file_type"

    def __init__(self, message: str = "Provide files in PDF format only", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 415, details)


class InternalServerError(BaseAPIException):
    """Raised when an internal server error occurs."""

    error = "internal_error"

    def __init__(self, message: str = "Internal server error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 500, details)


class ServiceUnavailableError(BaseAPIException):
    """Raised when a service is temporarily unavailable."""

    error = "service_unavailable"

    def __init__(self, message: str = "Service unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 503, details)


class StageUnavailableError(ServiceUnavailableError):
    """Raised when the upload staging store cannot be reached."""

    error = "stage_unavailable"

    def __init__(self, message: str = "File staging store unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class ExtractionError(InternalServerError):
    """Raised when text cannot be extracted from a staged document."""

    error = "extraction_failed"

    def __init__(self, message: str = "Failed to extract text from PDF", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class ClassificationError(InternalServerError):
    """Raised when the contract type cannot be detected."""

    error = "classification_failed"

    def __init__(self, message: str = "Contract type detection failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class AnalysisError(InternalServerError):
    """Raised when the contract analysis fails or comes back incomplete."""

    error = "analysis_failed"

    def __init__(self, message: str = "Contract analysis failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class LLMError(Exception):
    """Raised by the language-model client when a call cannot be completed.

    Not an API exception: adapters translate it into the error of the
    operation that was running.
    """
