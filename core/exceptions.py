"""
Custom exceptions for the product import pipeline with structured error context.

Each exception carries context information for debugging and for the
import error log. ``str()`` renders the message, the context and the
"Caused by" chain.

Exception Hierarchy:
    ETLException (base)
    ├── ExtractionError
    │   ├── APIExtractionError
    │   │   ├── NetworkError
    │   │   ├── HTTPStatusError
    │   │   │   ├── RateLimitError
    │   │   │   ├── ServerError
    │   │   │   ├── AuthenticationError
    │   │   │   └── ResourceNotFoundError
    │   │   └── RetriesExhaustedError
    │   └── DataFormatError
    ├── TransformationError
    │   └── ValidationError
    │       └── SchemaValidationError
    ├── LoadError
    │   └── UpsertError
    └── RetryableError / NonRetryableError (mixins)
"""

from typing import Optional, Dict, Any, List
from datetime import datetime, timezone


class ETLException(Exception):
    """
    Base exception for all import-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (page, url, counts, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Retry Strategy Mixins
# ============================================================================

class RetryableError(ETLException):
    """
    Mixin for transient errors:
    - Network timeouts and connection failures
    - Rate limiting (HTTP 429)
    - Server errors (HTTP 500, 502, 503, 504)
    """
    pass


class NonRetryableError(ETLException):
    """
    Mixin for permanent errors:
    - Authentication failures (HTTP 401, 403)
    - Resource not found (HTTP 404)
    - Invalid data format
    - Schema validation errors
    """
    pass


# ============================================================================
# Extraction Errors
# ============================================================================

class ExtractionError(ETLException):
    """Base exception for data extraction failures."""
    pass


class APIExtractionError(ExtractionError):
    """
    Exception raised when fetching a page from the source API fails.

    Context should include:
        - api_url: The API endpoint that failed
        - page: Page number being fetched
        - status_code: HTTP status code (if applicable)
        - retry_count: Number of attempts made
    """
    pass


class NetworkError(RetryableError, APIExtractionError):
    """Transport-level failure: connection refused, DNS, read/connect timeout."""
    pass


class HTTPStatusError(APIExtractionError):
    """The source answered with a non-2xx status code."""

    def __init__(
        self,
        message: str,
        status_code: int,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(message, context, original_exception)
        self.status_code = status_code
        self.context["status_code"] = status_code


class RateLimitError(RetryableError, HTTPStatusError):
    """HTTP 429 from the source."""

    def __init__(
        self,
        message: str,
        status_code: int = 429,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        retry_after: Optional[int] = None
    ):
        super().__init__(message, status_code, context, original_exception)
        self.retry_after = retry_after
        if retry_after:
            self.context["retry_after"] = retry_after


class ServerError(RetryableError, HTTPStatusError):
    """HTTP 500/502/503/504 from the source."""
    pass


class AuthenticationError(NonRetryableError, HTTPStatusError):
    """Authentication failures (HTTP 401, 403) that should not be retried."""
    pass


class ResourceNotFoundError(NonRetryableError, HTTPStatusError):
    """Resource not found errors (HTTP 404) that should not be retried."""
    pass


class RetriesExhaustedError(APIExtractionError):
    """
    Raised once every attempt of a request has failed with a retryable error.

    Attributes:
        attempts: Number of attempts made
        last_error: The failure of the final attempt
    """

    def __init__(
        self,
        message: str,
        attempts: int,
        last_error: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, context, original_exception=last_error)
        self.attempts = attempts
        self.last_error = last_error
        self.context["retry_count"] = attempts


class DataFormatError(NonRetryableError, ExtractionError):
    """Response body is not the JSON object the source contract promises."""
    pass


# ============================================================================
# Transformation Errors
# ============================================================================

class TransformationError(ETLException):
    """Base exception for data transformation failures."""
    pass


class ValidationError(TransformationError):
    """
    Exception raised when a product fails business-rule validation.

    Attributes:
        errors: Mapping of field name to list of messages
    """

    def __init__(
        self,
        message: str,
        errors: Optional[Dict[str, List[str]]] = None,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(message, context, original_exception)
        self.errors = errors or {}
        self.context["field_errors"] = self.errors


class SchemaValidationError(NonRetryableError, ValidationError):
    """Raised by ``ProductValidator.validate`` for an invalid product."""
    pass


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(ETLException):
    """Base exception for data loading failures."""
    pass


class UpsertError(LoadError):
    """
    Exception raised when a batch upsert fails and has been rolled back.

    Context should include:
        - count: Number of products in the batch
        - table_name: Target table
        - conflict_fields: Fields used for conflict detection
    """
    pass
