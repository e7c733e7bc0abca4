"""Custom exceptions for application-specific error handling."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class SLAEngineException(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 400,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.headers = headers
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "success": False,
            "error": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class NotFoundError(SLAEngineException):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "not_found", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="NOT_FOUND", details=details, status_code=404)


class BadRequestError(SLAEngineException):
    """Raised when request is invalid."""

    def __init__(self, message: str = "bad_request", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="BAD_REQUEST", details=details, status_code=400)


class RateLimitExceeded(SLAEngineException):
    """Raised when a client exceeds rate limits."""

    def __init__(self, *, retry_after: int, limit: int, window_seconds: int):
        headers = {
            "Retry-After": str(retry_after),
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Window": str(window_seconds),
        }
        super().__init__(
            "rate_limit_exceeded",
            error_code="RATE_LIMIT",
            details={"retry_after": retry_after, "limit": limit, "window_seconds": window_seconds},
            status_code=429,
            headers=headers,
        )


# ===== VALIDATION EXCEPTIONS =====


class ValidationException(SLAEngineException):
    """Base exception for validation errors."""


class ValidationFailedError(ValidationException):
    """Raised when a candidate configuration violates structural or business rules.

    Carries the full list of blocking errors plus any warnings so callers can
    show every field-level reason at once. Nothing has been written when this
    is raised.
    """

    def __init__(
        self,
        errors: List[Dict[str, Any]],
        *,
        warnings: Optional[List[Dict[str, Any]]] = None,
        message: str = "validation_failed",
        error_code: str = "VALIDATION_FAILED",
    ):
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        super().__init__(
            message,
            error_code=error_code,
            details={"errors": self.errors},
            status_code=400,
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["errors"] = self.errors
        payload["warnings"] = self.warnings
        return payload


class ReferentialViolationError(ValidationFailedError):
    """Raised when a department, incident type or priority is outside the configuration's company."""

    def __init__(
        self,
        errors: List[Dict[str, Any]],
        *,
        warnings: Optional[List[Dict[str, Any]]] = None,
        message: str = "referential_violation",
    ):
        super().__init__(errors, warnings=warnings, message=message, error_code="REFERENTIAL_VIOLATION")


# ===== DATABASE EXCEPTIONS =====


class DatabaseException(SLAEngineException):
    """Base exception for database errors."""


class DuplicateConfigurationError(DatabaseException):
    """Raised by the store when the active-tuple unique index rejects a write."""

    def __init__(self, message: str = "duplicate_configuration", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="DUPLICATE_CONFIGURATION", details=details, status_code=409)


class StoreFailureError(DatabaseException):
    """Raised when the persistence layer fails unexpectedly."""

    def __init__(self, message: str = "internal_error", *, operation: Optional[str] = None):
        details = {"operation": operation} if operation else {}
        super().__init__(message, error_code="STORE_FAILURE", details=details, status_code=500)
