"""Custom exception hierarchy for the Garage API.

This module defines a consistent exception hierarchy that enables:
- Structured error responses with error codes
- One HTTP status code per error kind, shared by every entity
- Machine-readable error handling for API consumers

Usage:
    from garage.core.exceptions import CarNotFoundError

    raise CarNotFoundError(car_id=42)
"""

from typing import Any


class GarageError(Exception):
    """Base exception for all Garage API errors.

    All custom exceptions should inherit from this class to enable
    consistent error handling and response formatting.

    Attributes:
        code: Machine-readable error code (e.g., "CAR_NOT_FOUND")
        message: Human-readable error message
        status_code: HTTP status code to return
        details: Additional error details (optional)
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An unexpected error occurred"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Override default message
            code: Override default error code
            details: Additional error details
        """
        if message:
            self.message = message
        if code:
            self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self, request_id: str | None = None) -> dict[str, Any]:
        """Convert exception to API error response format.

        Args:
            request_id: Request correlation ID

        Returns:
            Error response dictionary
        """
        error: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if request_id:
            error["request_id"] = request_id
        if self.details:
            error["details"] = self.details
        return {"error": error}


# =============================================================================
# Resource Not Found Errors (404)
# =============================================================================


class NotFoundError(GarageError):
    """Base class for resource not found errors."""

    code: str = "NOT_FOUND"
    message: str = "Resource not found"
    status_code: int = 404


class UserNotFoundError(NotFoundError):
    """Raised when a user cannot be found."""

    code: str = "USER_NOT_FOUND"
    message: str = "User not found"

    def __init__(
        self,
        user_id: int | None = None,
        username: str | None = None,
        message: str | None = None,
    ) -> None:
        """Initialize with optional identifiers."""
        details: dict[str, Any] = {}
        if user_id is not None:
            details["user_id"] = user_id
        if username:
            details["username"] = username
            if not message:
                message = f"User {username} not found"

        super().__init__(message=message, details=details if details else None)


class CarNotFoundError(NotFoundError):
    """Raised when a car cannot be found."""

    code: str = "CAR_NOT_FOUND"
    message: str = "Car not found"

    def __init__(self, car_id: int | None = None, message: str | None = None) -> None:
        details: dict[str, Any] = {}
        if car_id is not None:
            details["car_id"] = car_id
            if not message:
                message = f"Car with ID {car_id} not found"

        super().__init__(message=message, details=details if details else None)


class PartNotFoundError(NotFoundError):
    """Raised when a part cannot be found."""

    code: str = "PART_NOT_FOUND"
    message: str = "Part not found"

    def __init__(self, part_id: int | None = None, message: str | None = None) -> None:
        details: dict[str, Any] = {}
        if part_id is not None:
            details["part_id"] = part_id
            if not message:
                message = f"Part with ID {part_id} not found"

        super().__init__(message=message, details=details if details else None)


# =============================================================================
# Validation Errors (400)
# =============================================================================


class ValidationError(GarageError):
    """Raised when input validation fails."""

    code: str = "VALIDATION_ERROR"
    message: str = "Validation error"
    status_code: int = 400

    def __init__(
        self,
        message: str | None = None,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with optional field information."""
        if details is None:
            details = {}
        if field:
            details["field"] = field
        super().__init__(message=message, details=details if details else None)


# =============================================================================
# Conflict Errors (409)
# =============================================================================


class ConflictError(GarageError):
    """Raised when a write violates a uniqueness constraint."""

    code: str = "CONFLICT"
    message: str = "Resource already exists"
    status_code: int = 409


class DuplicateUsernameError(ConflictError):
    """Raised when a username is already registered."""

    code: str = "DUPLICATE_USERNAME"
    message: str = "Username is already registered"

    def __init__(self, username: str | None = None) -> None:
        super().__init__(details={"username": username} if username else None)


# =============================================================================
# Authentication Errors (400, 401, 500)
# =============================================================================


class AuthenticationError(GarageError):
    """Raised when authentication fails."""

    code: str = "AUTHENTICATION_FAILED"
    message: str = "Authentication failed"
    status_code: int = 401


class MissingCredentialsError(AuthenticationError):
    """Raised when the username or password is empty."""

    code: str = "MISSING_CREDENTIALS"
    message: str = "Missing credentials"
    status_code: int = 400


class InvalidCredentialsError(AuthenticationError):
    """Raised for an unknown username and for a wrong password alike."""

    code: str = "INVALID_CREDENTIALS"
    message: str = "Wrong credentials"


class InvalidTokenError(AuthenticationError):
    """Raised when a bearer token is missing, malformed, forged or expired."""

    code: str = "INVALID_TOKEN"
    message: str = "Invalid token"


class TokenCreationError(AuthenticationError):
    """Raised when a token cannot be signed (server misconfiguration)."""

    code: str = "TOKEN_CREATION_FAILED"
    message: str = "Token creation error"
    status_code: int = 500


# =============================================================================
# Server-side Errors (500, 503)
# =============================================================================


class CorruptDigestError(GarageError):
    """Raised when a stored password digest cannot be parsed."""

    code: str = "CORRUPT_DIGEST"
    message: str = "Stored credentials are corrupt"
    status_code: int = 500


class InvariantViolationError(GarageError):
    """Raised when an id-scoped mutation touched more than one row."""

    code: str = "INVARIANT_VIOLATION"
    message: str = "Unexpected number of rows affected"
    status_code: int = 500

    def __init__(
        self,
        entity: str | None = None,
        affected_rows: int | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if entity:
            details["entity"] = entity
        if affected_rows is not None:
            details["affected_rows"] = affected_rows
        super().__init__(details=details if details else None)


class StorageError(GarageError):
    """Raised when the relational store fails (connectivity or query)."""

    code: str = "STORAGE_ERROR"
    message: str = "Storage is unavailable"
    status_code: int = 503


class CacheError(GarageError):
    """Raised when the cache fails.

    The cache layer downgrades these to misses or logged warnings, so they
    are not expected to reach a response.
    """

    code: str = "CACHE_ERROR"
    message: str = "Cache is unavailable"
    status_code: int = 503
