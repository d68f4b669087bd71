"""
Custom Exception Classes for Hireflow

This module defines custom exceptions for consistent error responses
across the application. Every exception carries a machine-readable
``ErrorCode`` that clients can rely on.
"""

import enum
from typing import Any

from fastapi import status


class ErrorCode(str, enum.Enum):
    """Stable machine-readable error codes returned in error responses."""

    # Tenant routing
    TENANT_NOT_FOUND = "TENANT_NOT_FOUND"
    TENANT_RESOLUTION_ERROR = "TENANT_RESOLUTION_ERROR"
    TENANT_REQUIRED = "TENANT_REQUIRED"

    # Database
    DATABASE_ERROR = "DATABASE_ERROR"
    DATABASE_CONNECTION_FAILED = "DATABASE_CONNECTION_FAILED"
    DATABASE_NOT_INITIALIZED = "DATABASE_NOT_INITIALIZED"

    # Authentication & authorization
    AUTH_FAILED = "AUTH_FAILED"
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_ACCOUNT_LOCKED = "AUTH_ACCOUNT_LOCKED"
    AUTH_ACCOUNT_DISABLED = "AUTH_ACCOUNT_DISABLED"
    AUTH_TOKEN_EXPIRED = "AUTH_TOKEN_EXPIRED"
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    AUTH_PERMISSION_DENIED = "AUTH_PERMISSION_DENIED"

    # Resources & validation
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    VALIDATION_DUPLICATE_RESOURCE = "VALIDATION_DUPLICATE_RESOURCE"

    # Generic
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class HireflowError(Exception):
    """Base exception class for all Hireflow exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Tenant Routing Exceptions
# ============================================================================


class TenantNotFoundError(HireflowError):
    """Raised when a subdomain has no active tenant (missing or deactivated)"""

    def __init__(self, message: str = "Tenant not found or inactive"):
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code=ErrorCode.TENANT_NOT_FOUND,
        )


class TenantResolutionError(HireflowError):
    """Raised when tenant resolution fails for infrastructure reasons"""

    def __init__(self, message: str = "Internal server error in tenant resolution"):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code=ErrorCode.TENANT_RESOLUTION_ERROR,
        )


class TenantRequiredError(HireflowError):
    """Raised when a tenant-scoped route is called without a tenant subdomain"""

    def __init__(self, message: str = "This endpoint must be called on a tenant subdomain"):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=ErrorCode.TENANT_REQUIRED,
        )


# ============================================================================
# Database Exceptions
# ============================================================================


class DatabaseError(HireflowError):
    """Raised when a database operation fails"""

    def __init__(self, message: str = "A database error occurred", operation: str | None = None):
        details = {"operation": operation} if operation else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code=ErrorCode.DATABASE_ERROR,
            details=details,
        )


class DatabaseConnectionError(HireflowError):
    """Raised when a database handle cannot be opened"""

    def __init__(self, database: str, reason: str | None = None):
        message = f"Failed to connect to database '{database}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code=ErrorCode.DATABASE_CONNECTION_FAILED,
            details={"database": database},
        )
        self.database = database


class NotInitializedError(HireflowError):
    """Raised when the master handle is requested before initialize_master() succeeded"""

    def __init__(self, message: str = "Master database not initialized"):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code=ErrorCode.DATABASE_NOT_INITIALIZED,
        )


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class AuthenticationError(HireflowError):
    """Raised when authentication fails"""

    def __init__(
        self,
        message: str = "Authentication failed",
        error_code: ErrorCode = ErrorCode.AUTH_FAILED,
        status_code: int = status.HTTP_401_UNAUTHORIZED,
    ):
        super().__init__(message=message, status_code=status_code, error_code=error_code)


class InvalidCredentialsError(AuthenticationError):
    """Raised when login credentials are invalid"""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_INVALID_CREDENTIALS)


class AccountLockedError(AuthenticationError):
    """Raised when too many failed logins locked the account"""

    def __init__(
        self, message: str = "Account is temporarily locked due to too many failed login attempts"
    ):
        super().__init__(
            message=message,
            error_code=ErrorCode.AUTH_ACCOUNT_LOCKED,
            status_code=status.HTTP_423_LOCKED,
        )


class AccountDisabledError(AuthenticationError):
    """Raised when a deactivated account tries to sign in"""

    def __init__(self, message: str = "Account is deactivated"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_ACCOUNT_DISABLED)


class TokenExpiredError(AuthenticationError):
    """Raised when JWT token has expired"""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_TOKEN_EXPIRED)


class InvalidTokenError(AuthenticationError):
    """Raised when JWT token is invalid"""

    def __init__(self, message: str = "Invalid or malformed token"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_TOKEN_INVALID)


class AuthorizationError(HireflowError):
    """Raised when the caller lacks permission for an action"""

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code=ErrorCode.AUTH_PERMISSION_DENIED,
        )


# ============================================================================
# Resource & Validation Exceptions
# ============================================================================


class ResourceNotFoundError(HireflowError):
    """Base class for resource not found errors"""

    def __init__(self, resource_type: str, resource_id: Any | None = None):
        message = f"{resource_type} not found"
        if resource_id is not None:
            message = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code=ErrorCode.RESOURCE_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class ValidationError(HireflowError):
    """Raised when input validation fails"""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=ErrorCode.VALIDATION_FAILED,
            details=details,
        )


class DuplicateResourceError(HireflowError):
    """Raised when attempting to create a duplicate resource"""

    def __init__(self, resource_type: str, field: str, value: Any):
        super().__init__(
            message=f"{resource_type} with {field} '{value}' already exists",
            status_code=status.HTTP_409_CONFLICT,
            error_code=ErrorCode.VALIDATION_DUPLICATE_RESOURCE,
            details={"resource_type": resource_type, "field": field, "value": value},
        )
