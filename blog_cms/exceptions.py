"""
Custom exception classes for the blog CMS backend.

Not-found is never an exception: lookups return ``None`` and deletes return
``False``.  Everything else that can go wrong maps onto one of the classes
below.

Hierarchy:
    Exception
    +-- CMSBaseError (base for all CMS-specific errors)
        +-- ValidationError (also ValueError)
        +-- DatabaseError
        +-- PersistenceError
        +-- ConfigurationError
        +-- AuthenticationError
"""


# =============================================================================
# BASE EXCEPTION
# =============================================================================


class CMSBaseError(Exception):
    """Base exception for all CMS-specific errors."""

    pass


# =============================================================================
# CORE EXCEPTIONS
# =============================================================================


class ValidationError(CMSBaseError, ValueError):
    """Raised when caller-supplied post or user fields are missing or malformed.

    Always raised before any store mutation happens.
    """

    pass


class DatabaseError(CMSBaseError):
    """Raised when an operation against the remote database tier fails.

    The store never masks these: the database tier is treated as durable,
    so a failure there is a failure of that specific operation.

    Attributes:
        operation: Name of the store operation that failed.
    """

    def __init__(self, message: str, operation: str = ""):
        self.operation = operation
        if operation:
            message = f"{operation}: {message}"
        super().__init__(message)


class PersistenceError(CMSBaseError):
    """Raised when the local posts/users file cannot be read or written.

    Only ever raised inside the file backend, which catches it and degrades
    to its in-process mirror.

    Attributes:
        path: The file that could not be accessed.
    """

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot access {path}: {cause}")


class ConfigurationError(CMSBaseError):
    """Raised when system configuration is invalid."""

    pass


# =============================================================================
# AUTH EXCEPTIONS
# =============================================================================


class AuthenticationError(CMSBaseError):
    """Raised when a request needs an editor identity and has none."""

    pass


# =============================================================================
# PUBLIC API
# =============================================================================

__all__ = [
    # Base
    "CMSBaseError",
    # Core
    "ValidationError",
    "DatabaseError",
    "PersistenceError",
    "ConfigurationError",
    # Auth
    "AuthenticationError",
]
